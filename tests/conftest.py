from unittest.mock import AsyncMock, MagicMock

import pytest

from fastfood_server.models import AppSettings, AppwriteSettings, Customization, MenuItem, User
from fastfood_server.security import ClientRateLimit
from fastfood_server.storefront import Storefront


class FakeClock:
    """Manually advanced time source for the rate limiter."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def appwrite_settings():
    return AppwriteSettings(endpoint="https://appwrite.test/v1", project_id="proj")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limit(clock):
    return ClientRateLimit(5, 15 * 60, clock=clock)


@pytest.fixture
def user():
    return User.model_validate(
        {"$id": "u1", "accountID": "acc1", "email": "john.doe@example.com", "name": "John Doe"}
    )


@pytest.fixture
def burger():
    return MenuItem.model_validate(
        {
            "$id": "m1",
            "name": "Classic Burger",
            "description": "Beef patty with cheddar",
            "image_url": "https://img.test/burger.png",
            "price": "10.00",
            "categories": "cat-burgers",
        }
    )


@pytest.fixture
def customizations():
    return [
        Customization.model_validate({"$id": "c1", "name": "Extra Cheese", "price": "1.50", "type": "topping"}),
        Customization.model_validate({"$id": "c2", "name": "Fries", "price": "0.75", "type": "side"}),
    ]


@pytest.fixture
def mock_client(appwrite_settings, user, burger, customizations):
    client = MagicMock()
    client.settings = appwrite_settings
    client.create_user = AsyncMock(return_value=user)
    client.sign_in = AsyncMock(return_value={"$id": "session"})
    client.sign_out = AsyncMock()
    client.get_current_user = AsyncMock(return_value=user)
    client.get_menu = AsyncMock(return_value=[burger])
    client.get_categories = AsyncMock(return_value=[])
    client.get_menu_item = AsyncMock(return_value=burger)
    client.get_menu_customizations = AsyncMock(return_value=customizations)
    return client


@pytest.fixture
def storefront(mock_client, rate_limit):
    return Storefront(mock_client, AppSettings(), rate_limit)
