"""User actions of the storefront, guarded by validation and rate limiting.

Every action runs in the same order: in-flight check, validation, rate
limit (auth actions only), remote call, state update. Remote failures
reach callers only as RemoteFailure with a sanitized message.
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Iterable, Optional

from .auth import AuthStore
from .cart import CartStore
from .exceptions import ActionInProgress, RateLimited, RemoteFailure, ValidationRejected
from .fastfood_client import FastFoodClient
from .models import (
    AppSettings,
    AuthState,
    Cart,
    CartItemInput,
    Category,
    Customization,
    MenuItem,
    OrderConfirmation,
)
from .resource import AsyncResource
from .security import ClientRateLimit, auth_rate_limit, report_error, sanitize_error
from .validation import validate_email, validate_name, validate_password, validate_search_input

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Please add items to your cart before placing an order."
MAX_ITEM_QUANTITY = 99


def rate_limit_key(email: str) -> str:
    return email.strip().lower()


class Storefront:
    """Process-wide context tying the stores, the rate limiter and the client together."""

    def __init__(
        self,
        client: FastFoodClient,
        settings: Optional[AppSettings] = None,
        rate_limit: Optional[ClientRateLimit] = None,
    ) -> None:
        self.client = client
        self.settings = settings or AppSettings()
        self.debug = self.settings.debug
        self.rate_limit = rate_limit or auth_rate_limit
        self.auth = AuthStore(client, debug=self.debug)
        self.cart = CartStore()
        self.menu: AsyncResource[list[MenuItem]] = AsyncResource(
            client.get_menu, skip=True, debug=self.debug
        )
        self.categories: AsyncResource[list[Category]] = AsyncResource(
            client.get_categories, skip=True, debug=self.debug
        )
        self._in_flight: set[str] = set()

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncIterator[None]:
        if action in self._in_flight:
            logger.info(f"Ignoring {action}: previous request still running")
            raise ActionInProgress(action)
        self._in_flight.add(action)
        try:
            yield
        finally:
            self._in_flight.discard(action)

    def _check_rate_limit(self, email: str) -> None:
        key = rate_limit_key(email)
        if not self.rate_limit.is_allowed(key):
            remaining = self.rate_limit.get_remaining_time(key)
            logger.warning(f"Auth attempts rate limited, {remaining:.0f}s remaining")
            raise RateLimited(remaining)

    def _remote_failure(self, error: Exception, action: str, email: Optional[str] = None) -> RemoteFailure:
        message = sanitize_error(error, debug=self.debug)
        report_error(error, action, email=email, debug=self.debug)
        logger.info(f"{action} failed: {message}")
        return RemoteFailure(message)

    async def start(self) -> AuthState:
        """Restore the session, if any, at process start."""
        await self.auth.fetch_authenticated_user()
        return self.auth.get_state()

    # Auth

    async def sign_in(self, email: str, password: str) -> AuthState:
        async with self._guard("sign_in"):
            errors = {}
            email_result = validate_email(email)
            if not email_result.is_valid:
                errors["email"] = email_result.message
            if not password:
                errors["password"] = "Password is required"
            if errors:
                raise ValidationRejected(errors)

            self._check_rate_limit(email)

            try:
                await self.client.sign_in(email, password)
            except Exception as e:
                raise self._remote_failure(e, "sign_in", email) from e

            await self.auth.fetch_authenticated_user()
            return self.auth.get_state()

    async def sign_up(self, name: str, email: str, password: str) -> AuthState:
        async with self._guard("sign_up"):
            errors = {}
            for field, result in (
                ("name", validate_name(name)),
                ("email", validate_email(email)),
                ("password", validate_password(password)),
            ):
                if not result.is_valid:
                    errors[field] = result.message
            if errors:
                raise ValidationRejected(errors)

            self._check_rate_limit(email)

            try:
                await self.client.create_user(email, password, name)
                await self.client.sign_in(email, password)
            except Exception as e:
                raise self._remote_failure(e, "sign_up", email) from e

            await self.auth.fetch_authenticated_user()
            return self.auth.get_state()

    async def logout(self) -> AuthState:
        async with self._guard("logout"):
            await self.auth.logout()
            return self.auth.get_state()

    # Menu

    async def search_menu(self, query: str = "", category: Optional[str] = None) -> list[MenuItem]:
        """
        Search the menu by text and category.

        A query that needed cleaning is rejected instead of being searched in
        its cleaned form, so the user is told characters were removed and can
        resubmit. Accepted queries are always searched with the cleaned text.

        Raises:
            ValidationRejected: If the query contained characters that had to be removed
            RemoteFailure: If the menu could not be loaded
        """
        async with self._guard("search"):
            result = validate_search_input(query)
            if not result.is_valid:
                raise ValidationRejected({"query": result.message})

            await self.menu.refetch({"category": category, "query": result.sanitized or None})
            if self.menu.error:
                raise RemoteFailure(self.menu.error)
            return self.menu.data or []

    async def get_categories(self) -> list[Category]:
        await self.categories.refetch()
        if self.categories.error:
            raise RemoteFailure(self.categories.error)
        return self.categories.data or []

    async def get_menu_item(self, menu_id: str) -> tuple[MenuItem, list[Customization]]:
        """Menu item with the customizations it offers."""
        try:
            item = await self.client.get_menu_item(menu_id)
            customizations = await self.client.get_menu_customizations(menu_id)
        except Exception as e:
            raise self._remote_failure(e, "get_menu_item") from e
        return item, customizations

    # Cart

    async def add_to_cart(
        self, menu_id: str, customization_ids: Iterable[str] = (), quantity: int = 1
    ) -> Cart:
        """
        Add ``quantity`` units of a menu item with the selected customizations.

        The unit price is the menu price plus the selected customization prices.
        """
        async with self._guard("add_to_cart"):
            if not 1 <= quantity <= MAX_ITEM_QUANTITY:
                raise ValidationRejected(
                    {"quantity": f"Quantity must be between 1 and {MAX_ITEM_QUANTITY}"}
                )

            item, available = await self.get_menu_item(menu_id)
            by_id = {c.id: c for c in available}

            selected = []
            for customization_id in dict.fromkeys(customization_ids):
                if customization_id not in by_id:
                    raise ValidationRejected(
                        {"customizations": f"Unknown customization: {customization_id}"}
                    )
                selected.append(by_id[customization_id].to_cart())

            image_url = item.image_url
            if image_url:
                image_url = f"{image_url}?project={self.client.settings.project_id}"

            candidate = CartItemInput(
                id=item.id,
                name=item.name,
                price=item.price + sum((c.price for c in selected), Decimal("0")),
                image_url=image_url,
                customizations=selected,
            )
            self.cart.add_item(candidate, quantity)

            return self.cart.get_state()

    def place_order(self) -> OrderConfirmation:
        """
        Confirm the order locally and empty the cart. Nothing is sent anywhere.

        Raises:
            ValidationRejected: If the cart is empty
        """
        summary = self.cart.checkout_summary()
        if summary.total_items == 0:
            raise ValidationRejected({"cart": EMPTY_CART_MESSAGE})

        self.cart.clear_cart()
        logger.info(f"Order placed: {summary.total_items} items, ${summary.total}")
        return OrderConfirmation(item_count=summary.total_items, total=summary.total)
