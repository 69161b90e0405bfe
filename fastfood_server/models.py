"""Data models for the fast food storefront."""

import os
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

TWO_PLACES = Decimal("0.01")


class CartCustomization(BaseModel):
    """An add-on selected for a cart line."""

    id: str = Field(description="Customization ID")
    name: str = Field(description="Customization name")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Price delta in USD")
    type: Optional[str] = Field(None, description="Customization type (topping, side, ...)")


class CartItemInput(BaseModel):
    """Candidate line passed to the cart when "add to cart" fires."""

    id: str = Field(description="Menu item ID")
    name: str = Field(description="Menu item name")
    price: Decimal = Field(ge=0, description="Unit price including selected customizations")
    image_url: str = Field(default="", description="Image reference")
    customizations: list[CartCustomization] = Field(default_factory=list)

    @property
    def customization_key(self) -> tuple[str, ...]:
        return tuple(sorted(c.id for c in self.customizations))


class CartItem(CartItemInput):
    """Represents a line in the shopping cart."""

    quantity: int = Field(default=1, gt=0, description="Quantity of the line")

    @computed_field
    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def matches(self, candidate: CartItemInput) -> bool:
        """Same cart line: same menu item and same set of customizations."""
        return self.id == candidate.id and self.customization_key == candidate.customization_key


class Cart(BaseModel):
    """Read-only snapshot of the shopping cart."""

    items: list[CartItem] = Field(default_factory=list, description="Cart lines in insertion order")
    total: Decimal = Field(default=Decimal("0"), description="Total cart value")
    item_count: int = Field(default=0, description="Total quantity across lines")


class CheckoutSummary(BaseModel):
    """Payment summary shown on the cart screen."""

    total_items: int = 0
    subtotal: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("5.00")
    discount: Decimal = Decimal("0.50")

    @computed_field
    @property
    def total(self) -> Decimal:
        return (self.subtotal + self.delivery_fee - self.discount).quantize(TWO_PLACES)


class OrderConfirmation(BaseModel):
    """Local confirmation of a placed order."""

    item_count: int
    total: Decimal
    message: str = "Your order has been successfully placed. Thank you for choosing us!"


class _Document(BaseModel):
    """Base for records read from the document store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="$id", description="Document ID")


class Category(_Document):
    name: str
    description: str = ""


class Customization(_Document):
    name: str
    price: Decimal = Field(default=Decimal("0"), ge=0)
    type: Optional[str] = None

    def to_cart(self) -> CartCustomization:
        return CartCustomization(id=self.id, name=self.name, price=self.price, type=self.type)


class MenuItem(_Document):
    name: str
    description: str = ""
    image_url: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    rating: Optional[float] = None
    calories: Optional[int] = None
    protein: Optional[int] = None
    category_id: Optional[str] = Field(None, alias="categories")

    @field_validator("category_id", mode="before")
    @classmethod
    def _relationship_id(cls, value: Any) -> Any:
        # Relationship attributes may come back expanded
        if isinstance(value, dict):
            return value.get("$id")
        return value


class User(_Document):
    """User profile document linked to an account."""

    account_id: str = Field(alias="accountID")
    email: str
    name: str
    avatar: Optional[str] = None


class AuthCredentials(BaseModel):
    """Authentication credentials."""

    email: str
    password: str


class SignUpForm(AuthCredentials):
    name: str


class ValidationResult(BaseModel):
    is_valid: bool
    message: Optional[str] = None


class SearchValidationResult(ValidationResult):
    sanitized: str = ""


def _env_bool(name: str, default: bool = False) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes")


class AppwriteSettings(BaseModel):
    """Connection settings for the Appwrite project backing the store."""

    endpoint: str
    project_id: str
    platform: str = "com.jsm.foodordering"
    database_id: str = "68af02a2003afad28b60"
    bucket_id: str = "68aef974000d4515687c"
    user_collection_id: str = "68af02f1001dcd9eb218"
    categories_collection_id: str = "68af04e40006697dc524"
    menu_collection_id: str = "68af0573000c21001cd4"
    customizations_collection_id: str = "68af072400316baf777e"
    menu_customizations_collection_id: str = "68af0817000bbbb40673"

    @classmethod
    def from_env(cls) -> "AppwriteSettings":
        """
        Build settings from APPWRITE_* environment variables.

        Raises:
            ValueError: If APPWRITE_ENDPOINT or APPWRITE_PROJECT_ID is missing
        """
        endpoint = os.environ.get("APPWRITE_ENDPOINT")
        project_id = os.environ.get("APPWRITE_PROJECT_ID")
        if not endpoint or not project_id:
            raise ValueError("APPWRITE_ENDPOINT and APPWRITE_PROJECT_ID must be set")

        overrides = {}
        for field_name in cls.model_fields:
            if field_name in ("endpoint", "project_id"):
                continue
            value = os.environ.get(f"APPWRITE_{field_name.upper()}")
            if value:
                overrides[field_name] = value

        return cls(endpoint=endpoint.rstrip("/"), project_id=project_id, **overrides)


class AppSettings(BaseModel):
    """Runtime settings for the storefront process."""

    debug: bool = False
    rate_limit_max_attempts: int = Field(default=5, gt=0)
    rate_limit_window_minutes: int = Field(default=15, gt=0)
    sentry_dsn: str = ""
    sentry_environment: str = "development"

    @classmethod
    def from_env(cls) -> "AppSettings":
        return cls(
            debug=_env_bool("FASTFOOD_DEBUG"),
            rate_limit_max_attempts=int(os.environ.get("FASTFOOD_RATE_LIMIT_MAX_ATTEMPTS", "5")),
            rate_limit_window_minutes=int(os.environ.get("FASTFOOD_RATE_LIMIT_WINDOW_MINUTES", "15")),
            sentry_dsn=os.environ.get("SENTRY_DSN", "").strip(),
            sentry_environment=os.environ.get("SENTRY_ENVIRONMENT", "development").strip(),
        )


class AuthState(BaseModel):
    """Snapshot of the process-wide authentication state."""

    is_authenticated: bool = False
    user: Optional[User] = None
    is_loading: bool = False

    @property
    def status(self) -> str:
        if self.is_loading:
            return "loading"
        return "authenticated" if self.is_authenticated else "unauthenticated"
