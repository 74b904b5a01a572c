"""Payment schemas shared by all providers."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from paybridge.core.exceptions import AppException


class PaymentType(str, Enum):
    """Checkout payment type."""

    SUBSCRIPTION = "subscription"
    ONE_TIME = "one-time"


class CheckoutRequest(BaseModel):
    """Parameters for creating a checkout link."""

    payment_type: PaymentType = Field(..., description="Subscription or one-time payment")
    product_id: str = Field(..., min_length=1, description="Product, price or variant ID")
    email: str | None = Field(default=None, description="Customer email")
    name: str | None = Field(default=None, description="Customer full name")
    redirect_url: str | None = Field(default=None, description="Redirect URL after checkout")
    customer_id: str | None = Field(default=None, description="Existing provider customer ID")
    organization_id: str | None = Field(default=None, description="Organization ID for metadata")
    user_id: str | None = Field(default=None, description="User ID for metadata")
    trial_period_days: int | None = Field(
        default=None,
        ge=1,
        description="Trial period in days (subscriptions only)",
    )
    seats: int = Field(default=1, ge=1, description="Number of seats/quantity")

    @property
    def is_subscription(self) -> bool:
        return self.payment_type == PaymentType.SUBSCRIPTION

    @property
    def trial_days(self) -> int | None:
        """Trial period if it applies to this checkout."""
        return self.trial_period_days if self.is_subscription else None

    def metadata(self) -> dict[str, str]:
        """Organization/user metadata forwarded to the provider."""
        metadata: dict[str, str] = {}
        if self.organization_id:
            metadata["organization_id"] = self.organization_id
        if self.user_id:
            metadata["user_id"] = self.user_id
        return metadata


class PortalRequest(BaseModel):
    """Parameters for creating a customer portal link."""

    customer_id: str = Field(..., min_length=1, description="Provider customer ID")
    subscription_id: str | None = Field(default=None, description="Subscription ID")
    redirect_url: str | None = Field(default=None, description="Redirect URL after portal")


class SavedCardToken(BaseModel):
    """Tap saved-card identifiers captured from a CHARGE.CAPTURED webhook.

    The caller persists these; paybridge never stores them.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: str
    card_id: str
    payment_agreement_id: str


class RecurringChargeRequest(BaseModel):
    """Merchant-initiated charge against a saved card."""

    token: SavedCardToken
    amount: Decimal = Field(..., gt=0, description="Amount to charge")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    description: str | None = Field(default=None, description="Charge description")
    metadata: dict[str, str] | None = Field(default=None, description="Metadata for your records")


class TapChargeRequest(BaseModel):
    """Interactive Tap charge, optionally saving the card."""

    amount: Decimal = Field(..., ge=0, description="Amount to charge")
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    email: str | None = Field(default=None, description="Customer email")
    name: str | None = Field(default=None, description="Customer full name")
    save_card: bool = Field(default=False, description="Save card for future charges")
    redirect_url: str | None = Field(default=None, description="Redirect URL after payment")
    description: str | None = Field(default=None, description="Charge description")
    metadata: dict[str, str] | None = Field(default=None, description="Metadata")


class TapPrice(BaseModel):
    """Price of a product sold through Tap checkout."""

    amount: Decimal = Field(..., ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)


class ChargeResult(BaseModel):
    """Charge outcome. Status is provider-defined and surfaced as-is."""

    charge_id: str
    status: str | None = None
    url: str | None = None


class _Headers(dict):
    """Header mapping with case-insensitive lookup."""

    def __init__(self, headers: Mapping[str, str] | None = None) -> None:
        super().__init__((k.lower(), v) for k, v in (headers or {}).items())

    def get(self, key: str, default: Any = None) -> Any:  # type: ignore[override]
        return super().get(key.lower(), default)

    def __getitem__(self, key: str) -> str:
        return super().__getitem__(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and super().__contains__(key.lower())


@dataclass
class WebhookRequest:
    """Inbound webhook call as received by the HTTP layer."""

    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "POST"

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode()
        self.headers = _Headers(self.headers)


@dataclass
class WebhookResponse:
    """Response returned to the provider."""

    status_code: int
    body: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class VerificationResult:
    """Outcome of webhook signature verification."""

    is_valid: bool
    payload: dict[str, Any] | None = None
    error: AppException | None = None

    @classmethod
    def invalid(cls, error: AppException) -> "VerificationResult":
        return cls(is_valid=False, error=error)


@dataclass
class WebhookEvent:
    """Authentic webhook event handed to dispatch hooks."""

    provider: str
    type: str
    data: dict[str, Any]
    payload: dict[str, Any]
