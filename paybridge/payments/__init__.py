"""Payment processing module."""

from paybridge.payments.providers import ProviderRegistry, get_payment_provider
from paybridge.payments.schemas import (
    ChargeResult,
    CheckoutRequest,
    PaymentType,
    PortalRequest,
    RecurringChargeRequest,
    SavedCardToken,
    VerificationResult,
    WebhookEvent,
    WebhookRequest,
    WebhookResponse,
)

__all__ = [
    "ChargeResult",
    "CheckoutRequest",
    "PaymentType",
    "PortalRequest",
    "ProviderRegistry",
    "RecurringChargeRequest",
    "SavedCardToken",
    "VerificationResult",
    "WebhookEvent",
    "WebhookRequest",
    "WebhookResponse",
    "get_payment_provider",
]
