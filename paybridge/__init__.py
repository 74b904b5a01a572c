"""Unified checkout, customer portal and webhook handling across payment providers."""

from paybridge.payments import (
    CheckoutRequest,
    PaymentType,
    PortalRequest,
    ProviderRegistry,
    WebhookRequest,
    WebhookResponse,
    get_payment_provider,
)

__version__ = "0.1.0"

__all__ = [
    "CheckoutRequest",
    "PaymentType",
    "PortalRequest",
    "ProviderRegistry",
    "WebhookRequest",
    "WebhookResponse",
    "get_payment_provider",
]
