"""Payment providers module."""

from functools import lru_cache

from paybridge.payments.providers.base import HttpPaymentProvider, PaymentProvider
from paybridge.payments.providers.registry import ProviderRegistry


@lru_cache(maxsize=1)
def get_registry() -> ProviderRegistry:
    """Process-wide registry built from environment settings."""
    return ProviderRegistry()


def get_payment_provider(name: str | None = None) -> PaymentProvider:
    """Factory function to get a configured payment provider.

    Returns provider based on ``name`` or the PAYMENT_PROVIDER setting.

    Raises:
        ConfigurationError: If the provider name is unknown
    """
    return get_registry().resolve(name)


__all__ = [
    "HttpPaymentProvider",
    "PaymentProvider",
    "ProviderRegistry",
    "get_payment_provider",
    "get_registry",
]
