"""Provider registry: provider name -> adapter instance."""

import logging
from collections.abc import Callable, Mapping

from paybridge.core.config import Settings, get_settings
from paybridge.core.exceptions import ConfigurationError
from paybridge.payments.providers.base import PaymentProvider
from paybridge.payments.schemas import TapPrice

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Settings], PaymentProvider]


def _default_factories(tap_prices: Mapping[str, TapPrice]) -> dict[str, ProviderFactory]:
    from paybridge.payments.providers.console import ConsolePaymentProvider
    from paybridge.payments.providers.creem import CreemPaymentProvider
    from paybridge.payments.providers.custom import CustomPaymentProvider
    from paybridge.payments.providers.dodopayments import DodoPaymentsPaymentProvider
    from paybridge.payments.providers.lemonsqueezy import LemonSqueezyPaymentProvider
    from paybridge.payments.providers.polar import PolarPaymentProvider
    from paybridge.payments.providers.stripe import StripePaymentProvider
    from paybridge.payments.providers.tap import TapPaymentProvider

    return {
        "stripe": lambda settings: StripePaymentProvider(settings=settings),
        "lemonsqueezy": lambda settings: LemonSqueezyPaymentProvider(settings=settings),
        "polar": lambda settings: PolarPaymentProvider(settings=settings),
        "creem": lambda settings: CreemPaymentProvider(settings=settings),
        "dodopayments": lambda settings: DodoPaymentsPaymentProvider(settings=settings),
        "tap": lambda settings: TapPaymentProvider(settings=settings, prices=tap_prices),
        "console": lambda settings: ConsolePaymentProvider(),
        "custom": lambda settings: CustomPaymentProvider(),
    }


class ProviderRegistry:
    """Maps provider names to adapters.

    Adapters are built on first resolve and cached per registry. Building an
    adapter never reads credentials, so an unconfigured provider only fails
    when one of its operations is called.

    Tap has no hosted product catalogue, so its checkout prices are passed
    in as ``tap_prices`` (product ID -> TapPrice).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        tap_prices: Mapping[str, TapPrice] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._factories = _default_factories(tap_prices or {})
        self._instances: dict[str, PaymentProvider] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register or replace a provider factory."""
        key = name.lower()
        self._factories[key] = factory
        self._instances.pop(key, None)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, name: str | None = None) -> PaymentProvider:
        """Get the adapter for a provider name.

        Args:
            name: Provider name, defaults to settings.payment_provider

        Raises:
            ConfigurationError: If no provider is registered under the name
        """
        key = (name or self.settings.payment_provider).lower()
        provider = self._instances.get(key)
        if provider is not None:
            return provider

        factory = self._factories.get(key)
        if factory is None:
            raise ConfigurationError(
                message=f"Unknown payment provider: {key}",
                details={"provider": key, "available": self.names()},
            )

        provider = factory(self.settings)
        self._instances[key] = provider
        logger.debug("Payment provider resolved: %s", key)
        return provider
