"""Custom payment provider built from caller-supplied callables."""

import logging
from collections.abc import Awaitable, Callable

from paybridge.core.exceptions import UnsupportedOperationError
from paybridge.payments.providers.base import PaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest, WebhookRequest, WebhookResponse

logger = logging.getLogger(__name__)

CheckoutHandler = Callable[[CheckoutRequest], Awaitable[str | None]]
PortalHandler = Callable[[PortalRequest], Awaitable[str | None]]
WebhookHandler = Callable[[WebhookRequest], Awaitable[WebhookResponse]]


class CustomPaymentProvider(PaymentProvider):
    """Plug in any provider without subclassing.

    Operations without a callable raise UnsupportedOperationError; a missing
    webhook handler answers 501.
    """

    name = "custom"

    def __init__(
        self,
        checkout: CheckoutHandler | None = None,
        portal: PortalHandler | None = None,
        webhook: WebhookHandler | None = None,
    ) -> None:
        self._checkout = checkout
        self._portal = portal
        self._webhook = webhook

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        if self._checkout is None:
            raise UnsupportedOperationError(message="Custom create_checkout_link not implemented")
        return await self._checkout(request)

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        if self._portal is None:
            raise UnsupportedOperationError(message="Custom create_customer_portal_link not implemented")
        return await self._portal(request)

    async def handle_webhook(self, request: WebhookRequest) -> WebhookResponse:
        if self._webhook is None:
            return WebhookResponse(501, "Custom webhook handler not implemented")
        try:
            return await self._webhook(request)
        except Exception:
            logger.exception("Custom webhook handler failed")
            return WebhookResponse(500, "Webhook processing failed")
