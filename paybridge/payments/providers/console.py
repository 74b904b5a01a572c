"""Console payment provider for local development."""

import logging

from paybridge.payments.providers.base import PaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest, WebhookRequest, WebhookResponse

logger = logging.getLogger(__name__)


class ConsolePaymentProvider(PaymentProvider):
    """Logs every call and returns fixed example URLs. No network, no secrets."""

    name = "console"

    def __init__(self, base_url: str = "https://example.com") -> None:
        self.base_url = base_url.rstrip("/")

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        logger.info(
            "Creating checkout link: type=%s, product_id=%s, seats=%d",
            request.payment_type.value,
            request.product_id,
            request.seats,
        )
        return f"{self.base_url}/checkout/mock-session-id"

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        logger.info("Creating customer portal link: customer_id=%s", request.customer_id)
        return f"{self.base_url}/portal/mock-session-id"

    async def handle_webhook(self, request: WebhookRequest) -> WebhookResponse:
        logger.info("Received webhook: method=%s, bytes=%d", request.method, len(request.body))
        return WebhookResponse(200)
