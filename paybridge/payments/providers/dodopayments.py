"""DodoPayments payment provider."""

from typing import Any

from paybridge.payments.providers.base import HttpPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest
from paybridge.payments.signature import Canonicalization, SignatureScheme


class DodoPaymentsPaymentProvider(HttpPaymentProvider):
    """DodoPayments checkout sessions and customer portal.

    Webhook signature: hex HMAC-SHA256 over
    ``{webhook-id}.{webhook-timestamp}.{body}``.
    """

    name = "dodopayments"
    webhook_secret_setting = "dodo_payments_webhook_secret"
    signature_scheme = SignatureScheme(
        signature_header="webhook-signature",
        id_header="webhook-id",
        timestamp_header="webhook-timestamp",
        canonicalization=Canonicalization.COMPOSITE,
    )
    success_status = 204
    invalid_signature_status = 401
    handled_events = frozenset(
        {
            "checkout.session.completed",
            "subscription.created",
            "subscription.updated",
            "subscription.cancelled",
        }
    )

    def _base_url(self) -> str:
        if self.settings.is_production:
            return "https://api.dodopayments.com/v1"
        return "https://api.dodopayments.com/test/v1"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._require('dodo_payments_api_key')}"}

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        if request.customer_id:
            customer: dict[str, str] = {"customer_id": request.customer_id}
        else:
            customer = {"email": request.email or "", "name": request.name or ""}

        body: dict[str, Any] = {
            "product_cart": [{"product_id": request.product_id, "quantity": request.seats}],
            "return_url": request.redirect_url or "",
            "customer": customer,
            "metadata": request.metadata(),
        }
        if request.trial_days:
            body["subscription_data"] = {"trial_period_days": request.trial_days}

        result = await self._request("POST", "/checkout-sessions", json=body)
        return result.get("checkout_url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        result = await self._request("POST", f"/customers/{request.customer_id}/portal")
        return result.get("link")
