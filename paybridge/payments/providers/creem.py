"""Creem payment provider."""

from typing import Any

from paybridge.payments.providers.base import HttpPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest
from paybridge.payments.signature import SignatureScheme


class CreemPaymentProvider(HttpPaymentProvider):
    """Creem checkouts and billing portal."""

    name = "creem"
    webhook_secret_setting = "creem_webhook_secret"
    signature_scheme = SignatureScheme(signature_header="creem-signature")
    success_status = 204
    invalid_signature_status = 400
    post_only = True
    handled_events = frozenset(
        {
            "checkout.completed",
            "subscription.active",
            "subscription.canceled",
            "subscription.expired",
        }
    )

    def _base_url(self) -> str:
        if self.settings.is_production:
            return "https://api.creem.io/v1"
        return "https://test-api.creem.io/v1"

    def _auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self._require("creem_api_key")}

    def event_type(self, payload: dict[str, Any]) -> str:
        return str(payload["eventType"])

    def event_data(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = payload.get("object")
        return data if isinstance(data, dict) else {}

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        body: dict[str, Any] = {
            "product_id": request.product_id,
            "units": request.seats,
            "metadata": {
                "organization_id": request.organization_id,
                "user_id": request.user_id,
            },
            "customer": {"email": request.email},
        }
        if request.redirect_url:
            body["success_url"] = request.redirect_url

        result = await self._request("POST", "/checkouts", json=body)
        return result.get("checkout_url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        result = await self._request(
            "POST",
            "/customers/billing",
            json={"customer_id": request.customer_id},
        )
        return result.get("customer_portal_link")
