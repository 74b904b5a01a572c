"""LemonSqueezy payment provider."""

from typing import Any

from paybridge.core.exceptions import ConfigurationError
from paybridge.payments.providers.base import HttpPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest
from paybridge.payments.signature import SignatureScheme

JSON_API = "application/vnd.api+json"


class LemonSqueezyPaymentProvider(HttpPaymentProvider):
    """LemonSqueezy checkouts over the JSON:API endpoints.

    ``product_id`` is a variant ID.
    """

    name = "lemonsqueezy"
    api_url = "https://api.lemonsqueezy.com/v1"
    webhook_secret_setting = "lemonsqueezy_webhook_secret"
    signature_scheme = SignatureScheme(signature_header="x-signature")
    success_status = 204
    invalid_signature_status = 400
    handled_events = frozenset(
        {
            "subscription_created",
            "subscription_updated",
            "subscription_cancelled",
            "subscription_expired",
            "order_created",
        }
    )

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._require('lemonsqueezy_api_key')}",
            "Accept": JSON_API,
        }

    def event_type(self, payload: dict[str, Any]) -> str:
        return str(payload["meta"]["event_name"])

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        store_id = self._require("lemonsqueezy_store_id")
        try:
            variant_id = int(request.product_id)
        except ValueError as e:
            raise ConfigurationError(
                message=f"LemonSqueezy variant ID must be numeric: {request.product_id!r}",
                details={"provider": self.name},
            ) from e

        body = {
            "data": {
                "type": "checkouts",
                "attributes": {
                    "product_options": {
                        "redirect_url": request.redirect_url,
                        "enabled_variants": [variant_id],
                    },
                    "checkout_data": {
                        "email": request.email,
                        "name": request.name,
                        "variant_quantities": [
                            {"variant_id": variant_id, "quantity": request.seats},
                        ],
                        "custom": request.metadata(),
                    },
                },
                "relationships": {
                    "store": {"data": {"type": "stores", "id": store_id}},
                    "variant": {"data": {"type": "variants", "id": request.product_id}},
                },
            }
        }

        result = await self._request(
            "POST",
            "/checkouts",
            json=body,
            headers={"Content-Type": JSON_API},
        )
        return _attributes(result).get("url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        result = await self._request("GET", f"/customers/{request.customer_id}")
        urls = _attributes(result).get("urls") or {}
        return urls.get("customer_portal")


def _attributes(result: dict[str, Any]) -> dict[str, Any]:
    """``data.attributes`` of a JSON:API document, empty when absent."""
    data = result.get("data")
    if not isinstance(data, dict):
        return {}
    attributes = data.get("attributes")
    return attributes if isinstance(attributes, dict) else {}
