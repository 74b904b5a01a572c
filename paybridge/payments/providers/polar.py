"""Polar payment provider."""

import base64
import json
from typing import Any

from standardwebhooks.webhooks import Webhook, WebhookVerificationError

from paybridge.core.exceptions import (
    InvalidSignatureError,
    MissingSecretError,
    MissingSignatureError,
    PayloadError,
)
from paybridge.payments.providers.base import HttpPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest, VerificationResult, WebhookRequest

WEBHOOK_HEADERS = ("webhook-id", "webhook-timestamp", "webhook-signature")


class PolarPaymentProvider(HttpPaymentProvider):
    """Polar checkouts and customer sessions.

    Polar signs webhooks with Standard Webhooks; verification is delegated
    to the ``standardwebhooks`` library, keyed the way Polar's SDK keys it
    (the raw secret, base64-encoded). The library enforces its own
    five-minute timestamp window.
    """

    name = "polar"
    api_url = "https://api.polar.sh/v1"
    webhook_secret_setting = "polar_webhook_secret"
    success_status = 202
    invalid_signature_status = 401
    handled_events = frozenset(
        {
            "order.created",
            "subscription.created",
            "subscription.updated",
            "subscription.canceled",
        }
    )

    def verify_webhook(self, request: WebhookRequest) -> VerificationResult:
        secret = self._webhook_secret()
        if not secret:
            return VerificationResult.invalid(MissingSecretError())

        for header in WEBHOOK_HEADERS:
            if not request.headers.get(header):
                return VerificationResult.invalid(MissingSignatureError(message=f"Missing {header} header"))

        try:
            body = request.body.decode()
        except UnicodeDecodeError as e:
            return VerificationResult.invalid(PayloadError(message=f"Webhook body is not UTF-8: {e}"))

        webhook = Webhook(base64.b64encode(secret.encode()).decode())
        try:
            payload = webhook.verify(body, dict(request.headers))
        except WebhookVerificationError as e:
            return VerificationResult.invalid(InvalidSignatureError(message=f"Invalid Polar signature: {e}"))
        except json.JSONDecodeError as e:
            return VerificationResult.invalid(PayloadError(message=f"Webhook body is not valid JSON: {e}"))
        except ValueError as e:
            # "v1,<sig>" entries that are not comma separated or not base64
            return VerificationResult.invalid(MissingSignatureError(message=f"Malformed webhook-signature: {e}"))

        if not isinstance(payload, dict):
            return VerificationResult.invalid(PayloadError(message="Webhook body is not a JSON object"))
        return VerificationResult(is_valid=True, payload=payload)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._require('polar_access_token')}"}

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        body: dict[str, Any] = {
            "products": [request.product_id],
            "success_url": request.redirect_url or "",
            "metadata": request.metadata(),
        }
        if request.customer_id:
            body["customer_id"] = request.customer_id
        if request.email:
            body["customer_email"] = request.email
        if request.name:
            body["customer_name"] = request.name

        result = await self._request("POST", "/checkouts", json=body)
        return result.get("url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        result = await self._request(
            "POST",
            "/customer-sessions",
            json={"customer_id": request.customer_id},
        )
        return result.get("customer_portal_url")
