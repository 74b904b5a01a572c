"""Stripe payment provider."""

from typing import Any

import stripe

from paybridge.core.exceptions import (
    InvalidSignatureError,
    MissingSecretError,
    MissingSignatureError,
    PayloadError,
)
from paybridge.payments.providers.base import HttpPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PortalRequest, VerificationResult, WebhookRequest
from paybridge.payments.signature import parse_json_object

SIGNATURE_HEADER = "stripe-signature"


class StripePaymentProvider(HttpPaymentProvider):
    """Stripe Checkout and Billing Portal over the form-encoded REST API.

    Webhooks are verified with ``stripe.Webhook.construct_event`` using
    ``WEBHOOK_TOLERANCE_SECONDS`` as the replay window.
    """

    name = "stripe"
    api_url = "https://api.stripe.com/v1"
    webhook_secret_setting = "stripe_webhook_secret"
    success_status = 200
    invalid_signature_status = 400
    handled_events = frozenset(
        {
            "checkout.session.completed",
            "customer.subscription.created",
            "customer.subscription.updated",
            "customer.subscription.deleted",
        }
    )

    def verify_webhook(self, request: WebhookRequest) -> VerificationResult:
        secret = self._webhook_secret()
        if not secret:
            return VerificationResult.invalid(MissingSecretError())

        header = request.headers.get(SIGNATURE_HEADER)
        if not header:
            return VerificationResult.invalid(MissingSignatureError(message="Missing Stripe-Signature header"))

        try:
            stripe.Webhook.construct_event(
                request.body,
                header,
                secret,
                tolerance=self.settings.webhook_tolerance_seconds,
            )
        except ValueError as e:
            return VerificationResult.invalid(PayloadError(message=f"Invalid Stripe webhook payload: {e}"))
        except stripe.SignatureVerificationError as e:
            return VerificationResult.invalid(InvalidSignatureError(message=f"Invalid Stripe signature: {e}"))

        # Handlers get the plain JSON object, not a stripe.Event
        try:
            return VerificationResult(is_valid=True, payload=parse_json_object(request.body))
        except PayloadError as e:
            return VerificationResult.invalid(e)

    def event_data(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = payload.get("data") or {}
        return data.get("object") or {}

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._require('stripe_secret_key')}"}

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        form: dict[str, Any] = {
            "mode": "subscription" if request.is_subscription else "payment",
            "success_url": request.redirect_url or "",
            "line_items[0][price]": request.product_id,
            "line_items[0][quantity]": str(request.seats),
        }

        if request.customer_id:
            form["customer"] = request.customer_id
        elif request.email:
            form["customer_email"] = request.email

        for key, value in request.metadata().items():
            form[f"metadata[{key}]"] = value

        if request.trial_days:
            form["subscription_data[trial_period_days]"] = str(request.trial_days)

        session = await self._request("POST", "/checkout/sessions", data=form)
        return session.get("url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        form = {"customer": request.customer_id}
        if request.redirect_url:
            form["return_url"] = request.redirect_url

        session = await self._request("POST", "/billing_portal/sessions", data=form)
        return session.get("url")
