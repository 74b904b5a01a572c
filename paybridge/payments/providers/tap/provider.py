"""Tap payment provider."""

import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from paybridge.core.config import Settings
from paybridge.core.exceptions import ConfigurationError, ProviderError, UnsupportedOperationError
from paybridge.payments.providers.base import EventHandler, HttpPaymentProvider
from paybridge.payments.providers.tap.signature import TAP_SIGNATURE_SCHEME
from paybridge.payments.providers.tap.subscriptions import extract_saved_card
from paybridge.payments.schemas import (
    ChargeResult,
    CheckoutRequest,
    PortalRequest,
    RecurringChargeRequest,
    SavedCardToken,
    TapChargeRequest,
    TapPrice,
    WebhookEvent,
)

logger = logging.getLogger(__name__)

ALL_SOURCES = "src_all"


def _split_name(name: str | None) -> tuple[str, str]:
    if not name:
        return "", ""
    first, _, last = name.partition(" ")
    return first, last


class TapPaymentProvider(HttpPaymentProvider):
    """Tap Charges API.

    Tap checkout is a charge redirect, priced from ``prices`` keyed by
    product ID. Without prices every checkout raises ConfigurationError; when
    resolving through the registry pass ``ProviderRegistry(tap_prices=...)``.
    Subscriptions use save-card plus merchant-initiated charges (see
    ``paybridge.payments.providers.tap.subscriptions``).
    """

    name = "tap"
    api_url = "https://api.tap.company/v2"
    webhook_secret_setting = "tap_webhook_secret"
    signature_scheme = TAP_SIGNATURE_SCHEME
    success_status = 200
    invalid_signature_status = 401
    handled_events = frozenset({"CHARGE.CAPTURED", "CHARGE.FAILED"})

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        event_handler: EventHandler | None = None,
        prices: Mapping[str, TapPrice] | None = None,
    ) -> None:
        super().__init__(settings=settings, http_client=http_client, event_handler=event_handler)
        self.prices = dict(prices or {})

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._require('tap_secret_key')}"}

    # ------------------------------------------------------------------
    # Checkout / portal
    # ------------------------------------------------------------------

    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        self._require("tap_secret_key")
        price = self.prices.get(request.product_id)
        if price is None:
            raise ConfigurationError(
                message=f"No Tap price configured for product {request.product_id!r}",
                details={"provider": self.name, "product_id": request.product_id},
            )

        metadata = request.metadata()
        metadata["product_id"] = request.product_id
        metadata["quantity"] = str(request.seats)
        metadata["type"] = request.payment_type.value

        first_name, last_name = _split_name(request.name)
        body = {
            "amount": float(price.amount * request.seats),
            "currency": price.currency,
            "save_card": request.is_subscription,
            "customer": {
                "email": request.email,
                "first_name": first_name,
                "last_name": last_name,
            },
            "source": {"id": ALL_SOURCES},
            "redirect": {"url": request.redirect_url or ""},
            "post": {"url": request.redirect_url or ""},
            "metadata": metadata,
            "reference": {
                "transaction": request.product_id,
                "order": f"{request.payment_type.value}_{int(time.time() * 1000)}",
            },
        }

        result = await self._request("POST", "/charges", json=body)
        return (result.get("transaction") or {}).get("url")

    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        raise UnsupportedOperationError(
            message=(
                "Tap Payments does not have a built-in customer portal. "
                "Build your own billing management page using the saved-card helpers."
            ),
            details={"provider": self.name},
        )

    # ------------------------------------------------------------------
    # Charges
    # ------------------------------------------------------------------

    async def create_charge(self, request: TapChargeRequest) -> ChargeResult:
        """Create an interactive charge, optionally saving the card.

        Use for the first subscription payment (``save_card=True``) or
        one-time charges. The user completes payment at ``result.url``.
        """
        first_name, last_name = _split_name(request.name)
        body: dict[str, Any] = {
            "amount": float(request.amount),
            "currency": request.currency,
            "save_card": request.save_card,
            "customer": {
                "email": request.email,
                "first_name": first_name,
                "last_name": last_name,
            },
            "source": {"id": ALL_SOURCES},
            "redirect": {"url": request.redirect_url or ""},
            "post": {"url": request.redirect_url or ""},
        }
        if request.description:
            body["description"] = request.description
        if request.metadata:
            body["metadata"] = request.metadata

        result = await self._request("POST", "/charges", json=body)
        return ChargeResult(
            charge_id=self._charge_id(result),
            status=result.get("status"),
            url=(result.get("transaction") or {}).get("url"),
        )

    async def charge_saved_card(self, request: RecurringChargeRequest) -> ChargeResult:
        """Charge a saved card without the customer present.

        Two calls: tokenize the saved card, then a merchant-initiated charge
        with that token. If tokenization fails the charge is never attempted.
        Nothing is rolled back if the charge fails after tokenization; no
        money moved, so retry the whole call.

        Raises:
            ConfigurationError: If TAP_SECRET_KEY is missing
            ProviderError: If tokenization or the charge fails
        """
        token = request.token
        token_result = await self._request(
            "POST",
            "/tokens",
            json={
                "saved_card": {
                    "card_id": token.card_id,
                    "customer_id": token.customer_id,
                }
            },
        )
        if not token_result.get("id"):
            raise ProviderError(
                provider=self.name,
                body=token_result,
                message="Tap token response has no id",
            )

        body: dict[str, Any] = {
            "amount": float(request.amount),
            "currency": request.currency,
            "customer_initiated": False,
            "source": {"id": token_result["id"]},
            "customer": {"id": token.customer_id},
            "payment_agreement": {"id": token.payment_agreement_id},
            "description": request.description or "Recurring payment",
        }
        if request.metadata:
            body["metadata"] = request.metadata

        result = await self._request("POST", "/charges", json=body)
        logger.info(
            "Tap recurring charge created: charge_id=%s, status=%s",
            result.get("id"),
            result.get("status"),
        )
        return ChargeResult(charge_id=self._charge_id(result), status=result.get("status"))

    async def retrieve_charge(self, charge_id: str) -> dict[str, Any]:
        """Fetch a charge from the Tap API."""
        return await self._request("GET", f"/charges/{charge_id}")

    def _charge_id(self, result: dict[str, Any]) -> str:
        charge_id = result.get("id")
        if not charge_id:
            raise ProviderError(
                provider=self.name,
                body=result,
                message="Tap charge response has no id",
            )
        return str(charge_id)

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def event_type(self, payload: dict[str, Any]) -> str:
        if payload.get("event"):
            return str(payload["event"])
        # Tap posts the object itself: {"object": "charge", "status": "CAPTURED", ...}
        return f"{payload.get('object', '')}.{payload.get('status', '')}".upper()

    def event_data(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = payload.get("data")
        return data if isinstance(data, dict) else payload

    async def dispatch(self, event: WebhookEvent) -> None:
        if event.type == "CHARGE.CAPTURED":
            # The hashstring covers only id, amount, currency, references,
            # status and created; card and customer IDs are read back from
            # the API instead of the posted body.
            charge = await self.retrieve_charge(str(event.data["id"]))
            saved_card = extract_saved_card(charge) if charge.get("status") == "CAPTURED" else None
            if saved_card is not None:
                await self.on_saved_card(saved_card, event)
        await super().dispatch(event)

    async def on_saved_card(self, token: SavedCardToken, event: WebhookEvent) -> None:
        """Called with the saved card of a captured save-card charge.

        The token comes from the charge as fetched from Tap, not from the
        webhook body, whose card and customer fields are unsigned. Fields of
        ``event.data`` outside the hashstring should be treated the same way.

        Override to persist the token for future recurring charges.
        """
