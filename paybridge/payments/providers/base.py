"""Base payment provider interface."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

import httpx

from paybridge.core.config import Settings, get_settings
from paybridge.core.exceptions import (
    AppException,
    ConfigurationError,
    InvalidSignatureError,
    MissingSecretError,
    MissingSignatureError,
    PayloadError,
    ProviderError,
)
from paybridge.payments import signature
from paybridge.payments.schemas import (
    CheckoutRequest,
    PortalRequest,
    VerificationResult,
    WebhookEvent,
    WebhookRequest,
    WebhookResponse,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[WebhookEvent], Awaitable[None]]


class PaymentProvider(ABC):
    """Abstract base class for payment providers.

    All payment providers (Stripe, Tap, Console, etc.) must implement this interface.
    """

    name: ClassVar[str] = "base"

    @abstractmethod
    async def create_checkout_link(self, request: CheckoutRequest) -> str | None:
        """Create a provider-hosted checkout URL.

        Args:
            request: Checkout parameters

        Returns:
            URL to redirect the user to, or None if the provider gave none

        Raises:
            ConfigurationError: If provider credentials are missing
            ProviderError: If the provider API call fails
        """

    @abstractmethod
    async def create_customer_portal_link(self, request: PortalRequest) -> str | None:
        """Create a provider-hosted billing portal URL.

        Args:
            request: Portal parameters

        Returns:
            Portal URL, or None if the provider gave none

        Raises:
            ConfigurationError: If provider credentials are missing
            ProviderError: If the provider API call fails
            UnsupportedOperationError: If the provider has no portal
        """

    @abstractmethod
    async def handle_webhook(self, request: WebhookRequest) -> WebhookResponse:
        """Verify and dispatch an inbound webhook.

        Never raises: every failure is turned into a response status so the
        provider's retry logic behaves correctly.
        """


class HttpPaymentProvider(PaymentProvider):
    """Provider backed by an HTTPS API and HMAC-signed webhooks.

    Subclasses declare the API base URL, the webhook signature scheme and the
    status codes their provider expects, and implement the request mapping.
    """

    api_url: ClassVar[str] = ""
    webhook_secret_setting: ClassVar[str | None] = None
    signature_scheme: ClassVar[signature.SignatureScheme | None] = None
    success_status: ClassVar[int] = 200
    invalid_signature_status: ClassVar[int] = 401
    post_only: ClassVar[bool] = False
    handled_events: ClassVar[frozenset[str]] = frozenset()

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        event_handler: EventHandler | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.http_client = http_client
        self.event_handler = event_handler

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _require(self, setting: str) -> str:
        """Read a required setting or raise ConfigurationError."""
        value = getattr(self.settings, setting, None)
        if not value:
            raise ConfigurationError(
                message=f"Missing setting {setting.upper()}",
                details={"provider": self.name, "setting": setting},
            )
        return value

    def _base_url(self) -> str:
        return self.api_url

    def _auth_headers(self) -> dict[str, str]:
        """Authentication headers; may raise ConfigurationError."""
        return {}

    # ------------------------------------------------------------------
    # Outbound HTTP
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Call the provider API and return the decoded JSON body.

        Credentials are resolved before the request is built, so a missing
        key never reaches the network.

        Raises:
            ConfigurationError: If credentials are missing
            ProviderError: On transport failure or non-2xx status
        """
        request_headers = {**self._auth_headers(), **(headers or {})}
        url = f"{self._base_url()}{path}"

        try:
            if self.http_client is not None:
                response = await self.http_client.request(
                    method, url, json=json, data=data, headers=request_headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
                    response = await client.request(
                        method, url, json=json, data=data, headers=request_headers
                    )
        except httpx.HTTPError as e:
            logger.error("%s request failed: %s %s: %s", self.name, method, path, e)
            raise ProviderError(
                provider=self.name,
                message=f"{self.name} request failed: {type(e).__name__}",
            ) from e

        if response.is_error:
            body = _response_body(response)
            logger.error(
                "%s API error: %s %s -> %d",
                self.name,
                method,
                path,
                response.status_code,
            )
            raise ProviderError(provider=self.name, status_code=response.status_code, body=body)

        try:
            result = response.json()
        except ValueError as e:
            raise ProviderError(
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
                message=f"{self.name} API returned invalid JSON",
            ) from e

        if not isinstance(result, dict):
            raise ProviderError(
                provider=self.name,
                status_code=response.status_code,
                body=result,
                message=f"{self.name} API returned a non-object response",
            )
        return result

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def _webhook_secret(self) -> str | None:
        if self.webhook_secret_setting is None:
            return None
        return getattr(self.settings, self.webhook_secret_setting, None)

    def verify_webhook(self, request: WebhookRequest) -> VerificationResult:
        """Run the signature verifier for this provider."""
        return signature.verify(
            request.body,
            request.headers,
            self._webhook_secret(),
            self.signature_scheme,  # type: ignore[arg-type]
        )

    def event_type(self, payload: dict[str, Any]) -> str:
        return str(payload.get("type", ""))

    def event_data(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    async def handle_webhook(self, request: WebhookRequest) -> WebhookResponse:
        if self.post_only and request.method.upper() != "POST":
            return WebhookResponse(405, "Method not allowed")

        if not self._webhook_secret():
            logger.error("%s webhook secret is not configured", self.name)
            return WebhookResponse(500, f"Missing {(self.webhook_secret_setting or '').upper()}")

        if not request.body:
            return WebhookResponse(400, "Invalid request")

        result = self.verify_webhook(request)
        if not result.is_valid:
            return self._rejection(result.error)

        payload = result.payload or {}
        try:
            event = WebhookEvent(
                provider=self.name,
                type=self.event_type(payload),
                data=self.event_data(payload),
                payload=payload,
            )
        except (AttributeError, KeyError, TypeError) as e:
            logger.warning("%s webhook payload has unexpected shape: %s", self.name, e)
            return WebhookResponse(400, "Invalid webhook payload")

        logger.info("%s webhook received: type=%s", self.name, event.type)

        try:
            await self.dispatch(event)
        except Exception:
            logger.exception("%s webhook handler failed: type=%s", self.name, event.type)
            return WebhookResponse(500, "Webhook processing failed")

        return WebhookResponse(self.success_status)

    def _rejection(self, error: AppException | None) -> WebhookResponse:
        if isinstance(error, MissingSecretError):
            return WebhookResponse(500, error.message)
        if isinstance(error, InvalidSignatureError):
            logger.warning("%s webhook rejected: %s", self.name, error.message)
            return WebhookResponse(self.invalid_signature_status, error.message)
        if isinstance(error, (MissingSignatureError, PayloadError)):
            logger.warning("%s webhook rejected: %s", self.name, error.message)
            return WebhookResponse(400, error.message)
        return WebhookResponse(400, "Invalid webhook payload")

    async def dispatch(self, event: WebhookEvent) -> None:
        """Route an authentic event to the business hooks."""
        if event.type not in self.handled_events:
            logger.debug("%s unhandled event type: %s", self.name, event.type)
        await self.on_event(event)
        if self.event_handler is not None:
            await self.event_handler(event)

    async def on_event(self, event: WebhookEvent) -> None:
        """Business reaction to an event. Override in a subclass."""


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
