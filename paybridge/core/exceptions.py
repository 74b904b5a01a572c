from typing import Any


class AppException(Exception):
    """Base paybridge exception."""

    error_code: str = "APP_ERROR"
    message: str = "An application error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code!r}, message={self.message!r})"


class ConfigurationError(AppException):
    """Required secret, key or provider name is missing."""

    error_code = "CONFIGURATION_ERROR"
    message = "Payment provider is not configured"


class ProviderError(AppException):
    """Provider API answered with a non-success status or was unreachable."""

    error_code = "PROVIDER_ERROR"
    message = "Payment provider request failed"

    def __init__(
        self,
        provider: str,
        status_code: int | None = None,
        body: Any = None,
        message: str | None = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(
            message=message or f"{provider} API error ({status_code}): {body}",
            details={"provider": provider, "status_code": status_code, "body": body},
        )


class SignatureError(AppException):
    """Webhook signature could not be verified."""

    error_code = "SIGNATURE_ERROR"
    message = "Webhook signature verification failed"


class MissingSignatureError(SignatureError):
    """Signature (or a header it depends on) is absent."""

    error_code = "MISSING_SIGNATURE"
    message = "Missing webhook signature"


class InvalidSignatureError(SignatureError):
    """Signature does not match the payload."""

    error_code = "INVALID_SIGNATURE"
    message = "Invalid webhook signature"


class MissingSecretError(SignatureError):
    """Webhook secret is not configured."""

    error_code = "MISSING_SECRET"
    message = "Missing webhook secret"


class PayloadError(AppException):
    """Webhook body is not the expected structure."""

    error_code = "PAYLOAD_ERROR"
    message = "Invalid webhook payload"


class UnsupportedOperationError(AppException):
    """Operation is not offered by the provider."""

    error_code = "UNSUPPORTED_OPERATION"
    message = "Operation not supported by this provider"
