"""HMAC-SHA256 webhook signature verification.

One verifier serves the providers that sign with a shared HMAC secret;
provider differences live in a small declarative ``SignatureScheme``:

    DIRECT       HMAC(secret, body)
    COMPOSITE    HMAC(secret, "{id}.{timestamp}.{body}")
    FIELDS       HMAC(secret, scheme.field_builder(payload)) (Tap)

Stripe and Polar are verified by their own libraries (see their adapters).
"""

import hashlib
import hmac
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from paybridge.core.exceptions import (
    InvalidSignatureError,
    MissingSecretError,
    MissingSignatureError,
    PayloadError,
)
from paybridge.payments.schemas import VerificationResult


class Canonicalization(str, Enum):
    DIRECT = "direct"
    COMPOSITE = "composite"
    FIELDS = "fields"


@dataclass(frozen=True)
class SignatureScheme:
    """How a provider signs its webhooks."""

    signature_header: str
    canonicalization: Canonicalization = Canonicalization.DIRECT
    id_header: str | None = None
    timestamp_header: str | None = None
    field_builder: Callable[[dict[str, Any]], str] | None = None


def compute_signature(secret: str, message: bytes) -> str:
    """Hex HMAC-SHA256 of message keyed by secret."""
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def constant_time_equals(expected: str, received: str) -> bool:
    """Compare signatures without leaking where (or whether) lengths differ."""
    return hmac.compare_digest(expected.encode(), received.encode())


def parse_json_object(raw_body: bytes) -> dict[str, Any]:
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise PayloadError(message=f"Webhook body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadError(message="Webhook body is not a JSON object")
    return payload


def verify(
    raw_body: bytes,
    headers: Mapping[str, str],
    secret: str | None,
    scheme: SignatureScheme,
) -> VerificationResult:
    """Verify a webhook body against its signature header.

    Args:
        raw_body: Body exactly as received, before any JSON parsing
        headers: Request headers (looked up case-insensitively)
        secret: Provider webhook secret
        scheme: Provider signature scheme

    Returns:
        VerificationResult with the parsed JSON payload when valid. Signature
        problems and payload problems are reported as distinct errors.
    """
    if not secret:
        return VerificationResult.invalid(MissingSecretError())

    lookup = {k.lower(): v for k, v in headers.items()}

    received = (lookup.get(scheme.signature_header.lower()) or "").strip()
    if not received:
        return VerificationResult.invalid(
            MissingSignatureError(message=f"Missing {scheme.signature_header} header")
        )

    webhook_id = timestamp = None
    if scheme.id_header:
        webhook_id = lookup.get(scheme.id_header.lower())
        if not webhook_id:
            return VerificationResult.invalid(
                MissingSignatureError(message=f"Missing {scheme.id_header} header")
            )
    if scheme.timestamp_header:
        timestamp = lookup.get(scheme.timestamp_header.lower())
        if not timestamp:
            return VerificationResult.invalid(
                MissingSignatureError(message=f"Missing {scheme.timestamp_header} header")
            )

    payload: dict[str, Any] | None = None
    if scheme.canonicalization == Canonicalization.DIRECT:
        message = raw_body
    elif scheme.canonicalization == Canonicalization.COMPOSITE:
        message = f"{webhook_id}.{timestamp}.".encode() + raw_body
    else:
        # The signed string is built from payload fields, so the body is
        # parsed first and a malformed body is a payload error even when the
        # signature is also wrong.
        try:
            payload = parse_json_object(raw_body)
            message = scheme.field_builder(payload).encode()  # type: ignore[misc]
        except PayloadError as e:
            return VerificationResult.invalid(e)
        except (KeyError, TypeError, ValueError) as e:
            return VerificationResult.invalid(
                PayloadError(message=f"Cannot build signed string: {e}")
            )

    if not constant_time_equals(compute_signature(secret, message), received):
        return VerificationResult.invalid(InvalidSignatureError())

    if payload is None:
        try:
            payload = parse_json_object(raw_body)
        except PayloadError as e:
            return VerificationResult.invalid(e)

    return VerificationResult(is_valid=True, payload=payload)
