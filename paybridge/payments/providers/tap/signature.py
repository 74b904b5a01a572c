"""Tap ``hashstring`` canonicalization.

Tap signs the fields of the posted object rather than the raw body:

    x_id{id}x_amount{amount}x_currency{currency}x_gateway_reference{gateway}
    x_payment_reference{payment}x_status{status}x_created{created}

The amount is rounded to the currency's minor-unit precision.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from paybridge.payments.signature import Canonicalization, SignatureScheme

THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})


def format_amount(amount: Any, currency: str) -> str:
    """Format amount the way Tap does before hashing.

    Examples: (10, "USD") -> "10.00", (1.5, "KWD") -> "1.500"
    """
    places = 3 if currency.upper() in THREE_DECIMAL_CURRENCIES else 2
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


def build_hashstring(payload: dict[str, Any]) -> str:
    """Build the string Tap signs for a charge/authorize object.

    Accepts either the bare object or an ``{"event", "data"}`` envelope.
    """
    obj = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    reference = obj.get("reference") or {}
    transaction = obj.get("transaction") or {}
    currency = obj["currency"]

    return (
        f"x_id{obj['id']}"
        f"x_amount{format_amount(obj['amount'], currency)}"
        f"x_currency{currency}"
        f"x_gateway_reference{reference.get('gateway', '')}"
        f"x_payment_reference{reference.get('payment', '')}"
        f"x_status{obj.get('status', '')}"
        f"x_created{transaction.get('created', '')}"
    )


TAP_SIGNATURE_SCHEME = SignatureScheme(
    signature_header="hashstring",
    canonicalization=Canonicalization.FIELDS,
    field_builder=build_hashstring,
)
