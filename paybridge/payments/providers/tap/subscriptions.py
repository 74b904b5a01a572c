"""Saved-card helpers for Tap recurring billing.

Tap has no subscription object. Subscriptions are emulated:

1. The first checkout is a charge with ``save_card`` enabled.
2. Tap posts CHARGE.CAPTURED. Its card, customer and payment agreement IDs
   are outside the webhook signature, so the adapter fetches the charge back
   from the API and ``extract_saved_card`` turns the fetched IDs into a
   ``SavedCardToken`` which the caller stores.
3. Each billing cycle the caller's scheduler calls
   ``TapPaymentProvider.charge_saved_card`` (tokenize, then charge with
   ``customer_initiated: false``).
"""

from typing import Any

from paybridge.payments.schemas import SavedCardToken


def _nested_id(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, dict):
        return None
    return value.get("id") or None


def extract_saved_card(data: dict[str, Any]) -> SavedCardToken | None:
    """Extract saved-card identifiers from a CHARGE.CAPTURED object.

    Returns None (not an error) when any of card, customer or payment
    agreement ID is missing: the charge was not a save-card charge.
    """
    card_id = _nested_id(data, "card")
    customer_id = _nested_id(data, "customer")
    payment_agreement_id = _nested_id(data, "payment_agreement")

    if not card_id or not customer_id or not payment_agreement_id:
        return None

    return SavedCardToken(
        customer_id=customer_id,
        card_id=card_id,
        payment_agreement_id=payment_agreement_id,
    )
