"""Tap payment provider."""

from paybridge.payments.providers.tap.provider import TapPaymentProvider
from paybridge.payments.providers.tap.signature import build_hashstring, format_amount
from paybridge.payments.providers.tap.subscriptions import extract_saved_card

__all__ = [
    "TapPaymentProvider",
    "build_hashstring",
    "extract_saved_card",
    "format_amount",
]
