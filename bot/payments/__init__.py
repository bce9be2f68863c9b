"""Payment helpers for Telegram Stars invoices."""

from .stars import (
    STARS_CURRENCY,
    InvoicePayload,
    MalformedPayload,
    PaymentConfirmation,
    confirmation_from_payment,
)

__all__ = [
    "STARS_CURRENCY",
    "InvoicePayload",
    "MalformedPayload",
    "PaymentConfirmation",
    "confirmation_from_payment",
]
