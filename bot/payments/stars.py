"""Telegram Stars invoice payloads and payment confirmations."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Optional

from aiogram.types import SuccessfulPayment

STARS_CURRENCY = "XTR"


class MalformedPayload(ValueError):
    """Invoice payload is not the JSON document produced by :class:`InvoicePayload`."""


@dataclass(frozen=True)
class InvoicePayload:
    """Data carried through the invoice so the payment can be attributed."""

    user_id: int
    plan_id: str
    timestamp: int

    @classmethod
    def create(cls, user_id: int, plan_id: str, timestamp: Optional[int] = None) -> "InvoicePayload":
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return cls(user_id=user_id, plan_id=plan_id, timestamp=timestamp)

    def encode(self) -> str:
        return json.dumps(
            {"userId": self.user_id, "planId": self.plan_id, "timestamp": self.timestamp},
            separators=(",", ":"),
        )

    @classmethod
    def decode(cls, raw: Optional[str]) -> "InvoicePayload":
        if not raw:
            raise MalformedPayload("empty invoice payload")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedPayload(f"invoice payload is not JSON: {raw!r}") from exc
        if not isinstance(data, dict):
            raise MalformedPayload(f"invoice payload is not an object: {raw!r}")

        user_id = data.get("userId")
        plan_id = data.get("planId")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise MalformedPayload(f"invoice payload has no valid userId: {raw!r}")
        if not isinstance(plan_id, str) or not plan_id:
            raise MalformedPayload(f"invoice payload has no valid planId: {raw!r}")

        timestamp = data.get("timestamp")
        if not isinstance(timestamp, int):
            timestamp = 0
        return cls(user_id=user_id, plan_id=plan_id, timestamp=timestamp)


@dataclass(frozen=True)
class PaymentConfirmation:
    user_id: int
    plan_id: str
    transaction_id: str
    total_amount: int


def confirmation_from_payment(payment: SuccessfulPayment) -> PaymentConfirmation:
    payload = InvoicePayload.decode(payment.invoice_payload)
    if not payment.telegram_payment_charge_id:
        raise MalformedPayload("successful payment has no telegram_payment_charge_id")
    return PaymentConfirmation(
        user_id=payload.user_id,
        plan_id=payload.plan_id,
        transaction_id=payment.telegram_payment_charge_id,
        total_amount=payment.total_amount,
    )
