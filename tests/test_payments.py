import json

import pytest
from aiogram.types import SuccessfulPayment

from bot.payments import (
    STARS_CURRENCY,
    InvoicePayload,
    MalformedPayload,
    confirmation_from_payment,
)


def _payment(payload: str, charge_id: str = "tg-charge-1") -> SuccessfulPayment:
    return SuccessfulPayment(
        currency=STARS_CURRENCY,
        total_amount=150,
        invoice_payload=payload,
        telegram_payment_charge_id=charge_id,
        provider_payment_charge_id="",
    )


def test_payload_uses_camel_case_keys():
    payload = InvoicePayload.create(42, "pro", timestamp=1700000000000)

    assert json.loads(payload.encode()) == {"userId": 42, "planId": "pro", "timestamp": 1700000000000}


def test_payload_decodes_what_it_encodes():
    payload = InvoicePayload.create(42, "premium")

    assert InvoicePayload.decode(payload.encode()) == payload


def test_payload_without_timestamp_is_accepted():
    payload = InvoicePayload.decode('{"userId": 5, "planId": "basic"}')

    assert payload == InvoicePayload(user_id=5, plan_id="basic", timestamp=0)


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "not json",
        "[1, 2]",
        '{"planId": "pro"}',
        '{"userId": "42", "planId": "pro"}',
        '{"userId": true, "planId": "pro"}',
        '{"userId": 42}',
        '{"userId": 42, "planId": ""}',
    ],
)
def test_malformed_payloads_are_rejected(raw):
    with pytest.raises(MalformedPayload):
        InvoicePayload.decode(raw)


def test_confirmation_takes_transaction_from_charge_id():
    payment = _payment(InvoicePayload.create(42, "pro").encode())

    confirmation = confirmation_from_payment(payment)

    assert confirmation.user_id == 42
    assert confirmation.plan_id == "pro"
    assert confirmation.transaction_id == "tg-charge-1"
    assert confirmation.total_amount == 150


def test_confirmation_requires_charge_id():
    payment = _payment(InvoicePayload.create(42, "pro").encode(), charge_id="")

    with pytest.raises(MalformedPayload):
        confirmation_from_payment(payment)
