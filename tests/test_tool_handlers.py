from __future__ import annotations

import asyncio
import json

import pytest

from fakes import FakeDialer, FakeNotifier, FakePaymentLinks
from reception.errors import ToolValidationError, UnknownToolError
from reception.schemas import BookConsultationRequest
from reception.tool_handlers import ESCALATION_ACK, SchedulingLinks, ToolHandlers

LINKS = SchedulingLinks(
    free_phone="https://calendly.com/firm/free-phone",
    free_zoom="https://calendly.com/firm/free-zoom",
    paid_zoom="https://calendly.com/firm/paid-zoom",
    paid_in_person="https://calendly.com/firm/paid-in-person",
)

CONSULTATION = {
    "consultation_type": "paid_zoom",
    "date": "2026-11-02",
    "time": "3pm",
    "client_name": "Maria Lopez",
    "client_phone": "+14155550100",
    "client_email": "maria@example.com",
}

ESCALATION = {
    "reason": "Foreclosure sale next week",
    "client_name": "Sam Lee",
    "client_phone": "+14155550111",
    "client_email": "sam@example.com",
    "preferred_contact_day": "Monday",
    "preferred_contact_time": "morning",
    "preferred_contact_medium": "phone",
}


def _run(coro):
    return asyncio.run(coro)


def _handlers(notifier=None, **kwargs) -> ToolHandlers:
    kwargs.setdefault("law_firm_email", "firm@example.com")
    kwargs.setdefault("scheduling_links", LINKS)
    return ToolHandlers(
        notifier=notifier or FakeNotifier(),
        firm_name="Law Offices of Pritpal Singh",
        **kwargs,
    )


def test_schedule_appointment_sends_one_internal_notice():
    notifier = FakeNotifier()
    ack = _run(
        _handlers(notifier).invoke(
            "schedule_appointment",
            {"date": "2026-11-02", "time": "15:00", "client_name": "Ana"},
        )
    )

    assert ack == (
        "Your appointment request for 2026-11-02 at 15:00 has been recorded. "
        "Our team will follow up to confirm availability."
    )
    assert [(email.to, email.subject) for email in notifier.sent] == [
        ("firm@example.com", "Appointment request from Ana")
    ]


def test_paid_consultation_includes_payment_link():
    notifier = FakeNotifier()
    payments = FakePaymentLinks()
    ack = _run(_handlers(notifier, payment_links=payments).invoke("book_consultation", CONSULTATION))

    assert "with a payment link" in ack
    assert "a paid 1-hour Zoom consultation" in ack
    assert payments.calls == [{"client_name": "Maria Lopez", "client_email": "maria@example.com"}]

    client_email, internal_email = notifier.sent
    assert client_email.to == "maria@example.com"
    assert "https://buy.stripe.com/test_123" in client_email.body
    assert "https://calendly.com/firm/paid-zoom" in client_email.body
    assert internal_email.to == "firm@example.com"
    assert "Phone: +14155550100" in internal_email.body
    assert "Payment link: https://buy.stripe.com/test_123" in internal_email.body


def test_free_consultation_never_contacts_payment_service():
    payments = FakePaymentLinks()
    notifier = FakeNotifier()
    request = dict(CONSULTATION, consultation_type="free_phone")
    ack = _run(_handlers(notifier, payment_links=payments).invoke("book_consultation", request))

    assert payments.calls == []
    assert "payment link" not in ack
    assert "https://calendly.com/firm/free-phone" in notifier.sent[0].body


def test_unknown_consultation_type_resolves_to_free_phone_link():
    assert LINKS.resolve("walk_in") == LINKS.resolve("free_phone")


def test_payment_link_failure_books_without_link():
    ack = _run(
        _handlers(payment_links=FakePaymentLinks(fail=True)).invoke("book_consultation", CONSULTATION)
    )
    assert "payment link" not in ack
    assert ack.startswith("Thank you, Maria Lopez.")


def test_paid_consultation_without_payment_service_still_books():
    notifier = FakeNotifier()
    ack = _run(_handlers(notifier).invoke("book_consultation", CONSULTATION))
    assert "payment link" not in ack
    assert len(notifier.sent) == 2


def test_client_email_failure_does_not_block_internal_notice():
    notifier = FakeNotifier(fail_recipients=("maria@example.com",))
    ack = _run(_handlers(notifier).invoke("book_consultation", CONSULTATION))

    assert [email.to for email in notifier.sent] == ["maria@example.com", "firm@example.com"]
    assert ack.startswith("Thank you, Maria Lopez.")


def test_process_payment_acknowledges_when_notification_fails():
    notifier = FakeNotifier(fail=True)
    ack = _run(
        _handlers(notifier).invoke(
            "process_payment",
            {"amount": 250, "client_name": "Ana", "payment_method": "Visa"},
        )
    )

    assert ack == (
        "Thank you, Ana. A payment of $250.00 via Visa has been recorded. "
        "A receipt will be sent shortly."
    )
    assert len(notifier.sent) == 1


def test_escalation_without_dialer_still_notifies_and_acknowledges():
    notifier = FakeNotifier()
    ack = _run(
        _handlers(notifier, escalation_email="urgent@example.com").invoke("escalate_to_human", ESCALATION)
    )

    assert ack == ESCALATION_ACK
    assert len(notifier.sent) == 1
    assert notifier.sent[0].to == "urgent@example.com"
    assert "Preferred contact medium: phone" in notifier.sent[0].body


def test_escalation_falls_back_to_firm_address():
    notifier = FakeNotifier()
    _run(_handlers(notifier).invoke("escalate_to_human", ESCALATION))
    assert notifier.sent[0].to == "firm@example.com"


def test_escalation_dial_failure_is_swallowed():
    dialer = FakeDialer(fail=True)
    ack = _run(_handlers(dialer=dialer).invoke("escalate_to_human", ESCALATION))
    assert ack == ESCALATION_ACK
    assert dialer.calls == 1


def test_invalid_arguments_are_rejected_before_side_effects():
    notifier = FakeNotifier()
    payments = FakePaymentLinks()
    bad = dict(CONSULTATION, consultation_type="pro_bono")
    result = _run(_handlers(notifier, payment_links=payments).invoke("book_consultation", bad))

    assert result.startswith("Error: Invalid arguments for book_consultation")
    assert "consultation_type" in result
    assert notifier.sent == []
    assert payments.calls == []


def test_invoke_accepts_json_argument_strings():
    notifier = FakeNotifier()
    _run(
        _handlers(notifier).invoke(
            "process_payment",
            json.dumps({"amount": 99.5, "client_name": "Ana", "payment_method": "bank transfer"}),
        )
    )
    assert "$99.50" in notifier.sent[0].body


@pytest.mark.parametrize(
    ("name", "arguments", "error"),
    [
        ("process_payment", "{not json", ToolValidationError),
        ("process_payment", {"amount": "lots", "client_name": "A", "payment_method": "Visa"}, ToolValidationError),
        ("process_payment", {"amount": 10, "client_name": "A"}, ToolValidationError),
        ("escalate_to_human", dict(ESCALATION, preferred_contact_medium="fax"), ToolValidationError),
        ("schedule_appointment", ["2026-11-02"], ToolValidationError),
        ("refund_payment", {}, UnknownToolError),
    ],
)
def test_validate_rejects_malformed_calls(name, arguments, error):
    with pytest.raises(error):
        _handlers().validate(name, arguments)


def test_unknown_tool_is_reported_to_engine():
    result = _run(_handlers().invoke("refund_payment", {}))
    assert result.startswith("Error: Unknown tool: refund_payment")


def test_request_model_flags_paid_types():
    assert BookConsultationRequest.model_validate(CONSULTATION).is_paid
    assert not BookConsultationRequest.model_validate(dict(CONSULTATION, consultation_type="free_zoom")).is_paid
