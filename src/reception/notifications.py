"""Subjects and bodies for every email the reception service sends."""

from __future__ import annotations

from dataclasses import dataclass

from reception.schemas import (
    BookConsultationRequest,
    EscalateToHumanRequest,
    ProcessPaymentRequest,
    ScheduleAppointmentRequest,
)

TRANSCRIPT_SUBJECT = "Call transcript"
PAID_CONSULTATION_PRICE = "$500"

CONSULTATION_DESCRIPTIONS = {
    "free_phone": "a free 15-minute phone consultation",
    "free_zoom": "a free 15-minute Zoom consultation",
    "paid_zoom": "a paid 1-hour Zoom consultation",
    "paid_in_person": "a paid 1-hour in-person consultation",
}


@dataclass(frozen=True)
class Email:
    subject: str
    body: str


def describe_consultation(consultation_type: str) -> str:
    return CONSULTATION_DESCRIPTIONS.get(consultation_type, CONSULTATION_DESCRIPTIONS["free_phone"])


def format_usd(amount: float) -> str:
    return f"${amount:,.2f}"


def appointment_request_email(request: ScheduleAppointmentRequest) -> Email:
    return Email(
        subject=f"Appointment request from {request.client_name}",
        body=(
            f"Client {request.client_name} has requested an appointment "
            f"on {request.date} at {request.time}."
        ),
    )


def consultation_client_email(
    request: BookConsultationRequest,
    *,
    firm_name: str,
    scheduling_link: str | None,
    payment_url: str | None,
) -> Email:
    description = describe_consultation(request.consultation_type)
    paragraphs = [
        f"Hello {request.client_name},",
        (
            f"Thank you for choosing the {firm_name} for your real-estate matter. "
            f"You have requested {description} on {request.date} at {request.time}."
        ),
    ]
    if scheduling_link:
        paragraphs.append(
            "To confirm your appointment, please use the following link to select a time "
            f"on our calendar: {scheduling_link}"
        )
    if payment_url:
        paragraphs.append(
            "This consultation requires payment. Please use the following secure link to "
            f"complete your {PAID_CONSULTATION_PRICE} payment: {payment_url}"
        )
    paragraphs.append(
        "If you have any questions or need to adjust your appointment, please reply to "
        "this email or call our office."
    )
    paragraphs.append("We look forward to speaking with you.")
    paragraphs.append(f"Best regards,\nThe {firm_name}")
    return Email(
        subject=f"Your consultation request with the {firm_name}",
        body="\n\n".join(paragraphs),
    )


def consultation_internal_email(
    request: BookConsultationRequest,
    *,
    scheduling_link: str | None,
    payment_url: str | None,
) -> Email:
    lines = [
        f"Client Name: {request.client_name}",
        f"Phone: {request.client_phone}",
        f"Email: {request.client_email}",
        f"Requested Type: {describe_consultation(request.consultation_type)}",
        f"Preferred Date: {request.date}",
        f"Preferred Time: {request.time}",
    ]
    if payment_url:
        lines.append(f"Payment link: {payment_url}")
    if scheduling_link:
        lines.append(f"Calendly link: {scheduling_link}")
    return Email(
        subject=f"New consultation request from {request.client_name}",
        body="\n".join(lines) + "\n",
    )


def payment_email(request: ProcessPaymentRequest) -> Email:
    return Email(
        subject=f"Payment received from {request.client_name}",
        body=(
            f"A payment of {format_usd(request.amount)} has been initiated via "
            f"{request.payment_method} for client {request.client_name}. "
            "Please process this payment according to your billing procedures."
        ),
    )


def escalation_email(request: EscalateToHumanRequest) -> Email:
    return Email(
        subject=f"Escalation request from {request.client_name}",
        body=(
            "A caller has requested human assistance for the following reason: "
            f"{request.reason}.\n\n"
            "Caller Details:\n"
            f"Name: {request.client_name}\n"
            f"Phone: {request.client_phone}\n"
            f"Email: {request.client_email}\n"
            f"Preferred contact day: {request.preferred_contact_day}\n"
            f"Preferred contact time: {request.preferred_contact_time}\n"
            f"Preferred contact medium: {request.preferred_contact_medium}\n\n"
            "Please follow up with the client as soon as possible."
        ),
    )


def transcript_email(transcript: str) -> Email:
    return Email(subject=TRANSCRIPT_SUBJECT, body=transcript)
