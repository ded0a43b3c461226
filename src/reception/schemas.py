"""Pydantic schemas for tool calls issued by the realtime engine."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ConsultationType = Literal["free_phone", "free_zoom", "paid_zoom", "paid_in_person"]
ContactMedium = Literal["phone", "email"]

PAID_CONSULTATION_TYPES = frozenset({"paid_zoom", "paid_in_person"})


class ToolRequest(BaseModel):
    """Base for validated tool arguments; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ScheduleAppointmentRequest(ToolRequest):
    date: str = Field(min_length=1, description="Desired appointment date in YYYY-MM-DD format.")
    time: str = Field(min_length=1, description='Desired appointment time (e.g. "15:00" or "3pm").')
    client_name: str = Field(min_length=1, description="Name of the client requesting the appointment.")


class BookConsultationRequest(ToolRequest):
    consultation_type: ConsultationType = Field(
        description=(
            'Type of consultation requested: "free_phone" for a 15-minute phone call, '
            '"free_zoom" for a 15-minute Zoom call, "paid_zoom" for a 1-hour Zoom consultation, '
            'or "paid_in_person" for a 1-hour in-person meeting. Paid options cost $500.'
        )
    )
    date: str = Field(min_length=1, description="Preferred appointment date in YYYY-MM-DD format.")
    time: str = Field(min_length=1, description='Preferred appointment time (e.g. "15:00" or "3pm").')
    client_name: str = Field(min_length=1, description="Full name of the client scheduling the consultation.")
    client_phone: str = Field(min_length=1, description="Best phone number for reaching the client.")
    client_email: str = Field(
        min_length=1,
        description="Client email address for sending confirmation and payment links.",
    )

    @property
    def is_paid(self) -> bool:
        return self.consultation_type in PAID_CONSULTATION_TYPES


class ProcessPaymentRequest(ToolRequest):
    amount: float = Field(gt=0, description="Amount to charge in US dollars.")
    client_name: str = Field(min_length=1, description="Name of the client making the payment.")
    payment_method: str = Field(
        min_length=1,
        description='Method of payment (e.g. "Visa", "Mastercard", "bank transfer").',
    )


class EscalateToHumanRequest(ToolRequest):
    reason: str = Field(min_length=1, description="Reason for requesting human assistance.")
    client_name: str = Field(min_length=1, description="Full name of the caller requesting escalation.")
    client_phone: str = Field(min_length=1, description="Best phone number for reaching the caller.")
    client_email: str = Field(min_length=1, description="Email address for the caller.")
    preferred_contact_day: str = Field(
        min_length=1,
        description='Preferred day of the week for a follow-up call (e.g. "Monday" or "any day").',
    )
    preferred_contact_time: str = Field(
        min_length=1,
        description='Preferred time of day for follow-up (e.g. "morning", "afternoon", "3pm").',
    )
    preferred_contact_medium: ContactMedium = Field(
        description="Preferred method to reach the caller (phone or email).",
    )
