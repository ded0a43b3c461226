"""Side-effect handlers for the tools the realtime engine may call.

Every handler maps a validated request to best-effort notifications and returns a
sentence the assistant reads back to the caller. Outbound failures are logged and
never raised across the tool boundary.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from config.settings import Settings
from reception import notifications
from reception.errors import ToolValidationError, UnknownToolError
from reception.schemas import (
    BookConsultationRequest,
    EscalateToHumanRequest,
    ProcessPaymentRequest,
    ScheduleAppointmentRequest,
    ToolRequest,
)

LOGGER = logging.getLogger(__name__)

ESCALATION_ACK = "Thank you. I will have someone from our team follow up with you soon."


class Notifier(Protocol):
    async def send(self, *, to: str | None, subject: str, body: str) -> bool: ...


class PaymentLinkService(Protocol):
    async def create_link(self, metadata: dict[str, str]) -> str: ...


class Dialer(Protocol):
    async def dial_human(self) -> str: ...


@dataclass(frozen=True)
class SchedulingLinks:
    free_phone: str | None = None
    free_zoom: str | None = None
    paid_zoom: str | None = None
    paid_in_person: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulingLinks:
        return cls(
            free_phone=settings.calendly_free_phone_link,
            free_zoom=settings.calendly_free_zoom_link,
            paid_zoom=settings.calendly_paid_zoom_link,
            paid_in_person=settings.calendly_paid_in_person_link,
        )

    def resolve(self, consultation_type: str) -> str | None:
        """Return the booking link for a type; unknown types get the free phone link."""

        links = {
            "free_phone": self.free_phone,
            "free_zoom": self.free_zoom,
            "paid_zoom": self.paid_zoom,
            "paid_in_person": self.paid_in_person,
        }
        return links.get(consultation_type, self.free_phone)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    request_model: type[ToolRequest]


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="book_consultation",
        description=(
            "Book a consultation for the caller. Clients can choose a free 15-minute call "
            "(phone or Zoom) or a 1-hour session (Zoom or in person) that costs $500."
        ),
        request_model=BookConsultationRequest,
    ),
    ToolSpec(
        name="schedule_appointment",
        description="Schedule a consultation appointment for a client.",
        request_model=ScheduleAppointmentRequest,
    ),
    ToolSpec(
        name="process_payment",
        description=(
            "Process a client's payment for legal fees. Use USD amounts and describe the "
            "payment method (e.g. credit card)."
        ),
        request_model=ProcessPaymentRequest,
    ),
    ToolSpec(
        name="escalate_to_human",
        description=(
            "Escalate the conversation to a human when the caller's request requires legal "
            "advice or specialised assistance. Collect contact details and preferred "
            "follow-up information before handing off."
        ),
        request_model=EscalateToHumanRequest,
    ),
)


class ToolHandlers:
    """Process-wide handler set; holds only read-only service handles."""

    def __init__(
        self,
        *,
        notifier: Notifier,
        firm_name: str,
        law_firm_email: str | None,
        escalation_email: str | None = None,
        scheduling_links: SchedulingLinks | None = None,
        payment_links: PaymentLinkService | None = None,
        dialer: Dialer | None = None,
    ) -> None:
        self._notifier = notifier
        self._firm_name = firm_name
        self._law_firm_email = law_firm_email
        self._escalation_email = escalation_email
        self._links = scheduling_links or SchedulingLinks()
        self._payment_links = payment_links
        self._dialer = dialer
        self._specs = {spec.name: spec for spec in TOOL_SPECS}
        self._handlers: dict[str, Callable[[Any], Awaitable[str]]] = {
            "book_consultation": self.book_consultation,
            "schedule_appointment": self.schedule_appointment,
            "process_payment": self.process_payment,
            "escalate_to_human": self.escalate_to_human,
        }

    @property
    def specs(self) -> tuple[ToolSpec, ...]:
        return TOOL_SPECS

    def validate(self, name: str, arguments: str | Mapping[str, Any]) -> ToolRequest:
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments or "{}")
            except json.JSONDecodeError as exc:
                raise ToolValidationError(f"Arguments for {name} are not valid JSON: {exc}") from exc
        if not isinstance(arguments, Mapping):
            raise ToolValidationError(f"Arguments for {name} must be a JSON object.")

        try:
            return spec.request_model.model_validate(dict(arguments))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ToolValidationError(f"Invalid arguments for {name}: {problems}") from exc

    async def invoke(self, name: str, arguments: str | Mapping[str, Any]) -> str:
        """Validate and run one tool call, returning the text handed back to the engine."""

        try:
            request = self.validate(name, arguments)
        except (ToolValidationError, UnknownToolError) as exc:
            LOGGER.warning("Rejected tool call %s: %s", name, exc.detail)
            return f"Error: {exc.detail} Please confirm the details with the caller and try again."

        LOGGER.info("Running tool %s", name)
        return await self._handlers[name](request)

    async def schedule_appointment(self, request: ScheduleAppointmentRequest) -> str:
        email = notifications.appointment_request_email(request)
        await self._notify(self._law_firm_email, email, label="appointment request")
        return (
            f"Your appointment request for {request.date} at {request.time} has been recorded. "
            "Our team will follow up to confirm availability."
        )

    async def book_consultation(self, request: BookConsultationRequest) -> str:
        scheduling_link = self._links.resolve(request.consultation_type)
        payment_url = None
        if request.is_paid:
            payment_url = await self._payment_link_for(request)

        client_email = notifications.consultation_client_email(
            request,
            firm_name=self._firm_name,
            scheduling_link=scheduling_link,
            payment_url=payment_url,
        )
        await self._notify(request.client_email, client_email, label="consultation confirmation")

        internal_email = notifications.consultation_internal_email(
            request,
            scheduling_link=scheduling_link,
            payment_url=payment_url,
        )
        await self._notify(self._law_firm_email, internal_email, label="internal consultation notice")

        description = notifications.describe_consultation(request.consultation_type)
        payment_note = " with a payment link" if payment_url else ""
        return (
            f"Thank you, {request.client_name}. I've recorded your request for {description} "
            f"on {request.date} at {request.time}. A confirmation has been sent to your "
            f"email{payment_note}."
        )

    async def process_payment(self, request: ProcessPaymentRequest) -> str:
        email = notifications.payment_email(request)
        await self._notify(self._law_firm_email, email, label="billing notice")
        return (
            f"Thank you, {request.client_name}. A payment of "
            f"{notifications.format_usd(request.amount)} via {request.payment_method} "
            "has been recorded. A receipt will be sent shortly."
        )

    async def escalate_to_human(self, request: EscalateToHumanRequest) -> str:
        email = notifications.escalation_email(request)
        recipient = self._escalation_email or self._law_firm_email
        await self._notify(recipient, email, label="escalation")

        if self._dialer is not None:
            try:
                await self._dialer.dial_human()
            except Exception:
                LOGGER.exception("Placing escalation call for %s failed", request.client_name)
        return ESCALATION_ACK

    async def _payment_link_for(self, request: BookConsultationRequest) -> str | None:
        if self._payment_links is None:
            return None
        try:
            return await self._payment_links.create_link(
                {"client_name": request.client_name, "client_email": request.client_email}
            )
        except Exception:
            LOGGER.exception("Creating payment link for %s failed", request.client_name)
            return None

    async def _notify(self, to: str | None, email: notifications.Email, *, label: str) -> bool:
        try:
            return await self._notifier.send(to=to, subject=email.subject, body=email.body)
        except Exception:
            LOGGER.exception("Sending %s email failed", label)
            return False


def build_tool_handlers(
    settings: Settings,
    *,
    notifier: Notifier,
    payment_links: PaymentLinkService | None = None,
    dialer: Dialer | None = None,
) -> ToolHandlers:
    return ToolHandlers(
        notifier=notifier,
        firm_name=settings.law_firm_name,
        law_firm_email=settings.law_firm_email,
        escalation_email=settings.escalation_email,
        scheduling_links=SchedulingLinks.from_settings(settings),
        payment_links=payment_links,
        dialer=dialer,
    )
