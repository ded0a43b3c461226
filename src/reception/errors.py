"""Domain-specific exceptions for the reception service.

These exceptions are safe to import from API layers without pulling in the realtime SDK.
"""

from __future__ import annotations


class ReceptionError(Exception):
    status_code: int = 500
    default_detail: str = "Reception error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class ToolValidationError(ReceptionError):
    status_code = 422
    default_detail = "Tool arguments failed validation."


class UnknownToolError(ReceptionError):
    status_code = 404
    default_detail = "Unknown tool."


class NotificationError(ReceptionError):
    status_code = 503
    default_detail = "Email notification failed."


class PaymentLinkError(ReceptionError):
    status_code = 503
    default_detail = "Payment link creation failed."


class DialError(ReceptionError):
    status_code = 503
    default_detail = "Outbound call failed."


class EngineConnectionError(ReceptionError):
    status_code = 503
    default_detail = "Realtime engine connection failed."
