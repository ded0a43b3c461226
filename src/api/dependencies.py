"""Shared FastAPI dependencies.

Process-wide service handles are built once and shared by every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from config.settings import Settings, get_settings
from engine.base import BaseReasoningEngine
from reception.tool_handlers import Notifier, ToolHandlers


@dataclass(frozen=True)
class ReceptionServices:
    settings: Settings
    notifier: Notifier
    handlers: ToolHandlers
    engine: BaseReasoningEngine


def build_services(settings: Settings) -> ReceptionServices:
    # Lazy imports keep the realtime SDK and Twilio client out of module import time.
    from engine.factory import build_reasoning_engine
    from integrations.email_client import build_email_notifier
    from integrations.stripe_client import build_payment_links
    from integrations.twilio_client import build_escalation_dialer
    from reception.tool_handlers import build_tool_handlers

    notifier = build_email_notifier(settings)
    handlers = build_tool_handlers(
        settings,
        notifier=notifier,
        payment_links=build_payment_links(settings),
        dialer=build_escalation_dialer(settings),
    )
    return ReceptionServices(
        settings=settings,
        notifier=notifier,
        handlers=handlers,
        engine=build_reasoning_engine(settings, handlers),
    )


@lru_cache(maxsize=1)
def _services_factory() -> ReceptionServices:
    return build_services(get_settings())


def get_services() -> ReceptionServices:
    return _services_factory()
