from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from config.settings import Settings
from reception.errors import DialError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwilioConfig:
    account_sid: str
    auth_token: str
    from_number: str
    human_number: str
    twiml_url: str


def get_twilio_config(settings: Settings) -> TwilioConfig | None:
    """Return the dialing config, or None when any required value is missing."""

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        return None
    if not settings.twilio_from_number or not settings.human_phone_number:
        return None
    if not settings.escalation_twiml_url:
        LOGGER.warning("ESCALATION_TWIML_URL is not set; escalation dialing disabled")
        return None

    return TwilioConfig(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
        human_number=settings.human_phone_number,
        twiml_url=settings.escalation_twiml_url,
    )


class EscalationDialer:
    """Places an outbound call to the firm's human representative."""

    def __init__(self, client, cfg: TwilioConfig) -> None:
        self._client = client
        self._cfg = cfg

    async def dial_human(self) -> str:
        try:
            # The Twilio REST client is blocking.
            call = await asyncio.to_thread(
                self._client.calls.create,
                to=self._cfg.human_number,
                from_=self._cfg.from_number,
                url=self._cfg.twiml_url,
            )
        except TwilioException as exc:
            raise DialError(f"Twilio call to {self._cfg.human_number} failed: {exc}") from exc

        LOGGER.info("Escalation call %s placed to %s", call.sid, self._cfg.human_number)
        return str(call.sid)


def build_escalation_dialer(settings: Settings) -> EscalationDialer | None:
    cfg = get_twilio_config(settings)
    if cfg is None:
        return None
    return EscalationDialer(Client(cfg.account_sid, cfg.auth_token), cfg)
