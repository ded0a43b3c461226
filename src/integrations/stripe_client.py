"""Stripe Payment Links over the REST API."""

from __future__ import annotations

import logging

import httpx

from config.settings import Settings
from reception.errors import PaymentLinkError

LOGGER = logging.getLogger(__name__)


class StripePaymentLinks:
    """Creates single-item payment links for a fixed price."""

    def __init__(
        self,
        secret_key: str,
        price_id: str,
        *,
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._price_id = price_id
        self._endpoint = f"{api_base.rstrip('/')}/payment_links"
        self._timeout = timeout
        self._transport = transport

    async def create_link(self, metadata: dict[str, str]) -> str:
        form: dict[str, str] = {
            "line_items[0][price]": self._price_id,
            "line_items[0][quantity]": "1",
        }
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value

        headers = {"Authorization": f"Bearer {self._secret_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint, data=form, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PaymentLinkError(f"Stripe payment link request failed: {exc}") from exc

        url = payload.get("url")
        if not url:
            raise PaymentLinkError("Stripe response did not include a payment link URL")
        return str(url)


def build_payment_links(settings: Settings) -> StripePaymentLinks | None:
    if not settings.stripe_secret_key or not settings.stripe_price_id_60_min:
        return None
    return StripePaymentLinks(
        settings.stripe_secret_key,
        settings.stripe_price_id_60_min,
        api_base=settings.stripe_api_base,
        timeout=settings.http_timeout_seconds,
    )
