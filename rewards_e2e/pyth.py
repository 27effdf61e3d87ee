"""Signed Pyth price updates fetched from the Hermes price service."""

from __future__ import annotations

import logging

import requests
from eth_utils import to_bytes, to_hex
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from .constants import DEFAULT_HERMES_URL
from .errors import TransportError

logger = logging.getLogger(__name__)

RETRY_STATUS = (429, 500, 502, 503, 504)
TIMEOUT = (10, 30)


class HermesClient:
    def __init__(self, base_url: str = DEFAULT_HERMES_URL, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    @retry(
        retry=retry_if_exception_type(TransportError),
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=0.5, max=8) + wait_random(0, 0.5),
        reraise=True,
    )
    def get_price_update(self, feed_id: bytes | str) -> bytes:
        """Latest signed update (VAA) for one price feed."""
        feed_hex = feed_id if isinstance(feed_id, str) else to_hex(feed_id)
        url = f"{self.base_url}/v2/updates/price/latest"
        try:
            response = self.session.get(
                url,
                params={"ids[]": feed_hex, "encoding": "hex"},
                timeout=TIMEOUT,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Hermes request failed: {exc}") from exc

        if response.status_code in RETRY_STATUS:
            logger.warning("Hermes returned %s for %s, retrying", response.status_code, feed_hex)
            raise TransportError(f"Status {response.status_code} for {url}")
        response.raise_for_status()

        payload = response.json()
        data = payload.get("binary", {}).get("data") or []
        if not data:
            raise ValueError(f"Hermes returned no update for feed {feed_hex}")
        return to_bytes(hexstr=data[0])
