import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from codefix.errors import RelayConnectionError

logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "http://localhost:3000"


@dataclass
class RelayResponse:
    """Outcome of one call to the relay. ``body`` is None when it was not JSON."""
    ok: bool
    status_code: int
    body: Optional[Any]


class RelayClient:
    """HTTP client for ``POST /api/analyze``."""

    def __init__(self, base_url: str = DEFAULT_RELAY_URL, timeout: float = 60.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def analyze(self, language: str, code: str) -> RelayResponse:
        try:
            response = requests.post(
                f"{self.base_url}/api/analyze",
                json={"language": language, "code": code},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Could not reach the relay at {self.base_url}: {e}")
            raise RelayConnectionError(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        return RelayResponse(ok=response.ok, status_code=response.status_code, body=body)
