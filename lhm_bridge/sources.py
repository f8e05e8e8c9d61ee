from __future__ import annotations

import http.client
import logging
from typing import Protocol
from urllib.request import urlopen

from lhm_bridge.logging_utils import TRACE_LEVEL

DEFAULT_URL = "http://127.0.0.1:8085/"
DATA_PATH = "data.json"
FETCH_TIMEOUT_S = 3.0


class SourceError(Exception):
    """Raised when a sensor document cannot be fetched."""


class Source(Protocol):
    base_url: str

    def fetch(self) -> str: ...


def normalize_url(base_url: str) -> str:
    base_url = base_url.strip()
    return base_url if base_url.endswith("/") else base_url + "/"


class HttpSource:
    """Reads ``data.json`` from a LibreHardwareMonitor remote web server."""

    def __init__(self, base_url: str = DEFAULT_URL, timeout: float = FETCH_TIMEOUT_S) -> None:
        self.base_url = normalize_url(base_url)
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def url(self) -> str:
        return self.base_url + DATA_PATH

    def fetch(self) -> str:
        try:
            with urlopen(self.url, timeout=self.timeout) as response:
                payload = response.read().decode("utf-8")
        except (OSError, ValueError, http.client.HTTPException) as exc:
            raise SourceError(f"Failed to fetch {self.url}: {exc}") from exc
        if self.logger.isEnabledFor(TRACE_LEVEL):
            self.logger.log(TRACE_LEVEL, "LibreHardwareMonitor raw payload: %s", payload)
        return payload

    def __repr__(self) -> str:
        return f"HttpSource({self.base_url!r})"
