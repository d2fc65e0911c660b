# provisioning_core/transport/transport_http.py
from typing import Any, Dict, Optional
import requests

from provisioning_core.logger import get_logger
from provisioning_core.transport.transport_base import (
    BaseTransport,
    TransportError,
    TransportTransientError,
    TransportPermanentError,
)

log = get_logger("Provisioning.Transport.HTTP")


class HTTPAdapter(BaseTransport):
    """
    HTTP transport: POSTs request envelopes as JSON to provisioning endpoints.
    """
    name = "http"

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session or requests.Session()

    def post(self, url: str, body: Dict[str, Any]) -> bytes:
        headers = {"Content-Type": "application/json"}
        log.debug(f"[HTTP POST] → {url}")
        try:
            res = self._session.post(url, json=body, headers=headers, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            log.error(f"[HTTP POST] {url} unreachable: {e}")
            raise TransportTransientError(f"{url} unreachable: {e}") from e
        except requests.RequestException as e:
            log.error(f"[HTTP POST] {url} failed: {e}")
            raise TransportError(f"{url} failed: {e}") from e

        if not res.ok:
            log.error(f"[HTTP POST] {res.status_code}: {res.text[:200]}")
            raise TransportPermanentError(f"{url} returned HTTP {res.status_code} {res.reason}")

        log.info(f"[HTTP POST] {url} {res.status_code} {res.reason} bytes={len(res.content)}")
        return res.content

    def close(self) -> None:
        self._session.close()
