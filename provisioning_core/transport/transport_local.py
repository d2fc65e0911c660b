# provisioning_core/transport/transport_local.py
from collections import deque
from typing import Any, Callable, Dict

from provisioning_core.logger import get_logger
from provisioning_core.transport.transport_base import BaseTransport, TransportPermanentError

log = get_logger("Provisioning.Transport.Local")

Handler = Callable[[Dict[str, Any]], Any]


class LocalAdapter(BaseTransport):
    """
    In-process transport: routes each URL to a handler callable.

    Handlers receive the request body dict and return bytes, text, or a
    dict (serialized as JSON). Used for offline harnesses and tests;
    only the last ``history`` requests are kept in ``sent``.
    """
    name = "local"

    def __init__(self, history: int = 100):
        self.routes: Dict[str, Handler] = {}
        self.sent = deque(maxlen=history)

    def route(self, url: str, handler: Handler) -> None:
        self.routes[url] = handler

    def post(self, url: str, body: Dict[str, Any]) -> bytes:
        log.info(f"[LOCAL POST] {url}")
        self.sent.append((url, body))
        handler = self.routes.get(url)
        if handler is None:
            raise TransportPermanentError(f"no local route for {url}")
        reply = handler(body)
        if isinstance(reply, str):
            return reply.encode("utf-8")
        return self.to_bytes(reply)
