from __future__ import annotations
from typing import Any, Dict
import json

from provisioning_core.errors import (
    TransportError,
    TransportTransientError,
    TransportPermanentError,
)

__all__ = [
    "BaseTransport",
    "TransportError",
    "TransportTransientError",
    "TransportPermanentError",
]


class BaseTransport:
    """
    Transport contract: POST one JSON body to a URL, return the raw reply bytes.

    Adapters raise TransportError (or a subclass) on failure and never retry;
    retry policy belongs to whoever owns the adapter.
    """
    name: str = "base"

    def post(self, url: str, body: Dict[str, Any]) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        return

    @staticmethod
    def to_bytes(payload: bytes | dict) -> bytes:
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")
