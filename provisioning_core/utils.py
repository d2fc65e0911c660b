"""
provisioning_core.utils
-----------------------
Lightweight helpers for timestamping, base64 utilities, canonical JSON
serialization, and public key trimming.
"""

from __future__ import annotations
import base64, json, time
from typing import Any

from .constants import TIMESTAMP_FORMAT, PAYLOAD_ENCODING

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    # validate=True rejects stray characters instead of silently dropping them
    return base64.b64decode(s.encode("ascii"), validate=True)

def now_ts() -> str:
    # yyyy-mm-dd hh:mi:ssZ in UTC, second precision
    return time.strftime(TIMESTAMP_FORMAT, time.gmtime())

def canonical_json(obj: Any) -> bytes:
    # Deterministic, minimal JSON for signing
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode(PAYLOAD_ENCODING)

def trim_public_key(pem: str | bytes) -> str:
    """Strip the PEM header, footer and line breaks from a public key."""
    if isinstance(pem, bytes):
        pem = pem.decode("ascii")
    return (
        pem.replace("-----BEGIN PUBLIC KEY-----", "")
        .replace("-----END PUBLIC KEY-----", "")
        .replace("\r", "")
        .replace("\n", "")
    )
