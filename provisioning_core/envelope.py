"""
provisioning_core.envelope
--------------------------
Wire containers for the provisioning protocol.

- RequestEnvelope: signed outgoing body (payload, timestamp, signature, api key)
- ResponseEnvelope: outer service answer, optionally carrying an EncryptedValue
- SessionKeyMaterial: the per-response AES key/IV, recovered from EncKey

Field names on the wire are fixed by the service (see constants).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import json

from .constants import (
    F_PAYLOAD, F_TIMESTAMP, F_SIGNATURE, F_API_KEY,
    F_SUCCEEDED, F_MESSAGE, F_VALUE, F_ENC_KEY,
    F_SESSION_KEY, F_SESSION_IV,
)
from .errors import TransportError, SerializationError
from .utils import b64e, b64d


@dataclass(frozen=True)
class RequestEnvelope:
    payload: str       # base64 JSON, or the trimmed public key for registration
    timestamp: str     # identical to the one inside the signed material
    signature: str     # base64 RSA signature over timestamp + payload
    api_key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            F_PAYLOAD: self.payload,
            F_TIMESTAMP: self.timestamp,
            F_SIGNATURE: self.signature,
            F_API_KEY: self.api_key,
        }

    def to_json_bytes(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RequestEnvelope":
        return cls(
            payload=data[F_PAYLOAD],
            timestamp=data[F_TIMESTAMP],
            signature=data[F_SIGNATURE],
            api_key=data[F_API_KEY],
        )


@dataclass(frozen=True)
class EncryptedValue:
    enc_key: str   # base64 RSA ciphertext of {"K": ..., "V": ...}
    payload: str   # base64 AES ciphertext of the inner result JSON

    def to_dict(self) -> Dict[str, str]:
        return {F_ENC_KEY: self.enc_key, F_PAYLOAD: self.payload}


@dataclass(frozen=True)
class ResponseEnvelope:
    succeeded: bool
    message: Optional[str] = None
    value: Optional[EncryptedValue] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            F_SUCCEEDED: self.succeeded,
            F_MESSAGE: self.message,
            F_VALUE: self.value.to_dict() if self.value else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ResponseEnvelope":
        """Rebuild the outer envelope; structural problems are transport failures.

        ``value`` is only decoded when the service reports success, so a
        rejected response never touches its Value field.
        """
        if not isinstance(data, dict):
            raise TransportError(f"response is not a JSON object: {type(data).__name__}")
        succeeded = data.get(F_SUCCEEDED)
        if not isinstance(succeeded, bool):
            raise TransportError(f"response has no boolean {F_SUCCEEDED!r} field")
        message = data.get(F_MESSAGE)
        if not succeeded:
            return cls(succeeded=False, message=message)

        raw_value = data.get(F_VALUE)
        value = None
        if isinstance(raw_value, dict):
            enc_key = raw_value.get(F_ENC_KEY)
            payload = raw_value.get(F_PAYLOAD)
            if not isinstance(enc_key, str) or not isinstance(payload, str):
                raise TransportError(f"response {F_VALUE!r} lacks {F_ENC_KEY!r}/{F_PAYLOAD!r} text")
            value = EncryptedValue(enc_key=enc_key, payload=payload)
        elif raw_value is not None:
            raise TransportError(f"response {F_VALUE!r} is not an object")
        return cls(succeeded=True, message=message, value=value)

    @classmethod
    def from_bytes(cls, raw: bytes | str | None) -> "ResponseEnvelope":
        if raw is None or (isinstance(raw, (bytes, str)) and not raw.strip()):
            raise TransportError("empty response")
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as exc:
            raise TransportError(f"response is not valid JSON: {exc}") from exc
        return cls.from_dict(data)


@dataclass(frozen=True)
class SessionKeyMaterial:
    key: bytes
    iv: bytes

    def __repr__(self) -> str:
        return f"SessionKeyMaterial(key=<{len(self.key)} bytes>, iv=<{len(self.iv)} bytes>)"

    def to_json(self) -> str:
        return json.dumps({F_SESSION_KEY: b64e(self.key), F_SESSION_IV: b64e(self.iv)},
                          separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> "SessionKeyMaterial":
        try:
            doc = json.loads(text)
        except ValueError as exc:
            raise SerializationError(f"session key document is not JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise SerializationError("session key document is not a JSON object")
        try:
            return cls(key=b64d(doc[F_SESSION_KEY]), iv=b64d(doc[F_SESSION_IV]))
        except KeyError as exc:
            raise SerializationError(f"session key document lacks {exc}") from exc
        except (ValueError, AttributeError) as exc:
            raise SerializationError(f"session key document is not base64: {exc}") from exc
