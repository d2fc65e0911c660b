"""
provisioning_core.protocol
--------------------------
The envelope protocol proper:

- build_request(): base64(canonical JSON) payload signed as timestamp + payload
- build_registration(): trimmed public key sent as-is, signed as timestamp + key
- parse_response(): RSA-unwrap the session key, AES-decrypt the inner result

Nothing here performs I/O, retries, or converts a failure into a boolean.
Typed errors from errors.py propagate to the caller.
"""

from __future__ import annotations
from typing import Any, Dict, Union
import json

from .constants import F_SUCCEEDED, F_MESSAGE
from .crypto import KeyMaterial, SymmetricCodec
from .envelope import RequestEnvelope, ResponseEnvelope, SessionKeyMaterial
from .errors import SerializationError, ServiceError, TransportError
from .logger import get_logger
from .utils import b64e, canonical_json, now_ts

log = get_logger("Provisioning.Protocol")

RawResponse = Union[bytes, str, Dict[str, Any], ResponseEnvelope, None]


def current_timestamp() -> str:
    return now_ts()


def encode_payload(payload: Any) -> str:
    try:
        return b64e(canonical_json(payload))
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"payload is not JSON-serializable: {exc}") from exc


def build_request(payload: Any, timestamp: str, api_key: str, key_material: KeyMaterial) -> RequestEnvelope:
    encoded = encode_payload(payload)
    # timestamp first, payload second, no separator
    signature = key_material.sign(timestamp + encoded)
    return RequestEnvelope(payload=encoded, timestamp=timestamp, signature=signature, api_key=api_key)


def build_registration(timestamp: str, api_key: str, key_material: KeyMaterial) -> RequestEnvelope:
    """Envelope for the one-time public key registration.

    The payload is the trimmed public key text itself, neither JSON nor
    base64-wrapped. The service refuses a second registration of the same
    key; that outcome is reported, not prevented, here.
    """
    key_text = key_material.trimmed_public_key
    signature = key_material.sign(timestamp + key_text)
    return RequestEnvelope(payload=key_text, timestamp=timestamp, signature=signature, api_key=api_key)


def _as_envelope(raw: RawResponse) -> ResponseEnvelope:
    if isinstance(raw, ResponseEnvelope):
        return raw
    if isinstance(raw, dict):
        return ResponseEnvelope.from_dict(raw)
    return ResponseEnvelope.from_bytes(raw)


def recover_session_key(enc_key: str, key_material: KeyMaterial) -> SessionKeyMaterial:
    return SessionKeyMaterial.from_json(key_material.decrypt(enc_key))


def decrypt_result(ciphertext: str, session: SessionKeyMaterial, codec: SymmetricCodec) -> Dict[str, Any]:
    text = codec.decrypt(ciphertext, session.key, session.iv)
    try:
        result = json.loads(text)
    except ValueError as exc:
        raise SerializationError(f"decrypted payload is not JSON: {exc}") from exc
    if not isinstance(result, dict) or not isinstance(result.get(F_SUCCEEDED), bool):
        raise SerializationError(f"decrypted payload has no boolean {F_SUCCEEDED!r} field")
    return result


def parse_response(raw: RawResponse, key_material: KeyMaterial, symmetric_codec: SymmetricCodec) -> Dict[str, Any]:
    """
    Decrypt one service response into its inner result mapping.

    Raises:
        TransportError: response absent or not an envelope
        ServiceError: outer Succeeded is false (Value is never touched)
        CryptoError / SerializationError: unwrap or decrypt/parse failed

    An inner Succeeded of false is logged and returned; the caller decides.
    """
    env = _as_envelope(raw)
    if not env.succeeded:
        log.error(f"[RESPONSE] service rejected request: {env.message}")
        raise ServiceError(env.message)
    if env.value is None:
        raise TransportError("successful response carries no encrypted value")

    session = recover_session_key(env.value.enc_key, key_material)
    result = decrypt_result(env.value.payload, session, symmetric_codec)

    if not result[F_SUCCEEDED]:
        log.warning(f"[RESPONSE] operation failed: {result.get(F_MESSAGE)}")
    return result


def parse_registration_response(raw: RawResponse) -> ResponseEnvelope:
    env = _as_envelope(raw)
    if not env.succeeded:
        log.error(f"[PKREG] registration rejected: {env.message}")
    return env


def require_success(result: Dict[str, Any]) -> Dict[str, Any]:
    if not result.get(F_SUCCEEDED):
        raise ServiceError(result.get(F_MESSAGE))
    return result
