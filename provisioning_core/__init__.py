"""
Provisioning Core Package
=========================
Client-side envelope protocol for the identity provisioning service.

Provides:
- Signed request envelopes and the one-time public key registration
- Hybrid (RSA + AES) response decryption
- Pluggable transport (HTTP default) and a convenience client
"""

from .crypto import KeyMaterial, SymmetricCodec
from .envelope import RequestEnvelope, ResponseEnvelope, SessionKeyMaterial
from .errors import (
    ProvisioningError,
    TransportError,
    ServiceError,
    CryptoError,
    SerializationError,
)
from .config import ProvisioningConfig
from .client import ProvisioningClient, User

__all__ = [
    "KeyMaterial",
    "SymmetricCodec",
    "RequestEnvelope",
    "ResponseEnvelope",
    "SessionKeyMaterial",
    "ProvisioningError",
    "TransportError",
    "ServiceError",
    "CryptoError",
    "SerializationError",
    "ProvisioningConfig",
    "ProvisioningClient",
    "User",
]
