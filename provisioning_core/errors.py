# provisioning_core/errors.py
from __future__ import annotations
from typing import Optional


class ProvisioningError(Exception):
    pass


class TransportError(ProvisioningError):
    """Endpoint unreachable, or the response could not be read as an envelope."""


class TransportTransientError(TransportError):
    pass


class TransportPermanentError(TransportError):
    pass


class ServiceError(ProvisioningError):
    """The service answered and explicitly reported failure."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "service reported failure")
        self.message = message


class CryptoError(ProvisioningError):
    pass


class SerializationError(ProvisioningError):
    pass
