"""
provisioning_core.client
------------------------
Convenience layer over the envelope protocol.

ProvisioningClient.send_request() keeps the typed failures of the protocol
core. send_request_and_parse() and the boolean business helpers collapse
every ProvisioningError into {"Succeeded": False} / False / None after
logging it, for callers that only need "did it work".
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from . import constants as C
from .config import ProvisioningConfig
from .crypto import KeyMaterial, SymmetricCodec
from .envelope import ResponseEnvelope
from .errors import ProvisioningError, ServiceError
from .logger import get_logger
from .protocol import (
    build_request,
    build_registration,
    current_timestamp,
    parse_response,
    parse_registration_response,
    require_success,
)
from .transport import BaseTransport, transport_factory

log = get_logger("Provisioning.Client")


@dataclass
class User:
    email: str
    first_name: str = ""
    last_name: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"Email": self.email, "FirstName": self.first_name, "LastName": self.last_name}


class ProvisioningClient:
    def __init__(self, config: ProvisioningConfig, key_material: Optional[KeyMaterial] = None,
                 transport: Optional[BaseTransport] = None, codec: Optional[SymmetricCodec] = None):
        """Keys are loaded from the configured paths when key_material is not given."""
        if key_material is None:
            if not config.public_key_path or not config.private_key_path:
                raise ValueError("public_key_path and private_key_path are required")
            key_material = KeyMaterial.from_files(config.public_key_path, config.private_key_path)
        self.config = config
        self.key_material = key_material
        self.transport = transport or transport_factory(config)
        self.codec = codec or SymmetricCodec()

    @classmethod
    def from_config(cls, config: ProvisioningConfig, transport: Optional[BaseTransport] = None) -> "ProvisioningClient":
        return cls(config, transport=transport)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "ProvisioningClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Protocol calls
    # ------------------------------------------------------------------
    def send_request(self, payload: Any, endpoint: str) -> Dict[str, Any]:
        """Sign, send and decrypt one request. Typed errors propagate."""
        url = self.config.url_for(endpoint)
        request = build_request(payload, current_timestamp(), self.config.api_key, self.key_material)
        raw = self.transport.post(url, request.to_dict())
        return parse_response(raw, self.key_material, self.codec)

    def send_request_and_parse(self, payload: Any, endpoint: str) -> Dict[str, Any]:
        try:
            return self.send_request(payload, endpoint)
        except ProvisioningError as e:
            log.error(f"[{endpoint}] {type(e).__name__}: {e}")
            return {C.F_SUCCEEDED: False}

    def register_public_key(self) -> ResponseEnvelope:
        """Publish the public key once. Transport failures propagate."""
        url = self.config.url_for(C.PUBLIC_KEY_REGISTRATION)
        request = build_registration(current_timestamp(), self.config.api_key, self.key_material)
        raw = self.transport.post(url, request.to_dict())
        return parse_registration_response(raw)

    def public_key_registration(self) -> bool:
        try:
            return self.register_public_key().succeeded
        except ProvisioningError as e:
            log.error(f"[PKREG] {type(e).__name__}: {e}")
            return False

    # ------------------------------------------------------------------
    # Business helpers
    # ------------------------------------------------------------------
    def _succeeded(self, payload: Any, endpoint: str) -> bool:
        return bool(self.send_request_and_parse(payload, endpoint).get(C.F_SUCCEEDED))

    def _value(self, payload: Any, endpoint: str) -> Any:
        result = self.send_request_and_parse(payload, endpoint)
        try:
            return require_success(result).get(C.F_VALUE)
        except ServiceError:
            return None

    def is_user_exists(self, email: str) -> bool:
        return self._succeeded(email, C.IS_USER_EXISTS)

    def add_user(self, user: User) -> bool:
        return self._succeeded(user.to_dict(), C.ADD_USER)

    def edit_user(self, user: User) -> bool:
        return self._succeeded(user.to_dict(), C.EDIT_USER)

    def suspend_user(self, email: str) -> bool:
        return self._succeeded(email, C.SUSPEND_USER)

    def delete_user(self, email: str) -> bool:
        return self._succeeded(email, C.DELETE_USER)

    def resend_activation_email(self, email: str) -> bool:
        return self._succeeded(email, C.RESEND_ACTIVATION_EMAIL)

    def add_group(self, group: Dict[str, str]) -> Optional[str]:
        """group: {"Name": ..., "OrganizationalUnit": ...}; returns the group guid."""
        return self._value(group, C.ADD_GROUP)

    def delete_group(self, name: str) -> bool:
        return self._succeeded(name, C.DELETE_GROUP)

    def assign_group_member(self, member: Dict[str, str]) -> bool:
        """member: {"GroupName": ..., "MemberName": <email>}"""
        return self._succeeded(member, C.ASSIGN_GROUP_MEMBER)

    def unassign_group_member(self, member: Dict[str, str]) -> bool:
        return self._succeeded(member, C.UNASSIGN_GROUP_MEMBER)

    def post_role(self, role: Dict[str, str]) -> Optional[str]:
        """Create or update a role ({"Id": ..., "Name": ...}); returns the role guid."""
        return self._value(role, C.POST_ROLE)

    def delete_role(self, role_id: str) -> bool:
        return self._succeeded(role_id, C.DELETE_ROLE)

    def get_roles(self, size: Dict[str, int]) -> Optional[Dict[str, Any]]:
        """size: {"Size": n, "Offset": k}; returns {"Total": ..., "Items": [...]}."""
        return self._value(size, C.GET_ROLES)

    def assign_to_role(self, items: Dict[str, Any]) -> bool:
        """items: {"Code": <role guid>, "Users": [...], "Groups": [...]}"""
        return self._succeeded(items, C.ASSIGN_TO_ROLE)

    def get_assigned_to_role(self, role_id: str) -> Optional[Dict[str, Any]]:
        return self._value(role_id, C.GET_ASSIGNED_TO_ROLE)
