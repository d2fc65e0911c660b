# provisioning_core/config.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os


@dataclass(frozen=True)
class ProvisioningConfig:
    """
    Immutable client configuration, built once and passed explicitly.

    base_url is the service root; endpoint names are appended by url_for().
    """
    base_url: str
    api_key: str
    public_key_path: Optional[str] = None
    private_key_path: Optional[str] = None
    timeout: float = 10.0
    transport: str = "http"   # http | local

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    @classmethod
    def from_env(cls) -> "ProvisioningConfig":
        base_url = os.getenv("PROVISIONING_URL")
        api_key = os.getenv("PROVISIONING_API_KEY")
        if not base_url:
            raise ValueError("PROVISIONING_URL is not set")
        if not api_key:
            raise ValueError("PROVISIONING_API_KEY is not set")
        return cls(
            base_url=base_url,
            api_key=api_key,
            public_key_path=os.getenv("PROVISIONING_PUBLIC_KEY", "conf/public_key.pem"),
            private_key_path=os.getenv("PROVISIONING_PRIVATE_KEY", "conf/private_key_pkcs8.pem"),
            timeout=float(os.getenv("PROVISIONING_TIMEOUT", "10")),
            transport=os.getenv("PROVISIONING_TRANSPORT", "http").lower(),
        )
