# provisioning_core/transport/__init__.py
from provisioning_core.transport.transport_base import BaseTransport
from provisioning_core.transport.transport_http import HTTPAdapter
from provisioning_core.transport.transport_local import LocalAdapter


def transport_factory(config):
    """
    config.transport:
      - "http"  → HTTPAdapter (default)
      - "local" → LocalAdapter (routes registered by the caller)
    """
    mode = (config.transport or "http").lower()

    if mode == "http":
        return HTTPAdapter(timeout=config.timeout)

    if mode == "local":
        return LocalAdapter()

    raise ValueError(f"Unknown transport: {mode}")


__all__ = ["BaseTransport", "HTTPAdapter", "LocalAdapter", "transport_factory"]
