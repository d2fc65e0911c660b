import json
from pathlib import Path

import pytest

from provisioning_core.config import ProvisioningConfig
from provisioning_core.crypto import KeyMaterial, SymmetricCodec, generate_session_key
from provisioning_core.transport import LocalAdapter
from provisioning_core.utils import b64d

FIXTURES = Path(__file__).parent / "fixtures"
BASE_URL = "https://provisioning.test/api/"


def server_encrypt(result, key_material, session=None):
    """Play the service: wrap a fresh AES key with the client's public key."""
    session = session or generate_session_key()
    codec = SymmetricCodec()
    return {
        "Succeeded": True,
        "Message": None,
        "Value": {
            "EncKey": key_material.encrypt(session.to_json()),
            "Payload": codec.encrypt(json.dumps(result), session.key, session.iv),
        },
    }


class FakeProvisioningServer:
    """
    Minimal stand-in for the provisioning service on top of LocalAdapter.

    Verifies each request signature, decodes the payload and answers through
    a per-endpoint handler returning the inner result dict.
    """

    def __init__(self, key_material, api_key="test-api-key"):
        self.keys = key_material
        self.api_key = api_key
        self.transport = LocalAdapter()
        self.received = []
        self.registered = False

    def on(self, endpoint, handler):
        def dispatch(body):
            if body["ApiKey"] != self.api_key:
                return {"Succeeded": False, "Message": "unknown api key", "Value": None}
            if not self.keys.verify(body["Timestamp"] + body["Payload"], body["Signature"]):
                return {"Succeeded": False, "Message": "invalid signature", "Value": None}
            payload = json.loads(b64d(body["Payload"]).decode("utf-8"))
            self.received.append((endpoint, payload))
            return server_encrypt(handler(payload), self.keys)

        self.transport.route(BASE_URL + endpoint, dispatch)

    def enable_registration(self):
        def register(body):
            if not self.keys.verify(body["Timestamp"] + body["Payload"], body["Signature"]):
                return {"Succeeded": False, "Message": "invalid signature", "Value": None}
            if self.registered:
                return {"Succeeded": False, "Message": "key already registered", "Value": None}
            self.registered = body["Payload"] == self.keys.trimmed_public_key
            return {"Succeeded": self.registered, "Message": None, "Value": None}

        self.transport.route(BASE_URL + "PKReg", register)


@pytest.fixture(scope="session")
def key_material():
    return KeyMaterial.from_files(
        str(FIXTURES / "public_key.pem"),
        str(FIXTURES / "private_key_pkcs8.pem"),
    )


@pytest.fixture
def codec():
    return SymmetricCodec()


@pytest.fixture
def config():
    return ProvisioningConfig(base_url=BASE_URL, api_key="test-api-key", transport="local")


@pytest.fixture
def server(key_material):
    return FakeProvisioningServer(key_material)
