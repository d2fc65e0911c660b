"""
provisioning_core.crypto
------------------------
Cryptographic primitives for the provisioning envelope protocol:

- KeyMaterial: RSA key pair; PKCS#1 v1.5 signatures and RSA encryption
- SymmetricCodec: AES-CBC with PKCS#7 padding for response payloads

Every text <-> bytes conversion goes through TEXT_ENCODING (UTF-16LE).
"""

from __future__ import annotations
from typing import Optional, Tuple
import os

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .constants import (
    TEXT_ENCODING,
    SIGNATURE_HASH,
    RSA_ENCRYPTION_PADDING,
    AES_BLOCK_BITS,
    AES_KEY_SIZES,
)
from .envelope import SessionKeyMaterial
from .errors import CryptoError
from .utils import b64e, b64d, trim_public_key


def _signature_hash() -> hashes.HashAlgorithm:
    return getattr(hashes, SIGNATURE_HASH)()

def _encryption_padding() -> padding.AsymmetricPadding:
    if RSA_ENCRYPTION_PADDING == "oaep":
        return padding.OAEP(mgf=padding.MGF1(hashes.SHA1()), algorithm=hashes.SHA1(), label=None)
    return padding.PKCS1v15()

# --------- RSA key pair ----------
def rsa_generate(bits: int = 2048) -> Tuple[bytes, bytes]:
    """Return (private PKCS#8 PEM, public SubjectPublicKeyInfo PEM)."""
    sk = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    priv_pem = sk.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    pub_pem = sk.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return priv_pem, pub_pem


class KeyMaterial:
    """
    The client's RSA key pair, immutable once loaded.

    The trimmed public key text is derived once here and reused verbatim
    by every registration attempt.
    """

    def __init__(self, public_key: rsa.RSAPublicKey, private_key: rsa.RSAPrivateKey,
                 public_pem: Optional[str] = None):
        self._public_key = public_key
        self._private_key = private_key
        if public_pem is None:
            public_pem = public_key.public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            ).decode("ascii")
        self._trimmed_public_key = trim_public_key(public_pem)

    @classmethod
    def from_pem(cls, public_pem: bytes | str, private_pem: bytes | str) -> "KeyMaterial":
        if isinstance(public_pem, str):
            public_pem = public_pem.encode("ascii")
        if isinstance(private_pem, str):
            private_pem = private_pem.encode("ascii")
        try:
            pk = serialization.load_pem_public_key(public_pem)
            sk = serialization.load_pem_private_key(private_pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise CryptoError(f"unable to load RSA key pair: {exc}") from exc
        if not isinstance(pk, rsa.RSAPublicKey) or not isinstance(sk, rsa.RSAPrivateKey):
            raise CryptoError("key pair must be RSA")
        return cls(pk, sk, public_pem=public_pem.decode("ascii"))

    @classmethod
    def from_files(cls, public_key_path: str, private_key_path: str) -> "KeyMaterial":
        """Load a PEM public key and an unencrypted PKCS#8 PEM private key."""
        with open(public_key_path, "rb") as f:
            public_pem = f.read()
        with open(private_key_path, "rb") as f:
            private_pem = f.read()
        return cls.from_pem(public_pem, private_pem)

    @property
    def trimmed_public_key(self) -> str:
        return self._trimmed_public_key

    @property
    def key_size(self) -> int:
        return self._private_key.key_size

    def sign(self, message: str) -> str:
        try:
            sig = self._private_key.sign(message.encode(TEXT_ENCODING), padding.PKCS1v15(), _signature_hash())
        except (ValueError, TypeError) as exc:
            raise CryptoError(f"signing failed: {exc}") from exc
        return b64e(sig)

    def verify(self, message: str, signature: str) -> bool:
        try:
            self._public_key.verify(b64d(signature), message.encode(TEXT_ENCODING),
                                    padding.PKCS1v15(), _signature_hash())
            return True
        except (InvalidSignature, ValueError):
            return False

    def encrypt(self, plaintext: str) -> str:
        try:
            ct = self._public_key.encrypt(plaintext.encode(TEXT_ENCODING), _encryption_padding())
        except ValueError as exc:
            # plaintext too long for the key size
            raise CryptoError(f"RSA encryption failed: {exc}") from exc
        return b64e(ct)

    def decrypt(self, ciphertext: str) -> str:
        try:
            raw = b64d(ciphertext)
        except ValueError as exc:
            raise CryptoError("RSA ciphertext is not valid base64") from exc
        try:
            pt = self._private_key.decrypt(raw, _encryption_padding())
        except ValueError as exc:
            raise CryptoError(f"RSA decryption failed: {exc}") from exc
        try:
            return pt.decode(TEXT_ENCODING)
        except UnicodeDecodeError as exc:
            raise CryptoError("RSA plaintext is not valid UTF-16LE text") from exc


# --------- AES-CBC ----------
def generate_session_key(key_size: int = 32) -> SessionKeyMaterial:
    return SessionKeyMaterial(key=os.urandom(key_size), iv=os.urandom(AES_BLOCK_BITS // 8))


class SymmetricCodec:
    """AES-CBC/PKCS#7 with a fixed text encoding.

    ``encoding`` exists for diagnostics only; the service always uses
    TEXT_ENCODING.
    """

    def __init__(self, encoding: str = TEXT_ENCODING):
        self.encoding = encoding

    @staticmethod
    def _cipher(key: bytes, iv: bytes) -> Cipher:
        if len(key) not in AES_KEY_SIZES:
            raise CryptoError(f"invalid AES key length: {len(key)} bytes")
        if len(iv) != AES_BLOCK_BITS // 8:
            raise CryptoError(f"invalid AES IV length: {len(iv)} bytes")
        return Cipher(algorithms.AES(key), modes.CBC(iv))

    def encrypt_bytes(self, data: bytes, key: bytes, iv: bytes) -> bytes:
        padder = sym_padding.PKCS7(AES_BLOCK_BITS).padder()
        padded = padder.update(data) + padder.finalize()
        enc = self._cipher(key, iv).encryptor()
        return enc.update(padded) + enc.finalize()

    def decrypt_bytes(self, ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
        dec = self._cipher(key, iv).decryptor()
        try:
            padded = dec.update(ciphertext) + dec.finalize()
            unpadder = sym_padding.PKCS7(AES_BLOCK_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            # truncated ciphertext or bad padding (usually wrong key/iv)
            raise CryptoError(f"AES decryption failed: {exc}") from exc

    def encrypt(self, plaintext: str, key: bytes, iv: bytes) -> str:
        return b64e(self.encrypt_bytes(plaintext.encode(self.encoding), key, iv))

    def decrypt(self, ciphertext: str, key: bytes, iv: bytes) -> str:
        try:
            raw = b64d(ciphertext)
        except ValueError as exc:
            raise CryptoError("AES ciphertext is not valid base64") from exc
        pt = self.decrypt_bytes(raw, key, iv)
        try:
            return pt.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise CryptoError(f"AES plaintext is not valid {self.encoding} text") from exc
