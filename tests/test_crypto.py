import json

import pytest

from provisioning_core.crypto import KeyMaterial, SymmetricCodec, rsa_generate, generate_session_key
from provisioning_core.errors import CryptoError
from provisioning_core.utils import b64e

from conftest import FIXTURES

# Produced with: openssl enc -aes-256-cbc over the UTF-16LE bytes of '{"Succeeded":true}'
AES_KEY = bytes(range(32))
AES_IV = bytes.fromhex("f0e0d0c0b0a090807060504030201000")
AES_PLAINTEXT = '{"Succeeded":true}'
AES_CIPHERTEXT = "Rfi1UEge7eXnNZsSQLj8HB1qNQUiKT1M5Bu+mkiE8j+M8dSgekpCT6XxiGY6zfzP"

# openssl dgst -sha256 -sign over UTF-16LE("2024-01-01 00:00:00Z" + base64('{"Email":"a@b.com"}'))
PINNED_SIGNATURE = "OrojmxL/0Yx8NvNem8KGXxQ275d4r5wwgKf1/8QnBY5G8ijaGiCy2r5Ug1MKxVA8/tGN40KE52P5TFdTnimXJj0Q/f1Jfa3+KM8QwU2ensXVkiB5mugNwJQXzAwdS3lzPhZvi+nCsPGehGCzHhHucOBZIiKhhgI9QXwF62q8XlUIm7tD91G3mRE/wjjTQAHW2b2Egqtl/ySis/NgFAz44vm6tahIhSb+B0B+ypn/mysMhP5AefxN7/974ugQkF0fe9w9N68uMGZBerpEZ6hRSnWLBtMljrYXLBrF4yCXQxWlBga5ZdVCVXcTQXGgsOX2z8wDBno2+S2nhn4OuV4Udg=="


def test_sign_matches_openssl_fixture(key_material):
    msg = "2024-01-01 00:00:00Z" + "eyJFbWFpbCI6ImFAYi5jb20ifQ=="
    assert key_material.sign(msg) == PINNED_SIGNATURE


def test_sign_is_deterministic(key_material):
    msg = "2024-01-01 00:00:00Zpayload"
    assert key_material.sign(msg) == key_material.sign(msg)
    assert key_material.sign(msg) != key_material.sign(msg + "x")


def test_sign_verify(key_material):
    sig = key_material.sign("hello")
    assert key_material.verify("hello", sig)
    assert not key_material.verify("hell0", sig)
    assert not key_material.verify("hello", "not-base64!")


def test_rsa_encrypt_decrypt(key_material):
    ct = key_material.encrypt('{"K":"abc","V":"def"}')
    assert key_material.decrypt(ct) == '{"K":"abc","V":"def"}'


def test_rsa_decrypt_rejects_garbage(key_material):
    with pytest.raises(CryptoError):
        key_material.decrypt("%%%")
    with pytest.raises(CryptoError):
        key_material.decrypt(b64e(b"\x01" * 16))


def test_rsa_decrypt_with_other_key_fails(key_material):
    priv, pub = rsa_generate()
    other = KeyMaterial.from_pem(pub, priv)
    ct = other.encrypt("secret")
    # OpenSSL builds with implicit rejection return noise instead of raising
    try:
        assert key_material.decrypt(ct) != "secret"
    except CryptoError:
        pass


def test_from_pem_rejects_bad_key():
    with pytest.raises(CryptoError):
        KeyMaterial.from_pem(b"not a key", b"not a key either")


def test_trimmed_public_key_is_cached_base64(key_material):
    pem = (FIXTURES / "public_key.pem").read_text()
    trimmed = key_material.trimmed_public_key
    assert "-----" not in trimmed
    assert "\n" not in trimmed
    assert trimmed == "".join(pem.strip().splitlines()[1:-1])
    assert key_material.trimmed_public_key is trimmed


def test_trimmed_public_key_from_generated_pair():
    priv, pub = rsa_generate()
    km = KeyMaterial.from_pem(pub, priv)
    assert km.trimmed_public_key.startswith("MII")
    assert km.key_size == 2048


def test_aes_matches_openssl_vector(codec):
    assert codec.encrypt(AES_PLAINTEXT, AES_KEY, AES_IV) == AES_CIPHERTEXT
    assert codec.decrypt(AES_CIPHERTEXT, AES_KEY, AES_IV) == AES_PLAINTEXT


def test_wrong_text_encoding_does_not_parse():
    wrong = SymmetricCodec(encoding="utf-8")
    text = wrong.decrypt(AES_CIPHERTEXT, AES_KEY, AES_IV)
    assert text != AES_PLAINTEXT
    with pytest.raises(json.JSONDecodeError):
        json.loads(text)


def test_aes_wrong_key_fails(codec):
    other_key = bytes(reversed(AES_KEY))
    # a wrong key either breaks the padding or the UTF-16LE text, never passes silently
    try:
        text = codec.decrypt(AES_CIPHERTEXT, other_key, AES_IV)
    except CryptoError:
        return
    assert text != AES_PLAINTEXT


def test_aes_rejects_bad_lengths(codec):
    with pytest.raises(CryptoError):
        codec.decrypt(AES_CIPHERTEXT, b"short", AES_IV)
    with pytest.raises(CryptoError):
        codec.decrypt(AES_CIPHERTEXT, AES_KEY, b"\x00" * 8)
    with pytest.raises(CryptoError):
        codec.decrypt(b64e(b"\x00" * 15), AES_KEY, AES_IV)


def test_session_key_roundtrip(codec):
    session = generate_session_key(16)
    assert len(session.key) == 16 and len(session.iv) == 16
    ct = codec.encrypt("Zoë", session.key, session.iv)
    assert codec.decrypt(ct, session.key, session.iv) == "Zoë"
    assert "bytes" in repr(session)
