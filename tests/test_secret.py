import os
import re

import pytest

from totp_auth import (
    EntropySourceError,
    InvalidConfiguration,
    InvalidSecretFormat,
    SecretStore,
    generate_secret,
    random_base32,
)

BASE32_TEXT = re.compile(r"^[A-Z2-7]+$")


@pytest.fixture
def store():
    return SecretStore()


# ---------------------------
# Encoding Tests
# ---------------------------
@pytest.mark.parametrize(
    "raw, text",
    [
        (b"f", "MY"),
        (b"fo", "MZXQ"),
        (b"foo", "MZXW6"),
        (b"foob", "MZXW6YQ"),
        (b"fooba", "MZXW6YTB"),
        (b"foobar", "MZXW6YTBOI"),
        (b"12345678901234567890", "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"),
    ],
)
def test_encode_rfc4648_vectors_unpadded(store, raw, text):
    assert store.encode(raw) == text
    assert store.decode(text) == raw


def test_round_trip_for_every_length(store):
    for length in range(1, 65):
        raw = os.urandom(length)
        assert store.decode(store.encode(raw)) == raw


def test_decode_accepts_padding_and_lowercase(store):
    assert store.decode("MZXW6===") == b"foo"
    assert store.decode("MZXW6YTBOI======") == b"foobar"
    assert store.decode("mzxw6ytboi") == b"foobar"


def test_encode_empty_raises(store):
    with pytest.raises(InvalidSecretFormat):
        store.encode(b"")


@pytest.mark.parametrize(
    "text",
    [
        "MZXW6YT1",  # '1' outside the alphabet
        "MZXW8===",  # '8'
        "0ZXW6===",  # '0'
        "MZXW 6YTB",
        "MZ=XW6",
        "",
        "====",
        "M",
        "MZX",
        "MZXW6Y",
        "MZXW6==",  # padding that does not reach a multiple of 8
        "MY==============",
        "MZXW6YTſ",  # long s upper-cases to S
        "MZXW6ß",  # sharp s upper-cases to SS
        "MZXW6YTBOı",  # dotless i upper-cases to I
    ],
)
def test_decode_rejects_invalid_text(store, text):
    with pytest.raises(InvalidSecretFormat):
        store.decode(text)


def test_decode_rejects_non_string(store):
    with pytest.raises(InvalidSecretFormat):
        store.decode(b"MZXW6YTB")


def test_load_canonicalizes_text(store):
    secret = store.load("mzxw6ytboi======")
    assert secret.raw == b"foobar"
    assert secret.text == "MZXW6YTBOI"


def test_secret_repr_hides_key_material(store):
    secret = store.load("MZXW6YTBOI")
    assert "MZXW6YTBOI" not in repr(secret)
    assert "foobar" not in repr(secret)


# ---------------------------
# Generation Tests
# ---------------------------
def test_generate_default_length(store):
    secret = store.generate()
    assert len(secret.raw) == 10
    assert len(secret.text) == 16
    assert BASE32_TEXT.match(secret.text)
    assert store.decode(secret.text) == secret.raw


def test_generate_is_unique():
    secrets_seen = {generate_secret().raw for _ in range(1000)}
    assert len(secrets_seen) == 1000


def test_random_base32_longer_secret():
    text = random_base32(length=20)
    assert len(text) == 32
    assert BASE32_TEXT.match(text)


def test_generate_uses_injected_source():
    store = SecretStore(randbytes=lambda n: b"\xff" * n)
    assert store.generate().raw == b"\xff" * 10


@pytest.mark.parametrize("error", [NotImplementedError, OSError])
def test_generate_fails_without_entropy(error):
    def broken(n):
        raise error("no urandom")

    with pytest.raises(EntropySourceError):
        SecretStore(randbytes=broken).generate()


def test_generate_rejects_short_read():
    with pytest.raises(EntropySourceError):
        SecretStore(randbytes=lambda n: b"\x00").generate()


def test_store_rejects_short_secrets():
    with pytest.raises(InvalidConfiguration):
        SecretStore(length=8)
