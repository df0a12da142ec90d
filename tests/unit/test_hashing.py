# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import hashlib
import hmac
from concurrent.futures import ThreadPoolExecutor

import pytest
from aws_api_signers import EMPTY_SHA256_HASH, Hmac
from aws_api_signers.exceptions import UnsupportedAlgorithmError

# RFC 4231 / RFC 2202 test case 2
RFC_KEY = b"Jefe"
RFC_DATA = b"what do ya want for nothing?"


@pytest.mark.parametrize(
    "kind,expected",
    [
        (
            "sha256",
            "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843",
        ),
        ("sha1", "effcdf6ae5eb2fa2d27416d5f184df9c259a7c79"),
    ],
)
def test_hex_sign_rfc_vectors(kind: str, expected: str) -> None:
    assert Hmac(kind).hex_sign(RFC_DATA, RFC_KEY) == expected


def test_sign_returns_raw_bytes() -> None:
    engine = Hmac("sha256")
    signed = engine.sign(RFC_DATA, RFC_KEY)
    assert isinstance(signed, bytes)
    assert len(signed) == 32
    assert signed.hex() == engine.hex_sign(RFC_DATA, RFC_KEY)


def test_sign_uses_configured_key_by_default() -> None:
    engine = Hmac("sha256", RFC_KEY)
    assert engine.key == RFC_KEY
    assert engine.sign(RFC_DATA) == engine.sign(RFC_DATA, RFC_KEY)
    assert engine.sign(RFC_DATA) != engine.sign(RFC_DATA, b"other")


def test_str_inputs_are_utf8_encoded() -> None:
    engine = Hmac("sha256", "Jefe")
    assert engine.sign("what do ya want for nothing?") == engine.sign(
        RFC_DATA, RFC_KEY
    )
    assert engine.digest("日本") == hashlib.sha256("日本".encode()).hexdigest()


@pytest.mark.parametrize(
    "content,expected",
    [
        (b"", EMPTY_SHA256_HASH),
        (
            b"abc",
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
        ),
    ],
)
def test_digest(content: bytes, expected: str) -> None:
    assert Hmac("sha256").digest(content) == expected


def test_repeated_calls_do_not_leak_state() -> None:
    engine = Hmac("sha256", RFC_KEY)
    first = engine.digest(b"abc")
    engine.sign(b"something else entirely")
    engine.digest(b"prefix")
    assert engine.digest(b"abc") == first
    assert engine.hex_sign(RFC_DATA) == engine.hex_sign(RFC_DATA)


def test_shared_instance_across_threads() -> None:
    engine = Hmac("sha256", RFC_KEY)
    messages = [f"message-{i}".encode() for i in range(200)]
    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(engine.hex_sign, messages))
    expected = [hmac.new(RFC_KEY, m, hashlib.sha256).hexdigest() for m in messages]
    assert results == expected


def test_algorithm_name_is_case_insensitive() -> None:
    engine = Hmac("SHA256")
    assert engine.name == "sha256"
    assert str(engine) == "HmacSHA256"
    assert engine.digest(b"") == EMPTY_SHA256_HASH


@pytest.mark.parametrize("kind", ["sha257", "not-a-hash", "", "shake_128"])
def test_unrecognized_algorithm(kind: str) -> None:
    with pytest.raises(UnsupportedAlgorithmError):
        Hmac(kind)


def test_unrecognized_algorithm_is_value_error() -> None:
    with pytest.raises(ValueError):
        Hmac("md7")


def test_repr_does_not_include_key() -> None:
    engine = Hmac("sha256", b"SUPERSECRET")
    assert "SUPERSECRET" not in repr(engine)
    assert "SUPERSECRET" not in str(engine)
