"""Unit tests for the Key Derivation Function (KDF) module."""

import hashlib
from unittest.mock import patch

import pytest

from tinypm.core.exceptions import RandomSourceUnavailableError
from tinypm.security.kdf import (
    KEY_LENGTH,
    PBKDF2_ITERATIONS,
    SALT_LENGTH,
    derive_key,
    generate_salt,
    random_bytes,
)


def test_generate_salt_length():
    """Salts are 16 random bytes."""
    salt = generate_salt()
    assert isinstance(salt, bytes)
    assert len(salt) == SALT_LENGTH == 16


def test_generate_salt_is_fresh():
    assert generate_salt() != generate_salt()


def test_derive_key_length_and_type():
    key = derive_key("secure_string_password", generate_salt())
    assert isinstance(key, bytes)
    assert len(key) == KEY_LENGTH == 32


def test_derive_key_is_deterministic():
    """Same password and salt must give the same key, or decryption breaks."""
    salt = b"\x01" * 16
    assert derive_key("password123", salt) == derive_key("password123", salt)


def test_derive_key_str_and_bytes_agree():
    salt = generate_salt()
    assert derive_key("password123", salt) == derive_key(b"password123", salt)


def test_derive_key_depends_on_salt_and_password():
    salt_a, salt_b = b"\x00" * 16, b"\xff" * 16
    assert derive_key("pw", salt_a) != derive_key("pw", salt_b)
    assert derive_key("pw", salt_a) != derive_key("pw2", salt_a)


def test_derive_key_matches_pbkdf2_sha256_100k():
    """The scheme is PBKDF2-HMAC-SHA256 with 100,000 iterations."""
    salt = bytes(range(16))
    expected = hashlib.pbkdf2_hmac("sha256", "hunter2".encode("utf-8"), salt, 100_000, 32)
    assert PBKDF2_ITERATIONS == 100_000
    assert derive_key("hunter2", salt) == expected


def test_derive_key_unicode_password_is_utf8():
    salt = bytes(range(16))
    expected = hashlib.pbkdf2_hmac("sha256", "pässwörd🔒".encode("utf-8"), salt, 100_000, 32)
    assert derive_key("pässwörd🔒", salt) == expected


@pytest.mark.parametrize("salt", [b"", b"short", b"\x00" * 15, b"\x00" * 17])
def test_derive_key_rejects_bad_salt_length(salt):
    with pytest.raises(ValueError, match="salt must be 16 bytes"):
        derive_key("pw", salt)


def test_random_bytes_failure_is_fatal():
    """An unavailable random source raises instead of degrading."""
    with patch("tinypm.security.kdf.os.urandom", side_effect=NotImplementedError("no source")):
        with pytest.raises(RandomSourceUnavailableError):
            random_bytes(16)
