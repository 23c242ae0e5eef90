"""Authenticated encryption envelope for a single secret.

Layout (binary, before base64 text encoding):
- 16 bytes: PBKDF2 salt
- 12 bytes: AES-GCM nonce
- N bytes: ciphertext followed by the 16-byte GCM tag

The fixed offsets are a storage contract: every envelope ever written by
TinyPM is split at 16 and 28. Salt and nonce are fresh for each call, so
encrypting the same secret twice under the same password gives two
different envelopes.
"""
import base64
import binascii

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import AuthenticationFailure, MalformedEnvelopeError
from .kdf import SALT_LENGTH, derive_key, generate_salt, random_bytes


NONCE_LENGTH = 12
TAG_LENGTH = 16
HEADER_LENGTH = SALT_LENGTH + NONCE_LENGTH


def generate_nonce() -> bytes:
    return random_bytes(NONCE_LENGTH)


def pack(salt: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    if len(salt) != SALT_LENGTH or len(nonce) != NONCE_LENGTH:
        raise ValueError("salt/nonce have the wrong length")
    return salt + nonce + ciphertext


def unpack(raw: bytes) -> tuple[bytes, bytes, bytes]:
    """Split raw envelope bytes into (salt, nonce, ciphertext_and_tag)."""
    if len(raw) < HEADER_LENGTH + TAG_LENGTH:
        raise MalformedEnvelopeError()
    return raw[:SALT_LENGTH], raw[SALT_LENGTH:HEADER_LENGTH], raw[HEADER_LENGTH:]


def encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise MalformedEnvelopeError() from None


def encrypt(password: str, plaintext: str) -> str:
    """
    Encrypt ``plaintext`` under ``password`` and return base64 envelope text.

    A new salt and nonce are drawn for every call; the derived key only lives
    for the duration of this function.
    """
    salt = generate_salt()
    nonce = generate_nonce()
    key = derive_key(password, salt)
    ct = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return encode(pack(salt, nonce, ct))


def decrypt(password: str, envelope: str) -> str:
    """
    Verify and decrypt envelope text produced by :func:`encrypt`.

    Every failure (wrong password, truncated or tampered bytes, bad base64)
    raises the same :class:`AuthenticationFailure` so callers get no oracle.
    """
    try:
        salt, nonce, ct = unpack(decode(envelope))
        key = derive_key(password, salt)
        pt = AESGCM(key).decrypt(nonce, ct, None)
        return pt.decode("utf-8")
    except (AuthenticationFailure, InvalidTag, UnicodeDecodeError, TypeError, ValueError):
        raise AuthenticationFailure() from None
