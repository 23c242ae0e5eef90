"""Password-based key derivation for TinyPM envelopes."""
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..core.exceptions import RandomSourceUnavailableError

# Changing any of these breaks decryption of every stored envelope.
PBKDF2_ITERATIONS = 100_000
SALT_LENGTH = 16
KEY_LENGTH = 32


def random_bytes(length: int) -> bytes:
    """Return ``length`` bytes from the OS CSPRNG or fail loudly."""
    try:
        return os.urandom(length)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceUnavailableError(f"random source unavailable: {exc}") from exc


def generate_salt() -> bytes:
    """Return a fresh 16-byte salt."""
    return random_bytes(SALT_LENGTH)


def derive_key(password, salt: bytes) -> bytes:
    """
    Derive a 256-bit key from a password using PBKDF2-HMAC-SHA256.
    Deterministic: the same password and salt always give the same key.
    """
    if len(salt) != SALT_LENGTH:
        raise ValueError(f"salt must be {SALT_LENGTH} bytes, got {len(salt)}")

    if isinstance(password, str):
        password = password.encode("utf-8")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password)
