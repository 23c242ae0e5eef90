"""Random password generation for new records."""
import base64

from .kdf import random_bytes

GENERATED_BYTES = 32


def generate_password(length: int = GENERATED_BYTES) -> str:
    """Return ``length`` random bytes as base64 text (44 chars for the default)."""
    if length <= 0:
        raise ValueError("length must be positive")
    return base64.b64encode(random_bytes(length)).decode("ascii")
