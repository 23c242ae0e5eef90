"""Per-record secret encryption bound to an unlocked session."""

from __future__ import annotations

from typing import Iterable, List

from . import envelope
from .session import VaultSession


class CredentialEncryptionService:
    """
    Encrypt and reveal record secrets with the session's master password.

    Nothing is cached: every call derives a key from the password and the
    envelope's own salt, so each record stands alone.
    """

    __slots__ = ("session",)

    def __init__(self, session: VaultSession):
        self.session = session

    def encrypt_secret(self, secret: str) -> str:
        """Return envelope text for a new or replaced record password."""
        return envelope.encrypt(self.session.master_password, secret)

    def reveal_secret(self, sealed: str) -> str:
        """Return the plaintext of a stored envelope.

        Raises:
            AuthenticationFailure: the envelope is corrupt (or was written
                under another password).
        """
        return envelope.decrypt(self.session.master_password, sealed)

    def encrypt_many(self, secrets: Iterable[str]) -> List[str]:
        # One independent envelope per secret, each with its own salt and nonce.
        return [self.encrypt_secret(s) for s in secrets]
