"""
Master password gate backed by a canary envelope ("lockfile").

The master password itself is never stored. Instead a fixed constant is
encrypted under it and written to the lockfile; a candidate password is
correct exactly when that envelope decrypts back to the constant.

States::

    UNINITIALIZED --set_master_password--> LOCKED --verify--> UNLOCKED
                                           LOCKED <--lock()-- UNLOCKED
    LOCKED or UNLOCKED --delete_vault--> DELETED (restart to re-create)
"""

from __future__ import annotations

import hmac
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable

from ..core.exceptions import (
    AuthenticationFailure,
    InvalidPasswordError,
    InvalidStateError,
    MissingCanaryError,
)
from . import envelope
from .session import VaultSession

logger = logging.getLogger(__name__)

CANARY_PLAINTEXT = "tinypm"


class GateState(Enum):
    UNINITIALIZED = "uninitialized"
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    DELETED = "deleted"


class MasterPasswordGate:
    """Owns the canary file and the lock state of one vault."""

    def __init__(self, lockfile: Path | str, artifacts: Iterable[Path | str] = ()):
        self.lockfile = Path(lockfile)
        # Other files owned by the vault, removed together with the canary.
        self.artifacts = [Path(p) for p in artifacts]
        self._state = GateState.LOCKED if self.lockfile.exists() else GateState.UNINITIALIZED

    @property
    def state(self) -> GateState:
        return self._state

    def _require(self, *allowed: GateState) -> None:
        if self._state is GateState.DELETED:
            raise InvalidStateError("Vault was deleted; restart to create a new one")
        if self._state not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise InvalidStateError(f"operation requires state {names}, vault is {self._state.value}")

    def _read_canary(self) -> str:
        try:
            return self.lockfile.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise MissingCanaryError() from None

    def _matches(self, candidate: str) -> bool:
        canary = self._read_canary()
        try:
            plaintext = envelope.decrypt(candidate, canary)
        except AuthenticationFailure:
            return False
        return hmac.compare_digest(plaintext.encode("utf-8"), CANARY_PLAINTEXT.encode("utf-8"))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def set_master_password(self, password: str) -> None:
        """Write a fresh canary for ``password``. The vault stays LOCKED."""
        self._require(GateState.UNINITIALIZED)
        if not password:
            raise ValueError("Master password must not be empty")

        canary = envelope.encrypt(password, CANARY_PLAINTEXT)
        self.lockfile.parent.mkdir(parents=True, exist_ok=True)
        self.lockfile.write_text(canary, encoding="utf-8")
        self._state = GateState.LOCKED
        logger.info("master password created at %s", self.lockfile)

    def verify(self, candidate: str) -> VaultSession:
        """Check ``candidate`` against the canary and open a session on success."""
        if self._state is GateState.UNINITIALIZED:
            raise MissingCanaryError()
        self._require(GateState.LOCKED)

        if not self._matches(candidate):
            logger.info("unlock attempt rejected")
            raise InvalidPasswordError()

        self._state = GateState.UNLOCKED
        logger.info("vault unlocked")
        return VaultSession(candidate)

    def confirm(self, candidate: str) -> bool:
        """Re-check a password while unlocked without changing state."""
        self._require(GateState.UNLOCKED)
        return self._matches(candidate)

    def lock(self) -> None:
        self._require(GateState.UNLOCKED)
        self._state = GateState.LOCKED
        logger.info("vault locked")

    def delete_vault(self, password: str) -> None:
        """
        Remove the canary and the vault's own files after checking ``password``.

        Nothing is removed when the password is wrong. Other files next to the
        lockfile are left alone; the directory itself goes only once empty.
        """
        self._require(GateState.LOCKED, GateState.UNLOCKED)
        if not self._matches(password):
            logger.info("vault deletion rejected: password check failed")
            raise InvalidPasswordError()

        for path in (*self.artifacts, self.lockfile):
            path.unlink(missing_ok=True)
        directory = self.lockfile.parent
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
        self._state = GateState.DELETED
        logger.info("vault deleted")
