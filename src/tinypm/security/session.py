"""In-memory session holding the verified master password.

A VaultSession is created by the master-password gate after a successful
verify and handed explicitly to whatever needs to encrypt or decrypt. There
is no module-level default session; the session's scope is whoever holds the
object. The password is never persisted or written to a keystore.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import SessionLockedError

logger = logging.getLogger(__name__)


class VaultSession:
    __slots__ = ("_master_password",)

    def __init__(self, master_password: str):
        if not master_password:
            raise ValueError("master password must not be empty")
        self._master_password: Optional[str] = master_password

    @property
    def is_unlocked(self) -> bool:
        return self._master_password is not None

    @property
    def master_password(self) -> str:
        """Return the session password or raise if the session was closed."""
        if self._master_password is None:
            raise SessionLockedError("Session is locked")
        return self._master_password

    def close(self) -> None:
        """Drop the reference to the password and lock the session.

        Python strings are immutable, so this cannot scrub the bytes from
        memory; it only makes the session unusable.
        """
        if self._master_password is not None:
            logger.debug("vault session closed")
        self._master_password = None

    def __repr__(self) -> str:
        state = "unlocked" if self.is_unlocked else "locked"
        return f"VaultSession({state})"
