"""
Vault facade: master-password gate, record store and per-record encryption.

This is the only API the frontend talks to. Record operations need an
unlocked session; the session is an explicit object owned by the vault and
passed to the encryption service, never a module-level global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..database.connection import DatabaseConnection
from ..database.models import RecordModel
from ..database.schema import SCHEMA_VERSION
from ..security.gate import GateState, MasterPasswordGate
from ..security.generator import generate_password
from ..security.service import CredentialEncryptionService
from ..security.session import VaultSession
from .exceptions import InvalidPasswordError, RecordNotFoundError, SessionLockedError, StorageError
from .models import CredentialRecord, PlainRecord, row_to_record
from .transfer import CsvFormat, default_export_path, read_csv, write_csv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VaultPaths:
    """On-disk locations of one vault."""

    base_dir: Path

    @property
    def vault_path(self) -> Path:
        return self.base_dir / "vault"

    @property
    def lockfile(self) -> Path:
        return self.base_dir / "lockfile"

    @property
    def log_file(self) -> Path:
        return self.base_dir / "tinypm.log"

    @property
    def owned_files(self) -> List[Path]:
        """Files created by TinyPM besides the lockfile; removed on vault deletion."""
        db = self.vault_path
        journals = [db.with_name(db.name + suffix) for suffix in ("-journal", "-wal", "-shm")]
        return [db, *journals, self.log_file]


class Vault:
    """High-level record operations over the gate, store and session."""

    def __init__(self, paths: VaultPaths, export_dir: Optional[Path] = None):
        self.paths = paths
        self.export_dir = Path(export_dir) if export_dir else Path.home() / "Downloads"
        self.gate = MasterPasswordGate(paths.lockfile, artifacts=paths.owned_files)
        self.db = DatabaseConnection(paths.vault_path)
        self.record_model = RecordModel(self.db)
        self._session: Optional[VaultSession] = None
        self._service: Optional[CredentialEncryptionService] = None

    # ------------------------------------------------------------------
    # Master password lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> GateState:
        return self.gate.state

    @property
    def first_run(self) -> bool:
        return self.gate.state is GateState.UNINITIALIZED

    def create_master_password(self, password: str, confirm: str) -> None:
        """Create the canary; the vault stays locked until :meth:`unlock`."""
        if password != confirm:
            raise ValueError("Passwords do not match")
        self.gate.set_master_password(password)

    def unlock(self, password: str) -> int:
        """
        Verify ``password``, open the session and return the record count.

        If the record store cannot be opened the vault is locked again, so
        the user can retry once the problem is fixed.
        """
        session = self.gate.verify(password)
        try:
            self.db.initialize()
            version = self.db.get_version()
            if version > SCHEMA_VERSION:
                raise StorageError(f"Vault schema v{version} is newer than supported v{SCHEMA_VERSION}")
            count = self.record_model.count()
        except Exception:
            session.close()
            self.db.close()
            self.gate.lock()
            raise
        self._session = session
        self._service = CredentialEncryptionService(session)
        return count

    def lock(self) -> None:
        if self._session is not None:
            self._session.close()
        self._session = None
        self._service = None
        if self.gate.state is GateState.UNLOCKED:
            self.gate.lock()

    @property
    def session(self) -> Optional[VaultSession]:
        return self._session

    def _require_service(self) -> CredentialEncryptionService:
        if self._service is None or self.gate.state is not GateState.UNLOCKED:
            raise SessionLockedError("Vault is locked")
        return self._service

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def records(self) -> List[CredentialRecord]:
        """All records ordered by name (envelopes stay sealed)."""
        self._require_service()
        return [row_to_record(r) for r in self.record_model.fetch_all()]

    def search(self, term: str) -> List[CredentialRecord]:
        return [r for r in self.records() if r.matches(term.strip())]

    def get_record(self, record_id: int) -> CredentialRecord:
        self._require_service()
        row = self.record_model.get(record_id)
        if row is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return row_to_record(row)

    def add_record(
        self,
        name: str,
        username: str,
        password: str,
        website: Optional[str] = None,
    ) -> int:
        """Encrypt ``password`` and store a new record; return its id."""
        service = self._require_service()
        for label, value in (("Name", name), ("Username", username), ("Password", password)):
            if not value:
                raise ValueError(f"{label} must not be an empty string")
        record_id = self.record_model.insert(name, username, website, service.encrypt_secret(password))
        logger.info("record %s added", record_id)
        return record_id

    def generate_password(self) -> str:
        return generate_password()

    def reveal(self, record_id: int) -> str:
        """Return the plaintext password of one record."""
        service = self._require_service()
        return service.reveal_secret(self.get_record(record_id).password)

    def change_password(self, record_id: int, new_password: str) -> None:
        """Replace a record's envelope with a fresh one."""
        service = self._require_service()
        if not new_password:
            raise ValueError("Password must not be an empty string")
        self.record_model.update_password(record_id, service.encrypt_secret(new_password))
        logger.info("record %s password replaced", record_id)

    def delete_record(self, record_id: int) -> None:
        self._require_service()
        self.get_record(record_id)
        self.record_model.delete(record_id)
        logger.info("record %s deleted", record_id)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_csv(self, path: str | Path, fmt: CsvFormat) -> int:
        """Import a CSV file; every row gets its own envelope. Returns count."""
        service = self._require_service()
        rows = read_csv(path, fmt)
        sealed = service.encrypt_many(r.password for r in rows)
        count = self.record_model.insert_many(
            (r.name, r.username, r.website, s) for r, s in zip(rows, sealed)
        )
        logger.info("imported %d record(s)", count)
        return count

    def export_csv(self, path: Optional[str | Path] = None) -> Path:
        """Decrypt every record and write a standard CSV; returns the path."""
        service = self._require_service()
        plain = [
            PlainRecord(
                id=r.id,
                name=r.name,
                username=r.username,
                password=service.reveal_secret(r.password),
                website=r.website,
                created_at=r.to_dict()["created_at"],
            )
            for r in self.records()
        ]
        target = Path(path) if path else default_export_path(self.export_dir)
        write_csv(target, plain)
        logger.info("exported %d record(s)", len(plain))
        return target

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_vault(self, password: str) -> None:
        """Check ``password`` then remove canary and records for good."""
        if self.gate.state is GateState.UNLOCKED and not self.gate.confirm(password):
            raise InvalidPasswordError()
        self.db.close()
        self.gate.delete_vault(password)
        if self._session is not None:
            self._session.close()
        self._session = None
        self._service = None

    def close(self) -> None:
        self.db.close()
