"""
CSV import/export adapter.

Maps external CSV layouts onto plaintext PlainRecord tuples and back. This
module carries no cryptography: the vault hands each plaintext password to
the encryption service one at a time.
"""

from __future__ import annotations

import csv
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Iterable, List

from .exceptions import ImportFormatError
from .models import PlainRecord

logger = logging.getLogger(__name__)


STANDARD_COLUMNS = ["id", "name", "username", "password", "website", "created_at"]

BITWARDEN_COLUMNS = [
    "folder",
    "favorite",
    "type",
    "name",
    "notes",
    "fields",
    "reprompt",
    "login_uri",
    "login_username",
    "login_password",
    "login_otp",
]


class CsvFormat(Enum):
    STANDARD = "standard"
    BITWARDEN = "bitwarden"

    @property
    def columns(self) -> List[str]:
        return STANDARD_COLUMNS if self is CsvFormat.STANDARD else BITWARDEN_COLUMNS

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} ({', '.join(self.columns)})"


def _map_row(fields: dict, fmt: CsvFormat) -> PlainRecord:
    if fmt is CsvFormat.STANDARD:
        return PlainRecord(
            name=fields["name"],
            username=fields["username"],
            password=fields["password"],
            website=fields["website"] or None,
        )
    return PlainRecord(
        name=fields["name"],
        username=fields["login_username"],
        password=fields["login_password"],
        website=fields["login_uri"] or None,
    )


def read_csv(path: str | Path, fmt: CsvFormat) -> List[PlainRecord]:
    """
    Read a CSV export and return plaintext records.

    The first row is treated as a header and skipped; columns are mapped by
    position using the format's column list. Bitwarden rows whose type is
    not ``login`` (notes, cards, identities) carry no password and are
    skipped.

    Raises:
        ImportFormatError: a row has no name or no password.
        FileNotFoundError: ``path`` does not exist.
    """
    path = Path(path).expanduser()
    columns = fmt.columns
    records: List[PlainRecord] = []

    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)
        for values in reader:
            if not any(v.strip() for v in values):
                continue
            line = reader.line_num
            padded = list(values) + [""] * (len(columns) - len(values))
            fields = dict(zip(columns, padded))

            if fmt is CsvFormat.BITWARDEN and fields["type"] and fields["type"] != "login":
                logger.info("skipping non-login bitwarden row at line %d", line)
                continue

            record = _map_row(fields, fmt)
            if not record.name:
                raise ImportFormatError(f"line {line}: missing name")
            if not record.password:
                raise ImportFormatError(f"line {line}: missing password")
            records.append(record)

    logger.info("read %d record(s) from %s (%s)", len(records), path, fmt.value)
    return records


def write_csv(path: str | Path, rows: Iterable[PlainRecord]) -> Path:
    """Write plaintext records in the standard layout, header included."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(STANDARD_COLUMNS)
        for r in rows:
            writer.writerow(
                [
                    r.id if r.id is not None else "",
                    r.name,
                    r.username,
                    r.password,
                    r.website or "",
                    r.created_at or "",
                ]
            )
            count += 1
    logger.info("wrote %d record(s) to %s", count, path)
    return path


def default_export_path(directory: str | Path) -> Path:
    """Return ``<directory>/passwords_<epoch-ms>.csv``."""
    return Path(directory).expanduser() / f"passwords_{int(time.time() * 1000)}.csv"
