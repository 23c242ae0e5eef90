"""
Data models for vault records
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class CredentialRecord:
    """A stored record: plaintext metadata plus the password envelope."""

    __slots__ = ("id", "name", "username", "website", "created_at", "password")

    def __init__(self, id, name, username, password, website=None, created_at=None):
        """
            Initialize record; ``password`` is envelope text, never plaintext
        """
        self.id = id
        self.name = name
        self.username = username
        self.password = password
        self.website = website or None
        self.created_at = created_at

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name or website."""
        if not term:
            return True
        needle = term.lower()
        if needle in self.name.lower():
            return True
        return bool(self.website) and needle in self.website.lower()

    def to_dict(self, hide_password=True):
        """
            Convert record to dict
        """
        created = self.created_at
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "password": "[hidden]" if hide_password else self.password,
            "website": self.website,
            "created_at": created.isoformat(sep=" ") if isinstance(created, datetime) else created,
        }

    def __repr__(self):
        return f"CredentialRecord(id={self.id!r}, name={self.name!r})"

    def __eq__(self, other):
        if not isinstance(other, CredentialRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass
class PlainRecord:
    """Plaintext record tuple exchanged with the CSV adapter."""

    name: str
    username: str
    password: str
    website: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[str] = None


def row_to_record(row):
    """Convert a records row dict to a CredentialRecord."""
    created_at = row.get("created_at")
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            pass

    return CredentialRecord(
        id=row["id"],
        name=row["name"],
        username=row["username"],
        password=row["password"],
        website=row.get("website"),
        created_at=created_at,
    )
