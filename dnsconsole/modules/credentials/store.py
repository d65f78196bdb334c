"""
Credential Store for dnsconsole.

Persists Cloudflare account credentials to a JSON file keyed by account id:

    {
      "main": {"id": "main", "name": "Main", "token": "...", "createdAt": "2024-01-01T00:00:00+00:00"}
    }

Writes replace the whole file atomically (temp file + rename). Mutations are
serialized by a single lock; the in-memory map is swapped copy-on-write only
after the file write succeeded, so readers never need the lock.
"""

import json
import logging
import os
import re
import shutil
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, List, Optional

from ...exceptions import DuplicateAccount, StorageFailure, ValidationError

logger = logging.getLogger(__name__)

ACCOUNT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$")


@dataclass(frozen=True)
class CredentialRecord:
    """A stored Cloudflare account credential."""
    id: str
    name: str
    token: str = field(repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_public(self) -> Dict[str, str]:
        """Public view of the record. Never includes the token."""
        return {"id": self.id, "name": self.name, "createdAt": self.created_at.isoformat()}

    def to_storage(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "token": self.token,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_storage(cls, key: str, data: Dict) -> "CredentialRecord":
        """
        Build a record from its on-disk form.

        Raises:
            ValueError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("entry is not an object")

        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("entry has no token")

        created_raw = data.get("createdAt")
        if created_raw:
            created_at = datetime.fromisoformat(str(created_raw).replace("Z", "+00:00"))
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=UTC)
        else:
            created_at = datetime.now(UTC)

        return cls(
            id=str(data.get("id") or key),
            name=str(data.get("name") or key),
            token=token,
            created_at=created_at,
        )


def validate_account_id(account_id: str) -> str:
    """
    Check an operator-chosen account id.

    Raises:
        ValidationError: If the id is not URL-path safe
    """
    if not isinstance(account_id, str) or not ACCOUNT_ID_PATTERN.match(account_id):
        raise ValidationError(
            "Invalid account id",
            "Account id must be 1-64 characters of letters, digits, '.', '_' or '-' "
            "and start with a letter or digit",
        )
    return account_id


class CredentialStore:
    """Durable, lock-guarded map of account id to CredentialRecord."""

    def __init__(self, path: str, allow_overwrite: bool = False):
        """
        Initialize and load the store.

        Args:
            path: Path to the JSON backing file
            allow_overwrite: Replace an existing id on add instead of rejecting it
        """
        self.path = Path(path)
        self.allow_overwrite = allow_overwrite
        self._lock = threading.Lock()
        self._records: Dict[str, CredentialRecord] = self._load()

    def _load(self) -> Dict[str, CredentialRecord]:
        """Load records from disk, degrading to an empty store on any read fault."""
        if not self.path.exists():
            logger.info(f"No credential store at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("top level is not an object")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load credential store {self.path}: {e}; starting empty")
            self._preserve_unreadable()
            return {}

        records: Dict[str, CredentialRecord] = {}
        for key, entry in raw.items():
            try:
                record = CredentialRecord.from_storage(key, entry)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed credential entry '{key}': {e}")
                continue
            records[record.id] = record

        logger.info(f"Loaded {len(records)} account(s) from {self.path}")
        return records

    def _preserve_unreadable(self) -> None:
        """Keep a copy of an unreadable store so the next write does not destroy it."""
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            shutil.copy2(self.path, backup)
            logger.warning(f"Unreadable credential store copied to {backup}")
        except OSError as e:
            logger.error(f"Could not back up unreadable credential store: {e}")

    def _persist(self, records: Dict[str, CredentialRecord]) -> None:
        """
        Atomically replace the backing file with the given records.

        Raises:
            StorageFailure: If the file could not be written
        """
        payload = {record_id: record.to_storage() for record_id, record in records.items()}
        directory = self.path.parent
        tmp_path = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to write credential store {self.path}: {e}")
            raise StorageFailure(message=f"Could not write account data: {e.strerror or e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def add(self, account_id: str, name: str, token: str) -> CredentialRecord:
        """
        Add a credential and persist the store.

        The caller is responsible for verifying the token upstream first.

        Args:
            account_id: Operator-chosen unique id
            name: Display name
            token: Cloudflare API token

        Returns:
            The stored record

        Raises:
            ValidationError: If the id is malformed
            DuplicateAccount: If the id exists and overwrite is disabled
            StorageFailure: If the write did not complete (nothing is stored)
        """
        validate_account_id(account_id)
        record = CredentialRecord(id=account_id, name=name, token=token)

        with self._lock:
            if account_id in self._records and not self.allow_overwrite:
                raise DuplicateAccount(message=f"Account '{account_id}' already exists")

            updated = dict(self._records)
            updated[account_id] = record
            self._persist(updated)
            self._records = updated

        logger.info(f"Stored credential for account {account_id}")
        return record

    def remove(self, account_id: str) -> bool:
        """
        Remove a credential and persist the store.

        Returns:
            True if removed, False if the id was not present

        Raises:
            StorageFailure: If the write did not complete (nothing is removed)
        """
        with self._lock:
            if account_id not in self._records:
                return False

            updated = dict(self._records)
            del updated[account_id]
            self._persist(updated)
            self._records = updated

        logger.info(f"Removed credential for account {account_id}")
        return True

    def get(self, account_id: str) -> Optional[CredentialRecord]:
        """Internal lookup including the token. Only the upstream gateway should call this."""
        return self._records.get(account_id)

    def exists(self, account_id: str) -> bool:
        return account_id in self._records

    def list(self) -> List[Dict[str, str]]:
        """List accounts in insertion order, tokens redacted."""
        return [record.to_public() for record in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)
