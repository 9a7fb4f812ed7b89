"""
Deal repositories: save, list, load and delete property records.

Two backends share one interface:
  1. LocalDealRepository:    one JSON file per record under a directory
  2. SupabaseDealRepository: rows {id, content, last_modified} in a Supabase table

Repositories are ordinary objects with an explicit lifecycle: build one from
StorageSettings, pass it to whoever needs it, close() it when settings change.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from pydantic import ValidationError

from .records import PropertyRecord
from .settings import StorageSettings

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageError(RuntimeError):
    """A backend failed to read or write records."""


def _now_ms() -> int:
    return int(time.time() * 1000)


def stamp_record(record: PropertyRecord) -> PropertyRecord:
    """Copy of ``record`` with an id (if it had none) and a fresh last_modified."""
    now = _now_ms()
    return record.model_copy(update={"id": record.id or str(now), "last_modified": now})


class DealRepository:
    """Interface for property record storage."""

    def save(self, record: PropertyRecord) -> PropertyRecord:
        raise NotImplementedError

    def load_all(self) -> List[PropertyRecord]:
        """All records, most recently modified first."""
        raise NotImplementedError

    def get(self, record_id: str) -> PropertyRecord:
        raise NotImplementedError

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError

    def check_connection(self) -> Tuple[bool, str]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "DealRepository":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class LocalDealRepository(DealRepository):
    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, record_id: str) -> Path:
        if not _SAFE_ID.match(record_id or ""):
            raise ValueError(f"Invalid record id: {record_id!r}")
        return self.root_dir / f"{record_id}.json"

    def save(self, record: PropertyRecord) -> PropertyRecord:
        stamped = stamp_record(record)
        path = self._path(stamped.id)
        try:
            path.write_text(stamped.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to write %s", path)
            raise StorageError(f"Could not save record {stamped.id}: {exc}") from exc
        logger.info("Saved record %s to %s", stamped.id, path)
        return stamped

    def load_all(self) -> List[PropertyRecord]:
        records = []
        for path in sorted(self.root_dir.glob("*.json")):
            try:
                records.append(PropertyRecord.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError, TypeError) as exc:
                logger.warning("Skipping unreadable record %s: %s", path.name, exc)
        return sorted(records, key=lambda r: r.last_modified, reverse=True)

    def get(self, record_id: str) -> PropertyRecord:
        path = self._path(record_id)
        if not path.exists():
            raise KeyError(f"Unknown record '{record_id}'.")
        try:
            return PropertyRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, TypeError) as exc:
            raise StorageError(f"Record {record_id} is unreadable: {exc}") from exc

    def delete(self, record_id: str) -> bool:
        path = self._path(record_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted record %s", record_id)
        return True

    def check_connection(self) -> Tuple[bool, str]:
        if self.root_dir.is_dir():
            return True, f"Local storage at {self.root_dir}"
        return False, f"Directory {self.root_dir} does not exist."


class SupabaseDealRepository(DealRepository):
    """Records in a Supabase table; the client is created by the caller and injected."""

    def __init__(self, client: Any, table: str = "properties"):
        self._client = client
        self.table = table

    @property
    def client(self) -> Any:
        if self._client is None:
            raise StorageError("Repository is closed.")
        return self._client

    def _execute(self, action: str, query: Any) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            logger.exception("Supabase %s failed on table %s", action, self.table)
            raise StorageError(f"Supabase {action} failed: {exc}") from exc

    def save(self, record: PropertyRecord) -> PropertyRecord:
        stamped = stamp_record(record)
        row = {
            "id": stamped.id,
            "content": stamped.model_dump(mode="json"),
            "last_modified": stamped.last_modified,
        }
        self._execute("save", self.client.table(self.table).upsert(row))
        logger.info("Saved record %s to table %s", stamped.id, self.table)
        return stamped

    @staticmethod
    def _from_row(row: Dict[str, Any]) -> PropertyRecord:
        content = row.get("content")
        if not isinstance(content, dict):
            raise ValueError(f"row {row.get('id')!r} has no content object")
        record = PropertyRecord.model_validate(content)
        if not record.last_modified and row.get("last_modified"):
            record = record.model_copy(update={"last_modified": int(row["last_modified"])})
        return record

    def load_all(self) -> List[PropertyRecord]:
        response = self._execute("load", self.client.table(self.table).select("*"))
        records = []
        for row in response.data or []:
            try:
                records.append(self._from_row(row))
            except (ValidationError, ValueError, TypeError) as exc:
                logger.warning("Skipping unreadable row %s in table %s: %s", row.get("id"), self.table, exc)
        return sorted(records, key=lambda r: r.last_modified, reverse=True)

    def get(self, record_id: str) -> PropertyRecord:
        response = self._execute("get", self.client.table(self.table).select("*").eq("id", record_id))
        if not response.data:
            raise KeyError(f"Unknown record '{record_id}'.")
        try:
            return self._from_row(response.data[0])
        except (ValidationError, ValueError, TypeError) as exc:
            raise StorageError(f"Record {record_id} is unreadable: {exc}") from exc

    def delete(self, record_id: str) -> bool:
        response = self._execute("delete", self.client.table(self.table).delete().eq("id", record_id))
        deleted = bool(response.data)
        if deleted:
            logger.info("Deleted record %s from table %s", record_id, self.table)
        return deleted

    def check_connection(self) -> Tuple[bool, str]:
        try:
            self.client.table(self.table).select("id").limit(1).execute()
        except StorageError as exc:
            return False, str(exc)
        except Exception as exc:
            code = getattr(exc, "code", None)
            if code == "42P01":
                return False, f"Connected, but table '{self.table}' was not found."
            if code == "PGRST301":
                return False, "Permission denied (row-level security)."
            return False, f"Supabase error: {exc}"
        return True, "Connection OK."

    def close(self) -> None:
        self._client = None


def create_repository(settings: StorageSettings) -> DealRepository:
    """Build the repository described by ``settings``."""
    if settings.backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("Supabase storage needs both supabase_url and supabase_key.")
        from supabase import create_client

        client = create_client(settings.supabase_url, settings.supabase_key)
        logger.info("Using Supabase storage at %s (table %s)", settings.supabase_url, settings.table)
        return SupabaseDealRepository(client, table=settings.table)
    if settings.backend == "local":
        logger.info("Using local storage at %s", settings.root_dir)
        return LocalDealRepository(settings.root_dir)
    raise ValueError(f"Unknown storage backend {settings.backend!r}. Available: ['local', 'supabase']")
