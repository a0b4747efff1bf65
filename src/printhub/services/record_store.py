"""
Record Store - Key-value records persisted as one JSON file per collection.

Records are plain dicts keyed by a generated "id". Insertion order is kept
on disk, which matters for catalogs where equal-span bands resolve to the
first one stored.
"""
import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RecordNotFound(ValueError):
    """Raised when a record id is unknown."""


def _json_default(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonRecordStore:
    """List/get/add/update/delete over a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return list(data.get('records', []))

    def _write(self, records: list[dict]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write a sibling temp file, then swap it in
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump({'records': records}, f, indent=2, default=_json_default)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def list(self, where: Optional[Callable[[dict], bool]] = None) -> list[dict]:
        with self._lock:
            records = self._read()
        if where is not None:
            records = [r for r in records if where(r)]
        return records

    def get(self, record_id: str) -> Optional[dict]:
        for record in self.list():
            if record.get('id') == record_id:
                return record
        return None

    def add(self, data: dict) -> dict:
        """Store a new record under a generated id and return it."""
        record = dict(data)
        record['id'] = record.get('id') or uuid.uuid4().hex[:20]
        # Callers get back the stored JSON form
        record = json.loads(json.dumps(record, default=_json_default))
        with self._lock:
            records = self._read()
            if any(r.get('id') == record['id'] for r in records):
                raise ValueError(f"Record with ID '{record['id']}' already exists")
            records.append(record)
            self._write(records)
        logger.debug("Added record %s to %s", record['id'], self.path.name)
        return record

    def update(self, record_id: str, updates: dict) -> dict:
        updates = json.loads(json.dumps(updates, default=_json_default))
        updates.pop('id', None)
        with self._lock:
            records = self._read()
            for i, record in enumerate(records):
                if record.get('id') == record_id:
                    record.update(updates)
                    records[i] = record
                    self._write(records)
                    return record
        raise RecordNotFound(f"Record with ID '{record_id}' not found")

    def replace(self, record_id: str, data: dict) -> dict:
        """Overwrite a record's fields, keeping its id."""
        data = json.loads(json.dumps(data, default=_json_default))
        data['id'] = record_id
        with self._lock:
            records = self._read()
            for i, record in enumerate(records):
                if record.get('id') == record_id:
                    records[i] = data
                    self._write(records)
                    return data
        raise RecordNotFound(f"Record with ID '{record_id}' not found")

    def delete(self, record_id: str) -> bool:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.get('id') != record_id]
            if len(remaining) == len(records):
                raise RecordNotFound(f"Record with ID '{record_id}' not found")
            self._write(remaining)
        logger.debug("Deleted record %s from %s", record_id, self.path.name)
        return True
