import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from server_monitor.core.exceptions import (
    BackendUnavailableError,
    DuplicateRecordIdError,
    RecordNotFoundError,
)
from server_monitor.schemas.record import MonitoringRecord
from server_monitor.storage.base import RecordBackend

logger = logging.getLogger(__name__)

STORAGE_KEY = "serverMonitoringData"


class JsonFileBackend(RecordBackend):
    """Key-value style store: the whole collection serialized under one key.

    This is the simple fallback provider. It keeps the collection in memory,
    rewrites the file after every mutation and, unlike the other providers,
    accepts several records for the same date.
    """

    name = "json"
    unique_dates = False
    persists_aggregates = False

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._records: list[MonitoringRecord] = []
        self._lock = threading.Lock()

    def open(self) -> None:
        if not self.path.exists():
            self._records = []
            return
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            self._records = [MonitoringRecord.model_validate(item) for item in payload.get(STORAGE_KEY, [])]
        except (OSError, ValueError) as exc:
            raise BackendUnavailableError(self.name, f"cannot read {self.path}: {exc}") from exc
        logger.debug("Loaded %d records from %s", len(self._records), self.path)

    def _save(self, records: list[MonitoringRecord]) -> None:
        payload = {STORAGE_KEY: [record.model_dump(mode="json") for record in records]}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise BackendUnavailableError(self.name, f"cannot write {self.path}: {exc}") from exc
        self._records = records

    @staticmethod
    def _newest_first(records: list[MonitoringRecord]) -> list[MonitoringRecord]:
        ordered = sorted(
            enumerate(records),
            key=lambda item: (item[1].date, item[1].time, item[0]),
            reverse=True,
        )
        return [record for _, record in ordered]

    def _index_of(self, record_id: str) -> int | None:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _stamped(self, record: MonitoringRecord) -> MonitoringRecord:
        now = datetime.now(timezone.utc)
        return record.model_copy(update={"created_at": now, "updated_at": now})

    def insert(self, record: MonitoringRecord) -> MonitoringRecord:
        return self.insert_many([record])[0]

    def insert_many(self, records: list[MonitoringRecord]) -> list[MonitoringRecord]:
        with self._lock:
            known_ids = {record.id for record in self._records}
            stored = []
            for record in records:
                if record.id in known_ids:
                    raise DuplicateRecordIdError(record.id)
                known_ids.add(record.id)
                stored.append(self._stamped(record))
            self._save(self._records + stored)
        return stored

    def list_all(self) -> list[MonitoringRecord]:
        return self._newest_first(self._records)

    def get(self, record_id: str) -> MonitoringRecord | None:
        index = self._index_of(record_id)
        return self._records[index] if index is not None else None

    def update(self, record_id: str, changes: dict[str, Any]) -> MonitoringRecord:
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                raise RecordNotFoundError(record_id)
            updated = self._records[index].model_copy(
                update={**changes, "updated_at": datetime.now(timezone.utc)}
            )
            records = list(self._records)
            records[index] = updated
            self._save(records)
        return updated

    def delete(self, record_id: str) -> MonitoringRecord | None:
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                return None
            records = list(self._records)
            removed = records.pop(index)
            self._save(records)
        return removed

    def query_by_month(self, month_year: str) -> list[MonitoringRecord]:
        return [record for record in self.list_all() if record.date.startswith(month_year)]
