from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from server_monitor.core.exceptions import (
    BackendUnavailableError,
    DuplicateDateError,
    RecordNotFoundError,
)
from server_monitor.schemas.aggregate import MonthlyAggregate
from server_monitor.schemas.presentation import StorageStatus
from server_monitor.schemas.record import MonitoringRecord, RecordIn, RecordUpdate
from server_monitor.services.aggregation import compute_monthly_aggregate
from server_monitor.storage.base import RecordBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")
Aggregator = Callable[[str, Iterable[MonitoringRecord]], MonthlyAggregate | None]


def new_record_id() -> str:
    return uuid.uuid4().hex


class RecordRepository:
    """Owns the monitoring record collection for one session.

    Providers are ranked richest first. ``open`` activates the first one that
    opens; when the active provider later reports ``BackendUnavailableError``
    the repository moves down the list for the rest of the session and keeps
    a warning for the UI. Monthly aggregates are refreshed after every
    mutation when the active provider persists them.
    """

    def __init__(self, providers: Sequence[RecordBackend], aggregator: Aggregator = compute_monthly_aggregate) -> None:
        if not providers:
            raise ValueError("At least one storage backend is required")
        self._providers = list(providers)
        self._active_index: int | None = None
        self._aggregator = aggregator
        self.warnings: list[str] = []

    # ---- provider selection ----

    @property
    def backend(self) -> RecordBackend:
        if self._active_index is None:
            raise BackendUnavailableError("none", "repository has not been opened")
        return self._providers[self._active_index]

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)

    def open(self) -> RecordBackend:
        self._activate_from(0)
        return self.backend

    def close(self) -> None:
        if self._active_index is not None:
            self.backend.close()

    def _activate_from(self, start: int) -> None:
        for index in range(start, len(self._providers)):
            provider = self._providers[index]
            try:
                provider.open()
            except BackendUnavailableError as exc:
                logger.warning("Storage backend '%s' failed to open: %s", provider.name, exc.reason)
                self.warnings.append(str(exc))
                continue
            self._active_index = index
            logger.info("Using '%s' storage backend", provider.name)
            return
        self._active_index = None
        raise BackendUnavailableError("all", "no storage backend could be opened")

    def _run(self, operation: Callable[[RecordBackend], T]) -> T:
        while True:
            backend = self.backend
            try:
                return operation(backend)
            except BackendUnavailableError as exc:
                logger.warning(
                    "Storage backend '%s' failed, switching to local fallback: %s", backend.name, exc.reason
                )
                self.warnings.append(str(exc))
                backend.close()
                self._activate_from(self._active_index + 1)

    def status(self) -> StorageStatus:
        backend = self.backend
        return StorageStatus(
            active_backend=backend.name,
            unique_dates=backend.unique_dates,
            persists_aggregates=backend.persists_aggregates,
            degraded=self.degraded,
            warnings=list(self.warnings),
        )

    # ---- records ----

    @staticmethod
    def _materialize(payload: RecordIn) -> MonitoringRecord:
        data = payload.model_dump(exclude={"id"})
        return MonitoringRecord(id=payload.id or new_record_id(), **data)

    def insert(self, payload: RecordIn) -> MonitoringRecord:
        record = self._materialize(payload)
        try:
            stored = self._run(lambda backend: backend.insert(record))
        except DuplicateDateError:
            logger.info("Rejected record for %s: date already recorded", record.date)
            raise
        self._refresh_months({stored.month_year})
        return stored

    def bulk_insert(self, payloads: Iterable[RecordIn]) -> list[MonitoringRecord]:
        records = [self._materialize(payload) for payload in payloads]
        if not records:
            return []

        def operation(backend: RecordBackend) -> list[MonitoringRecord]:
            if backend.unique_dates:
                seen: set[str] = set()
                for record in records:
                    if record.date in seen:
                        raise DuplicateDateError(record.date)
                    seen.add(record.date)
            return backend.insert_many(records)

        try:
            stored = self._run(operation)
        except DuplicateDateError:
            logger.info("Rejected batch of %d records: duplicate date", len(records))
            raise
        self._refresh_months({record.month_year for record in stored})
        return stored

    def list(self) -> list[MonitoringRecord]:
        return self._run(lambda backend: backend.list_all())

    def count(self) -> int:
        return len(self.list())

    def get(self, record_id: str) -> MonitoringRecord:
        record = self._run(lambda backend: backend.get(record_id))
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def update(self, record_id: str, patch: RecordUpdate | dict[str, Any]) -> MonitoringRecord:
        if not isinstance(patch, RecordUpdate):
            patch = RecordUpdate.model_validate(patch)
        current = self.get(record_id)
        changes = patch.changes()
        if not changes:
            return current

        # Required fields cannot be cleared by a partial update
        merged = MonitoringRecord.model_validate({**current.model_dump(), **changes})
        changes = {key: getattr(merged, key) for key in changes}

        updated = self._run(lambda backend: backend.update(record_id, changes))
        self._refresh_months({current.month_year, updated.month_year})
        return updated

    def delete(self, record_id: str) -> bool:
        removed = self._run(lambda backend: backend.delete(record_id))
        if removed is None:
            logger.debug("Delete of unknown record %s ignored", record_id)
            return False
        self._refresh_months({removed.month_year})
        return True

    def query_by_month(self, month_year: str) -> list[MonitoringRecord]:
        return self._run(lambda backend: backend.query_by_month(month_year))

    # ---- aggregates ----

    def _refresh_months(self, months: set[str]) -> None:
        if not self.backend.persists_aggregates:
            return
        for month_year in sorted(months):
            self.recompute_month(month_year)

    def recompute_month(self, month_year: str) -> MonthlyAggregate | None:
        def operation(backend: RecordBackend) -> MonthlyAggregate | None:
            aggregate = self._aggregator(month_year, backend.query_by_month(month_year))
            if not backend.persists_aggregates:
                return aggregate
            if aggregate is None:
                backend.delete_aggregate(month_year)
            else:
                backend.save_aggregate(aggregate)
            return aggregate

        return self._run(operation)

    def get_aggregate(self, month_year: str) -> MonthlyAggregate | None:
        def operation(backend: RecordBackend) -> MonthlyAggregate | None:
            if backend.persists_aggregates:
                return backend.get_aggregate(month_year)
            return self._aggregator(month_year, backend.query_by_month(month_year))

        return self._run(operation)

    def list_aggregates(self) -> list[MonthlyAggregate]:
        def operation(backend: RecordBackend) -> list[MonthlyAggregate]:
            if backend.persists_aggregates:
                return backend.list_aggregates()
            by_month: dict[str, list[MonitoringRecord]] = {}
            for record in backend.list_all():
                by_month.setdefault(record.month_year, []).append(record)
            months = sorted(by_month, reverse=True)
            aggregates = (self._aggregator(month_year, by_month[month_year]) for month_year in months)
            return [aggregate for aggregate in aggregates if aggregate is not None]

        return self._run(operation)
