from abc import ABC, abstractmethod
from typing import Any

from server_monitor.schemas.aggregate import MonthlyAggregate
from server_monitor.schemas.record import MonitoringRecord


class RecordBackend(ABC):
    """Persistence provider beneath ``RecordRepository``.

    Implementations translate their library errors into
    ``DuplicateDateError`` / ``DuplicateRecordIdError`` for constraint
    violations and ``BackendUnavailableError`` for everything that makes the
    store unusable. ``list_all`` and ``query_by_month`` return records newest
    first by ``(date, time)``, later insertions first on ties.
    """

    name = "base"
    unique_dates = True
    persists_aggregates = False

    @abstractmethod
    def open(self) -> None: ...

    def close(self) -> None:
        pass

    @abstractmethod
    def insert(self, record: MonitoringRecord) -> MonitoringRecord: ...

    @abstractmethod
    def insert_many(self, records: list[MonitoringRecord]) -> list[MonitoringRecord]: ...

    @abstractmethod
    def list_all(self) -> list[MonitoringRecord]: ...

    @abstractmethod
    def get(self, record_id: str) -> MonitoringRecord | None: ...

    @abstractmethod
    def update(self, record_id: str, changes: dict[str, Any]) -> MonitoringRecord: ...

    @abstractmethod
    def delete(self, record_id: str) -> MonitoringRecord | None: ...

    @abstractmethod
    def query_by_month(self, month_year: str) -> list[MonitoringRecord]: ...

    def get_aggregate(self, month_year: str) -> MonthlyAggregate | None:
        raise NotImplementedError(f"{self.name} backend does not store aggregates")

    def list_aggregates(self) -> list[MonthlyAggregate]:
        raise NotImplementedError(f"{self.name} backend does not store aggregates")

    def save_aggregate(self, aggregate: MonthlyAggregate) -> None:
        raise NotImplementedError(f"{self.name} backend does not store aggregates")

    def delete_aggregate(self, month_year: str) -> bool:
        raise NotImplementedError(f"{self.name} backend does not store aggregates")
