import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from server_monitor.core.database import Base, build_session_factory
from server_monitor.core.exceptions import (
    BackendUnavailableError,
    DuplicateDateError,
    DuplicateRecordIdError,
    RecordNotFoundError,
)
from server_monitor.crud import aggregate_crud, record_crud
from server_monitor.models import MonitoringRecordRow, MonthlyAggregateRow  # noqa: F401
from server_monitor.schemas.aggregate import MonthlyAggregate
from server_monitor.schemas.record import MonitoringRecord, RecordFields
from server_monitor.storage.base import RecordBackend

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = tuple(RecordFields.model_fields)


def _row_values(record: MonitoringRecord) -> dict[str, Any]:
    values = record.model_dump(include=set(_RECORD_COLUMNS))
    values["id"] = record.id
    return values


class SqlBackend(RecordBackend):
    """Indexed relational store with a persisted monthly aggregate table."""

    name = "sql"
    unique_dates = True
    persists_aggregates = True

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    def open(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise BackendUnavailableError(self.name, str(exc)) from exc

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            raise BackendUnavailableError(self.name, str(exc)) from exc
        finally:
            db.close()

    def _store(self, db: Session, record: MonitoringRecord) -> MonitoringRecordRow:
        if record_crud.get(db, record.id) is not None:
            raise DuplicateRecordIdError(record.id)
        return record_crud.create(db, _row_values(record))

    def insert(self, record: MonitoringRecord) -> MonitoringRecord:
        try:
            with self._transaction() as db:
                row = self._store(db, record)
                db.flush()
                db.refresh(row)
                return MonitoringRecord.model_validate(row)
        except IntegrityError as exc:
            raise DuplicateDateError(record.date) from exc

    def insert_many(self, records: list[MonitoringRecord]) -> list[MonitoringRecord]:
        stored: list[MonitoringRecord] = []
        current_date = None
        try:
            with self._transaction() as db:
                for record in records:
                    current_date = record.date
                    row = self._store(db, record)
                    db.flush()
                    db.refresh(row)
                    stored.append(MonitoringRecord.model_validate(row))
        except IntegrityError as exc:
            raise DuplicateDateError(current_date) from exc
        return stored

    def list_all(self) -> list[MonitoringRecord]:
        with self._transaction() as db:
            return [MonitoringRecord.model_validate(row) for row in record_crud.get_multi(db)]

    def get(self, record_id: str) -> MonitoringRecord | None:
        with self._transaction() as db:
            row = record_crud.get(db, record_id)
            return MonitoringRecord.model_validate(row) if row else None

    def update(self, record_id: str, changes: dict[str, Any]) -> MonitoringRecord:
        try:
            with self._transaction() as db:
                row = record_crud.get(db, record_id)
                if row is None:
                    raise RecordNotFoundError(record_id)
                record_crud.update(db, row, changes)
                db.flush()
                db.refresh(row)
                return MonitoringRecord.model_validate(row)
        except IntegrityError as exc:
            raise DuplicateDateError(changes.get("date", "")) from exc

    def delete(self, record_id: str) -> MonitoringRecord | None:
        with self._transaction() as db:
            row = record_crud.get(db, record_id)
            if row is None:
                return None
            removed = MonitoringRecord.model_validate(row)
            record_crud.remove(db, row)
            return removed

    def query_by_month(self, month_year: str) -> list[MonitoringRecord]:
        with self._transaction() as db:
            rows = record_crud.get_multi(db, month_year=month_year)
            return [MonitoringRecord.model_validate(row) for row in rows]

    def get_aggregate(self, month_year: str) -> MonthlyAggregate | None:
        with self._transaction() as db:
            row = aggregate_crud.get(db, month_year)
            return MonthlyAggregate.model_validate(row) if row else None

    def list_aggregates(self) -> list[MonthlyAggregate]:
        with self._transaction() as db:
            return [MonthlyAggregate.model_validate(row) for row in aggregate_crud.get_multi(db)]

    def save_aggregate(self, aggregate: MonthlyAggregate) -> None:
        with self._transaction() as db:
            aggregate_crud.upsert(db, aggregate.model_dump())

    def delete_aggregate(self, month_year: str) -> bool:
        with self._transaction() as db:
            removed = aggregate_crud.remove(db, month_year)
        if removed:
            logger.debug("Aggregate for %s removed, month has no records", month_year)
        return removed
