from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from server_monitor.models.monitoring_record import MonitoringRecordRow

_NEWEST_FIRST = (
    desc(MonitoringRecordRow.date),
    desc(MonitoringRecordRow.time),
    desc(MonitoringRecordRow.seq),
)


class CRUDRecord:
    def create(self, db: Session, obj_in: Dict[str, Any]) -> MonitoringRecordRow:
        db_obj = MonitoringRecordRow(**obj_in, month_year=obj_in["date"][:7])
        db.add(db_obj)
        return db_obj

    def get(self, db: Session, id: str) -> Optional[MonitoringRecordRow]:
        result = db.execute(
            select(MonitoringRecordRow).where(MonitoringRecordRow.id == id)
        )
        return result.scalar_one_or_none()

    def get_multi(self, db: Session, month_year: Optional[str] = None) -> List[MonitoringRecordRow]:
        query = select(MonitoringRecordRow).order_by(*_NEWEST_FIRST)

        if month_year:
            query = query.where(MonitoringRecordRow.month_year == month_year)

        result = db.execute(query)
        return list(result.scalars().all())

    def update(self, db: Session, db_obj: MonitoringRecordRow, changes: Dict[str, Any]) -> MonitoringRecordRow:
        for key, value in changes.items():
            setattr(db_obj, key, value)
        if "date" in changes:
            db_obj.month_year = changes["date"][:7]
        return db_obj

    def remove(self, db: Session, db_obj: MonitoringRecordRow) -> None:
        db.delete(db_obj)


record_crud = CRUDRecord()
