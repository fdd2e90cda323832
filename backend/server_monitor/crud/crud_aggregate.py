from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from server_monitor.models.monthly_aggregate import MonthlyAggregateRow


class CRUDAggregate:
    def get(self, db: Session, month_year: str) -> Optional[MonthlyAggregateRow]:
        return db.get(MonthlyAggregateRow, month_year)

    def get_multi(self, db: Session) -> List[MonthlyAggregateRow]:
        result = db.execute(
            select(MonthlyAggregateRow).order_by(MonthlyAggregateRow.month_year.desc())
        )
        return list(result.scalars().all())

    def upsert(self, db: Session, obj_in: Dict[str, Any]) -> MonthlyAggregateRow:
        db_obj = db.get(MonthlyAggregateRow, obj_in["month_year"])
        if db_obj is None:
            db_obj = MonthlyAggregateRow(**obj_in)
            db.add(db_obj)
        else:
            for key, value in obj_in.items():
                setattr(db_obj, key, value)
        return db_obj

    def remove(self, db: Session, month_year: str) -> bool:
        db_obj = db.get(MonthlyAggregateRow, month_year)
        if db_obj is None:
            return False
        db.delete(db_obj)
        return True


aggregate_crud = CRUDAggregate()
