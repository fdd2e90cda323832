from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MonthlyAggregate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month_year: str
    record_count: int
    avg_temperature: float
    min_temperature: float
    max_temperature: float
    avg_humidity: float
    min_humidity: float
    max_humidity: float
    avg_power_usage: float
    normal_days: int
    warning_days: int
    danger_days: int
    ac_issue_count: int
    ups_issue_count: int
    computed_at: datetime


class AggregateListResponse(BaseModel):
    items: list[MonthlyAggregate]
    count: int
