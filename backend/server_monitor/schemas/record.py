from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

AcStatus = Literal["normal", "maintenance", "broken"]
UpsStatus = Literal["normal", "low_battery", "maintenance", "broken"]
FireExtinguisherStatus = Literal["ready", "expired", "needs_maintenance"]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"
MONTH_PATTERN = r"^\d{4}-\d{2}$"

NULLABLE_FIELDS = frozenset({"notes"})


def _check_date(value: str) -> str:
    datetime.strptime(value, "%Y-%m-%d")
    return value


def _check_time(value: str) -> str:
    datetime.strptime(value, "%H:%M")
    return value


DateStr = Annotated[str, Field(pattern=DATE_PATTERN), AfterValidator(_check_date)]
TimeStr = Annotated[str, Field(pattern=TIME_PATTERN), AfterValidator(_check_time)]


class RecordFields(BaseModel):
    date: DateStr = Field(..., description="Calendar date, YYYY-MM-DD")
    time: TimeStr = Field(..., description="Reading time, HH:MM")
    temperature: float = Field(..., allow_inf_nan=False, description="Temperature in Celsius")
    humidity: float = Field(..., ge=0.0, le=100.0, allow_inf_nan=False, description="Relative humidity percentage")
    ac_status: AcStatus = "normal"
    ups_status: UpsStatus = "normal"
    rack_count: int = Field(default=0, ge=0)
    active_servers: int = Field(default=0, ge=0)
    power_usage: float = Field(default=0.0, ge=0.0, allow_inf_nan=False, description="Power usage in kW")
    fire_extinguisher_status: FireExtinguisherStatus = "ready"
    notes: str | None = None

    @property
    def month_year(self) -> str:
        return self.date[:7]


class RecordIn(RecordFields):
    id: str | None = Field(default=None, min_length=1)


class MonitoringRecord(RecordFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecordUpdate(BaseModel):
    """Partial update; only the fields explicitly set are merged."""

    date: DateStr | None = None
    time: TimeStr | None = None
    temperature: float | None = Field(default=None, allow_inf_nan=False)
    humidity: float | None = Field(default=None, ge=0.0, le=100.0, allow_inf_nan=False)
    ac_status: AcStatus | None = None
    ups_status: UpsStatus | None = None
    rack_count: int | None = Field(default=None, ge=0)
    active_servers: int | None = Field(default=None, ge=0)
    power_usage: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    fire_extinguisher_status: FireExtinguisherStatus | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _reject_cleared_fields(self) -> "RecordUpdate":
        cleared = sorted(
            name for name in self.model_fields_set if name not in NULLABLE_FIELDS and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class RecordListResponse(BaseModel):
    items: list[MonitoringRecord]
    count: int
