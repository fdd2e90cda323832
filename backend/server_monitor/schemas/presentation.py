from pydantic import BaseModel

from server_monitor.schemas.record import MonitoringRecord


class StatusDistribution(BaseModel):
    normal: int = 0
    warning: int = 0
    danger: int = 0


class ChartSeries(BaseModel):
    labels: list[str]
    temperature: list[float]
    humidity: list[float]


class DashboardSummary(BaseModel):
    period: int
    avg_temperature: float | None
    avg_humidity: float | None
    avg_power_usage: float | None
    avg_active_servers: int | None
    temperature_status: str | None
    humidity_status: str | None
    active_alerts: int
    total_records: int
    last_update: str | None
    series: ChartSeries
    distribution: StatusDistribution


class TableRow(BaseModel):
    number: int
    record: MonitoringRecord
    temperature_status: str
    humidity_status: str
    ac_badge: str
    ups_badge: str
    ac_label: str
    ups_label: str


class TablePage(BaseModel):
    page: int
    per_page: int
    total_items: int
    total_pages: int
    window: list[int | str]
    rows: list[TableRow]


class StorageStatus(BaseModel):
    active_backend: str
    unique_dates: bool
    persists_aggregates: bool
    degraded: bool
    warnings: list[str]
