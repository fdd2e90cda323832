from server_monitor.schemas.aggregate import AggregateListResponse, MonthlyAggregate
from server_monitor.schemas.presentation import (
    ChartSeries,
    DashboardSummary,
    StatusDistribution,
    StorageStatus,
    TablePage,
    TableRow,
)
from server_monitor.schemas.record import (
    MONTH_PATTERN,
    MonitoringRecord,
    RecordIn,
    RecordListResponse,
    RecordUpdate,
)

__all__ = [
    "AggregateListResponse",
    "ChartSeries",
    "DashboardSummary",
    "MONTH_PATTERN",
    "MonitoringRecord",
    "MonthlyAggregate",
    "RecordIn",
    "RecordListResponse",
    "RecordUpdate",
    "StatusDistribution",
    "StorageStatus",
    "TablePage",
    "TableRow",
]
