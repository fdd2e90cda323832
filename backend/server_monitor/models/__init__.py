from server_monitor.models.monitoring_record import MonitoringRecordRow
from server_monitor.models.monthly_aggregate import MonthlyAggregateRow

__all__ = ["MonitoringRecordRow", "MonthlyAggregateRow"]
