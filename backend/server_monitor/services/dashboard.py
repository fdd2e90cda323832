from collections.abc import Sequence

from server_monitor.schemas.presentation import ChartSeries, DashboardSummary, StatusDistribution
from server_monitor.schemas.record import MonitoringRecord
from server_monitor.services.status import Metric, Status, classify_metric, classify_record, is_alert


def status_distribution(records: Sequence[MonitoringRecord]) -> StatusDistribution:
    distribution = StatusDistribution()
    for record in records:
        tier = classify_record(record.temperature, record.humidity)
        if tier is Status.DANGER:
            distribution.danger += 1
        elif tier is Status.WARNING:
            distribution.warning += 1
        else:
            distribution.normal += 1
    return distribution


def chart_series(records: Sequence[MonitoringRecord]) -> ChartSeries:
    return ChartSeries(
        labels=[record.date for record in records],
        temperature=[record.temperature for record in records],
        humidity=[record.humidity for record in records],
    )


def build_dashboard(records: Sequence[MonitoringRecord], period: int = 7) -> DashboardSummary:
    """Summary figures over the ``period`` most recent records.

    ``records`` must already be newest first. Alert and total counts cover
    the whole collection, averages and charts only the period. Chart series
    run oldest to newest.
    """
    recent = list(records[:period])
    if not recent:
        return DashboardSummary(
            period=period,
            avg_temperature=None,
            avg_humidity=None,
            avg_power_usage=None,
            avg_active_servers=None,
            temperature_status=None,
            humidity_status=None,
            active_alerts=0,
            total_records=0,
            last_update=None,
            series=ChartSeries(labels=[], temperature=[], humidity=[]),
            distribution=StatusDistribution(),
        )

    count = len(recent)
    avg_temp = sum(record.temperature for record in recent) / count
    avg_humidity = sum(record.humidity for record in recent) / count
    avg_power = sum(record.power_usage for record in recent) / count
    avg_servers = sum(record.active_servers for record in recent) / count

    return DashboardSummary(
        period=period,
        avg_temperature=round(avg_temp, 1),
        avg_humidity=round(avg_humidity, 1),
        avg_power_usage=round(avg_power, 2),
        avg_active_servers=round(avg_servers),
        temperature_status=classify_metric(avg_temp, Metric.TEMPERATURE).value,
        humidity_status=classify_metric(avg_humidity, Metric.HUMIDITY).value,
        active_alerts=sum(1 for record in records if is_alert(record)),
        total_records=len(records),
        last_update=records[0].time,
        series=chart_series(recent[::-1]),
        distribution=status_distribution(recent),
    )
