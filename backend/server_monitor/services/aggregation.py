import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone

from server_monitor.schemas.aggregate import MonthlyAggregate
from server_monitor.schemas.record import MonitoringRecord
from server_monitor.services.status import (
    AC_ISSUE_STATUSES,
    UPS_ISSUE_STATUSES,
    Status,
    classify_record,
)

logger = logging.getLogger(__name__)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def compute_monthly_aggregate(
    month_year: str,
    records: Iterable[MonitoringRecord],
) -> MonthlyAggregate | None:
    """Summarise one month of readings.

    Returns None for an empty month so callers never store a degenerate
    aggregate. Temperature and humidity figures are rounded to one decimal,
    power to two.
    """
    rows = list(records)
    if not rows:
        return None

    temperatures = [row.temperature for row in rows]
    humidities = [row.humidity for row in rows]
    tiers = Counter(classify_record(row.temperature, row.humidity) for row in rows)

    aggregate = MonthlyAggregate(
        month_year=month_year,
        record_count=len(rows),
        avg_temperature=round(_mean(temperatures), 1),
        min_temperature=round(min(temperatures), 1),
        max_temperature=round(max(temperatures), 1),
        avg_humidity=round(_mean(humidities), 1),
        min_humidity=round(min(humidities), 1),
        max_humidity=round(max(humidities), 1),
        avg_power_usage=round(_mean([row.power_usage for row in rows]), 2),
        normal_days=tiers[Status.NORMAL],
        warning_days=tiers[Status.WARNING],
        danger_days=tiers[Status.DANGER],
        ac_issue_count=sum(1 for row in rows if row.ac_status in AC_ISSUE_STATUSES),
        ups_issue_count=sum(1 for row in rows if row.ups_status in UPS_ISSUE_STATUSES),
        computed_at=datetime.now(timezone.utc),
    )
    logger.debug("Aggregate for %s recomputed over %d records", month_year, len(rows))
    return aggregate
