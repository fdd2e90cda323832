import math
from collections.abc import Sequence

from server_monitor.schemas.presentation import TablePage, TableRow
from server_monitor.schemas.record import MonitoringRecord
from server_monitor.services.status import (
    AC_LABELS,
    UPS_LABELS,
    Metric,
    ac_badge,
    classify_metric,
    ups_badge,
)

ELLIPSIS = "..."


def filter_by_date_range(
    records: Sequence[MonitoringRecord],
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[MonitoringRecord]:
    filtered = list(records)
    if start_date:
        filtered = [record for record in filtered if record.date >= start_date]
    if end_date:
        filtered = [record for record in filtered if record.date <= end_date]
    return filtered


def page_window(current: int, total_pages: int) -> list[int | str]:
    """Page buttons: first, last and current +/- 1, with gaps marked."""
    if total_pages <= 1:
        return []
    window: list[int | str] = []
    for page in range(1, total_pages + 1):
        if page in (1, total_pages) or current - 1 <= page <= current + 1:
            window.append(page)
        elif page in (current - 2, current + 2):
            window.append(ELLIPSIS)
    return window


def _row(number: int, record: MonitoringRecord) -> TableRow:
    return TableRow(
        number=number,
        record=record,
        temperature_status=classify_metric(record.temperature, Metric.TEMPERATURE).value,
        humidity_status=classify_metric(record.humidity, Metric.HUMIDITY).value,
        ac_badge=ac_badge(record.ac_status).value,
        ups_badge=ups_badge(record.ups_status).value,
        ac_label=AC_LABELS[record.ac_status],
        ups_label=UPS_LABELS[record.ups_status],
    )


def paginate(records: Sequence[MonitoringRecord], page: int = 1, per_page: int = 10) -> TablePage:
    total_items = len(records)
    total_pages = math.ceil(total_items / per_page) if total_items else 0
    page = min(max(page, 1), max(total_pages, 1))

    start = (page - 1) * per_page
    rows = [_row(start + offset + 1, record) for offset, record in enumerate(records[start:start + per_page])]

    return TablePage(
        page=page,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
        window=page_window(page, total_pages),
        rows=rows,
    )
