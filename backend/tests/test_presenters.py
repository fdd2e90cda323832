from server_monitor.schemas import MonitoringRecord
from server_monitor.services.dashboard import build_dashboard
from server_monitor.services.table import ELLIPSIS, filter_by_date_range, page_window, paginate
from conftest import make_record


def _newest_first(*records):
    stored = [MonitoringRecord(id=f"r{index}", **record.model_dump(exclude={"id"})) for index, record in enumerate(records)]
    return sorted(stored, key=lambda record: (record.date, record.time), reverse=True)


class TestDashboard:
    def test_empty_collection(self):
        summary = build_dashboard([], period=7)
        assert summary.avg_temperature is None
        assert summary.temperature_status is None
        assert summary.total_records == 0
        assert summary.series.labels == []
        assert summary.distribution.normal == 0

    def test_figures_cover_recent_period(self):
        records = _newest_first(
            make_record(date="2024-01-01", temperature=30.0, humidity=50.0, power_usage=1.0, active_servers=1),
            make_record(date="2024-01-02", temperature=22.0, humidity=50.0, power_usage=4.0, active_servers=10),
            make_record(date="2024-01-03", temperature=24.0, humidity=55.0, power_usage=5.0, active_servers=13, time="09:15"),
        )
        summary = build_dashboard(records, period=2)

        assert summary.avg_temperature == 23.0
        assert summary.avg_humidity == 52.5
        assert summary.avg_power_usage == 4.5
        assert summary.avg_active_servers == 12
        assert summary.temperature_status == "normal"
        assert summary.humidity_status == "normal"
        assert summary.last_update == "09:15"
        assert summary.total_records == 3
        # Alerts count the whole collection, not only the period
        assert summary.active_alerts == 1

    def test_series_run_oldest_to_newest(self):
        records = _newest_first(
            make_record(date="2024-01-01", temperature=21.0),
            make_record(date="2024-01-02", temperature=22.0),
            make_record(date="2024-01-03", temperature=23.0),
        )
        series = build_dashboard(records, period=7).series
        assert series.labels == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert series.temperature == [21.0, 22.0, 23.0]

    def test_distribution_uses_record_rule(self):
        records = _newest_first(
            make_record(date="2024-01-01", temperature=15.0, humidity=20.0),
            make_record(date="2024-01-02", temperature=26.0, humidity=50.0),
            make_record(date="2024-01-03", temperature=22.0, humidity=71.0),
        )
        distribution = build_dashboard(records, period=7).distribution
        assert (distribution.normal, distribution.warning, distribution.danger) == (1, 1, 1)

    def test_average_status_uses_metric_rule(self):
        records = _newest_first(make_record(temperature=17.0, humidity=35.0))
        summary = build_dashboard(records)
        assert summary.temperature_status == "danger"
        assert summary.humidity_status == "warning"


class TestTable:
    def test_filter_by_date_range_is_inclusive(self):
        records = _newest_first(*[make_record(date=f"2024-01-0{day}") for day in range(1, 6)])
        filtered = filter_by_date_range(records, "2024-01-02", "2024-01-04")
        assert [r.date for r in filtered] == ["2024-01-04", "2024-01-03", "2024-01-02"]
        assert len(filter_by_date_range(records, start_date="2024-01-05")) == 1
        assert len(filter_by_date_range(records)) == 5

    def test_page_window(self):
        assert page_window(1, 1) == []
        assert page_window(1, 3) == [1, 2, 3]
        assert page_window(5, 10) == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]
        assert page_window(1, 10) == [1, 2, ELLIPSIS, 10]
        assert page_window(10, 10) == [1, ELLIPSIS, 9, 10]

    def test_paginate_numbers_rows_across_pages(self):
        records = _newest_first(*[make_record(date=f"2024-01-{day:02d}") for day in range(1, 26)])
        page = paginate(records, page=3, per_page=10)
        assert page.total_pages == 3
        assert page.total_items == 25
        assert [row.number for row in page.rows] == [21, 22, 23, 24, 25]
        assert page.rows[0].record.date == "2024-01-05"

    def test_paginate_clamps_page(self):
        records = _newest_first(*[make_record(date=f"2024-01-{day:02d}") for day in range(1, 4)])
        assert paginate(records, page=9).page == 1
        assert paginate([], page=2).rows == []

    def test_row_badges(self):
        records = _newest_first(make_record(temperature=26.0, humidity=35.0, ac_status="maintenance", ups_status="low_battery"))
        row = paginate(records).rows[0]
        assert row.temperature_status == "warning"
        assert row.humidity_status == "warning"
        assert (row.ac_badge, row.ac_label) == ("danger", "Maintenance")
        assert (row.ups_badge, row.ups_label) == ("warning", "Low Battery")
