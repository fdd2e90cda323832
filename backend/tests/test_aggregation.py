from server_monitor.schemas import MonitoringRecord
from server_monitor.services.aggregation import compute_monthly_aggregate
from conftest import make_record


def _records(*records):
    return [MonitoringRecord(id=f"r{index}", **record.model_dump(exclude={"id"})) for index, record in enumerate(records)]


def test_mixed_month_counts_tiers_per_record():
    aggregate = compute_monthly_aggregate(
        "2024-01",
        _records(
            make_record(date="2024-01-01", temperature=20, humidity=50),
            make_record(date="2024-01-02", temperature=30, humidity=75),
        ),
    )
    assert aggregate.month_year == "2024-01"
    assert aggregate.record_count == 2
    assert aggregate.avg_temperature == 25.0
    assert aggregate.avg_humidity == 62.5
    assert aggregate.normal_days == 1
    assert aggregate.warning_days == 0
    assert aggregate.danger_days == 1


def test_min_max_and_rounding():
    aggregate = compute_monthly_aggregate(
        "2024-02",
        _records(
            make_record(date="2024-02-01", temperature=21.04, humidity=44.26, power_usage=3.333),
            make_record(date="2024-02-02", temperature=23.37, humidity=58.91, power_usage=4.0),
            make_record(date="2024-02-03", temperature=26.5, humidity=41.0, power_usage=5.111),
        ),
    )
    assert aggregate.min_temperature == 21.0
    assert aggregate.max_temperature == 26.5
    assert aggregate.min_humidity == 41.0
    assert aggregate.max_humidity == 58.9
    assert aggregate.avg_temperature == 23.6
    assert aggregate.avg_power_usage == 4.15
    assert aggregate.warning_days == 1


def test_equipment_issue_counts():
    aggregate = compute_monthly_aggregate(
        "2024-03",
        _records(
            make_record(date="2024-03-01", ac_status="broken", ups_status="normal"),
            make_record(date="2024-03-02", ac_status="maintenance", ups_status="low_battery"),
            make_record(date="2024-03-03", ac_status="normal", ups_status="maintenance"),
            make_record(date="2024-03-04", ac_status="normal", ups_status="broken"),
        ),
    )
    assert aggregate.ac_issue_count == 2
    assert aggregate.ups_issue_count == 3


def test_empty_month_has_no_aggregate():
    assert compute_monthly_aggregate("2024-04", []) is None
