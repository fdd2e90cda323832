import io
import random
from datetime import date

import pandas as pd
from openpyxl import load_workbook

from server_monitor.schemas import MonitoringRecord
from server_monitor.services.exporter import (
    SHEET_NAME,
    export_filename,
    export_rows,
    one_per_date,
    to_csv_bytes,
    to_excel_bytes,
    to_pdf_bytes,
)
from server_monitor.services.sample_data import generate_sample_records
from conftest import make_record


def _stored(*records):
    return [MonitoringRecord(id=f"r{index}", **record.model_dump(exclude={"id"})) for index, record in enumerate(records)]


def test_rows_use_display_labels():
    rows = export_rows(
        _stored(
            make_record(
                date="2024-01-02",
                ac_status="broken",
                ups_status="low_battery",
                fire_extinguisher_status="needs_maintenance",
                notes=None,
            )
        )
    )
    assert rows == [
        {
            "No": 1,
            "Date": "2024-01-02",
            "Time": "08:00",
            "Temperature (°C)": 22.0,
            "Humidity (%)": 50.0,
            "AC Status": "Broken",
            "UPS Status": "Low Battery",
            "Active Servers": 12,
            "Power (kW)": 4.5,
            "Fire Extinguisher": "Needs Maintenance",
            "Notes": "-",
        }
    ]


def test_one_per_date_keeps_first_seen():
    records = _stored(
        make_record(date="2024-01-02", time="18:00", temperature=25.0),
        make_record(date="2024-01-02", time="08:00", temperature=21.0),
        make_record(date="2024-01-01"),
    )
    kept = one_per_date(records)
    assert [(r.date, r.time) for r in kept] == [("2024-01-02", "18:00"), ("2024-01-01", "08:00")]

    rows = export_rows(records, unique_dates=True)
    assert [row["No"] for row in rows] == [1, 2]


def test_csv_export():
    content = to_csv_bytes(export_rows(_stored(make_record(), make_record(date="2024-01-16"))))
    frame = pd.read_csv(io.BytesIO(content))
    assert list(frame.columns)[:3] == ["No", "Date", "Time"]
    assert len(frame) == 2


def test_excel_export_has_sheet_and_widths():
    content = to_excel_bytes(export_rows(_stored(make_record())))
    workbook = load_workbook(io.BytesIO(content))
    sheet = workbook[SHEET_NAME]
    assert sheet["A1"].value == "No"
    assert sheet["K2"].value == "Routine inspection"
    assert sheet.column_dimensions["K"].width == 30


def test_empty_export_still_has_header():
    frame = pd.read_csv(io.BytesIO(to_csv_bytes([])))
    assert "Temperature (°C)" in frame.columns
    assert frame.empty


def test_pdf_export_renders_document():
    records = _stored(*(make_record(date=f"2024-01-{day:02d}") for day in range(1, 29)))
    content = to_pdf_bytes(export_rows(records), printed_on=date(2024, 2, 1))
    assert content.startswith(b"%PDF")
    assert content.rstrip().endswith(b"%%EOF")


def test_empty_pdf_export_is_still_a_document():
    assert to_pdf_bytes([]).startswith(b"%PDF")


def test_export_filename():
    assert export_filename("xlsx", date(2024, 3, 9)) == "monitoring_server_2024-03-09.xlsx"


def test_sample_records_cover_last_days():
    records = generate_sample_records(days=31, today=date(2024, 3, 31), rng=random.Random(7))
    assert len(records) == 31
    assert records[0].date == "2024-03-01"
    assert records[-1].date == "2024-03-31"
    assert len({record.date for record in records}) == 31
    assert all(22 <= record.temperature <= 26 for record in records)
    assert all(45 <= record.humidity <= 65 for record in records)
