import io
from collections.abc import Sequence
from datetime import date
from typing import Any

import pandas as pd
from fpdf import FPDF
from fpdf.fonts import FontFace
from openpyxl.utils import get_column_letter

from server_monitor.schemas.record import MonitoringRecord
from server_monitor.services.status import AC_LABELS, FIRE_EXTINGUISHER_LABELS, UPS_LABELS

SHEET_NAME = "Monitoring Data"
COLUMNS = [
    ("No", 5),
    ("Date", 20),
    ("Time", 10),
    ("Temperature (°C)", 12),
    ("Humidity (%)", 15),
    ("AC Status", 12),
    ("UPS Status", 15),
    ("Active Servers", 12),
    ("Power (kW)", 12),
    ("Fire Extinguisher", 12),
    ("Notes", 30),
]

PDF_TITLE = "Server Room Monitoring Report"
# Column name and relative width; notes and fire extinguisher stay in the spreadsheet
PDF_COLUMNS = [
    ("No", 6),
    ("Date", 16),
    ("Time", 10),
    ("Temperature (°C)", 14),
    ("Humidity (%)", 13),
    ("AC Status", 14),
    ("UPS Status", 15),
    ("Active Servers", 12),
    ("Power (kW)", 11),
]
PDF_HEADER_FILL = (37, 99, 235)
PDF_STRIPE_FILL = (241, 245, 249)


def one_per_date(records: Sequence[MonitoringRecord]) -> list[MonitoringRecord]:
    """Keep the first record seen for each date (the newest for ordered input)."""
    seen: set[str] = set()
    kept = []
    for record in records:
        if record.date in seen:
            continue
        seen.add(record.date)
        kept.append(record)
    return kept


def export_rows(records: Sequence[MonitoringRecord], unique_dates: bool = False) -> list[dict[str, Any]]:
    if unique_dates:
        records = one_per_date(records)

    return [
        {
            "No": index,
            "Date": record.date,
            "Time": record.time,
            "Temperature (°C)": record.temperature,
            "Humidity (%)": record.humidity,
            "AC Status": AC_LABELS[record.ac_status],
            "UPS Status": UPS_LABELS[record.ups_status],
            "Active Servers": record.active_servers,
            "Power (kW)": record.power_usage,
            "Fire Extinguisher": FIRE_EXTINGUISHER_LABELS[record.fire_extinguisher_status],
            "Notes": record.notes or "-",
        }
        for index, record in enumerate(records, start=1)
    ]


def _frame(rows: list[dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=[name for name, _ in COLUMNS])


def to_excel_bytes(rows: list[dict[str, Any]]) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        _frame(rows).to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for position, (_, width) in enumerate(COLUMNS, start=1):
            worksheet.column_dimensions[get_column_letter(position)].width = width
    return buffer.getvalue()


def to_csv_bytes(rows: list[dict[str, Any]]) -> bytes:
    return _frame(rows).to_csv(index=False).encode("utf-8")


def export_filename(extension: str, today: date | None = None) -> str:
    today = today or date.today()
    return f"monitoring_server_{today.isoformat()}.{extension}"


class _ReportPDF(FPDF):
    def footer(self) -> None:
        self.set_y(-12)
        self.set_font("helvetica", size=8)
        self.cell(0, 6, f"Page {self.page_no()} of {{nb}}")


def to_pdf_bytes(rows: list[dict[str, Any]], printed_on: date | None = None) -> bytes:
    """Render the export rows as a titled, paginated table."""
    printed_on = printed_on or date.today()

    pdf = _ReportPDF(orientation="portrait", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=18)
    pdf.add_page()
    pdf.set_font("helvetica", style="B", size=16)
    pdf.cell(0, 10, PDF_TITLE, new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("helvetica", size=10)
    pdf.cell(0, 6, f"Printed on: {printed_on.strftime('%d/%m/%Y')}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(3)

    pdf.set_font("helvetica", size=8)
    with pdf.table(
        col_widths=tuple(width for _, width in PDF_COLUMNS),
        headings_style=FontFace(emphasis="BOLD", color=(255, 255, 255), fill_color=PDF_HEADER_FILL),
        cell_fill_color=PDF_STRIPE_FILL,
        cell_fill_mode="ROWS",
        text_align="CENTER",
        line_height=5,
    ) as table:
        heading = table.row()
        for name, _ in PDF_COLUMNS:
            heading.cell(name)
        for row in rows:
            cells = table.row()
            for name, _ in PDF_COLUMNS:
                cells.cell(str(row[name]))

    return bytes(pdf.output())
