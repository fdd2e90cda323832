from server_monitor.services.aggregation import compute_monthly_aggregate
from server_monitor.services.dashboard import build_dashboard
from server_monitor.services.exporter import export_filename, export_rows, to_csv_bytes, to_excel_bytes, to_pdf_bytes
from server_monitor.services.sample_data import generate_sample_records
from server_monitor.services.status import Metric, Status, classify_metric, classify_record, is_alert
from server_monitor.services.table import filter_by_date_range, paginate

__all__ = [
    "Metric",
    "Status",
    "build_dashboard",
    "classify_metric",
    "classify_record",
    "compute_monthly_aggregate",
    "export_filename",
    "export_rows",
    "filter_by_date_range",
    "generate_sample_records",
    "is_alert",
    "paginate",
    "to_csv_bytes",
    "to_excel_bytes",
    "to_pdf_bytes",
]
