from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Request, Response

from server_monitor.core.config import settings as app_settings
from server_monitor.schemas import (
    MONTH_PATTERN,
    AggregateListResponse,
    DashboardSummary,
    MonitoringRecord,
    MonthlyAggregate,
    RecordIn,
    RecordListResponse,
    RecordUpdate,
    StorageStatus,
    TablePage,
)
from server_monitor.services import (
    build_dashboard,
    export_filename,
    export_rows,
    filter_by_date_range,
    paginate,
    to_csv_bytes,
    to_excel_bytes,
    to_pdf_bytes,
)
from server_monitor.storage import RecordRepository

router = APIRouter()

DATE_QUERY = r"^\d{4}-\d{2}-\d{2}$"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_repository(request: Request) -> RecordRepository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(status_code=503, detail="Storage is not initialised")
    return repository


def _record_list(items: list[MonitoringRecord]) -> RecordListResponse:
    return RecordListResponse(items=items, count=len(items))


def _download(content: bytes, media_type: str, extension: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{export_filename(extension)}"'},
    )


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/storage/status", response_model=StorageStatus)
def storage_status(repository: RecordRepository = Depends(get_repository)) -> StorageStatus:
    return repository.status()


@router.get("/records", response_model=RecordListResponse)
def list_records(
    start_date: str | None = Query(default=None, pattern=DATE_QUERY),
    end_date: str | None = Query(default=None, pattern=DATE_QUERY),
    repository: RecordRepository = Depends(get_repository),
) -> RecordListResponse:
    return _record_list(filter_by_date_range(repository.list(), start_date, end_date))


@router.post("/records", response_model=MonitoringRecord, status_code=201)
def create_record(payload: RecordIn, repository: RecordRepository = Depends(get_repository)) -> MonitoringRecord:
    return repository.insert(payload)


@router.post("/records/bulk", response_model=RecordListResponse, status_code=201)
def create_records_bulk(
    payload: list[RecordIn] = Body(...),
    repository: RecordRepository = Depends(get_repository),
) -> RecordListResponse:
    return _record_list(repository.bulk_insert(payload))


@router.get("/records/{record_id}", response_model=MonitoringRecord)
def get_record(record_id: str, repository: RecordRepository = Depends(get_repository)) -> MonitoringRecord:
    return repository.get(record_id)


@router.patch("/records/{record_id}", response_model=MonitoringRecord)
def update_record(
    record_id: str,
    patch: RecordUpdate,
    repository: RecordRepository = Depends(get_repository),
) -> MonitoringRecord:
    return repository.update(record_id, patch)


@router.delete("/records/{record_id}")
def delete_record(record_id: str, repository: RecordRepository = Depends(get_repository)) -> dict[str, Any]:
    return {"id": record_id, "deleted": repository.delete(record_id)}


@router.get("/months/{month_year}/records", response_model=RecordListResponse)
def get_month_records(
    month_year: str = Path(..., pattern=MONTH_PATTERN),
    repository: RecordRepository = Depends(get_repository),
) -> RecordListResponse:
    return _record_list(repository.query_by_month(month_year))


@router.get("/aggregates", response_model=AggregateListResponse)
def list_aggregates(repository: RecordRepository = Depends(get_repository)) -> AggregateListResponse:
    items = repository.list_aggregates()
    return AggregateListResponse(items=items, count=len(items))


@router.get("/aggregates/{month_year}", response_model=MonthlyAggregate)
def get_aggregate(
    month_year: str = Path(..., pattern=MONTH_PATTERN),
    repository: RecordRepository = Depends(get_repository),
) -> MonthlyAggregate:
    aggregate = repository.get_aggregate(month_year)
    if aggregate is None:
        raise HTTPException(status_code=404, detail=f"No records for {month_year}")
    return aggregate


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(
    period: int = Query(default=app_settings.default_chart_period, ge=1, le=366),
    repository: RecordRepository = Depends(get_repository),
) -> DashboardSummary:
    return build_dashboard(repository.list(), period)


@router.get("/table", response_model=TablePage)
def get_table_page(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=app_settings.items_per_page, ge=1, le=200),
    start_date: str | None = Query(default=None, pattern=DATE_QUERY),
    end_date: str | None = Query(default=None, pattern=DATE_QUERY),
    repository: RecordRepository = Depends(get_repository),
) -> TablePage:
    records = filter_by_date_range(repository.list(), start_date, end_date)
    return paginate(records, page=page, per_page=per_page)


@router.get("/export/xlsx")
def export_xlsx(
    one_per_date: bool = Query(default=False),
    repository: RecordRepository = Depends(get_repository),
) -> Response:
    rows = export_rows(repository.list(), unique_dates=one_per_date)
    return _download(to_excel_bytes(rows), XLSX_MEDIA_TYPE, "xlsx")


@router.get("/export/csv")
def export_csv(
    one_per_date: bool = Query(default=False),
    repository: RecordRepository = Depends(get_repository),
) -> Response:
    rows = export_rows(repository.list(), unique_dates=one_per_date)
    return _download(to_csv_bytes(rows), "text/csv", "csv")


@router.get("/export/pdf")
def export_pdf(
    one_per_date: bool = Query(default=False),
    repository: RecordRepository = Depends(get_repository),
) -> Response:
    rows = export_rows(repository.list(), unique_dates=one_per_date)
    return _download(to_pdf_bytes(rows), "application/pdf", "pdf")
