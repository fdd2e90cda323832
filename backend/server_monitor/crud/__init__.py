from server_monitor.crud.crud_aggregate import aggregate_crud
from server_monitor.crud.crud_record import record_crud

__all__ = ["aggregate_crud", "record_crud"]
