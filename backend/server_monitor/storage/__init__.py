from server_monitor.storage.base import RecordBackend
from server_monitor.storage.factory import build_backend, build_repository
from server_monitor.storage.repository import RecordRepository, new_record_id

__all__ = ["RecordBackend", "RecordRepository", "build_backend", "build_repository", "new_record_id"]
