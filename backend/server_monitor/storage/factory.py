from pathlib import Path

from server_monitor.core.config import Settings
from server_monitor.core.database import build_engine
from server_monitor.storage.base import RecordBackend
from server_monitor.storage.document_backend import DocumentBackend
from server_monitor.storage.json_backend import JsonFileBackend
from server_monitor.storage.repository import RecordRepository
from server_monitor.storage.sql_backend import SqlBackend


def build_backend(name: str, config: Settings) -> RecordBackend:
    if name == "sql":
        return SqlBackend(build_engine(config.database_url))
    if name == "json":
        return JsonFileBackend(Path(config.json_store_path))
    if name == "document":
        return DocumentBackend(
            url=config.mongo_url,
            database=config.mongo_database,
            collection=config.mongo_collection,
            timeout_ms=config.mongo_timeout_ms,
        )
    raise ValueError(f"Unknown storage backend '{name}', expected one of: sql, json, document")


def build_repository(config: Settings) -> RecordRepository:
    """Ranked providers from STORAGE_BACKENDS; not opened yet."""
    return RecordRepository([build_backend(name, config) for name in config.storage_backends])
