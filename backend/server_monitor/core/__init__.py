from server_monitor.core.config import Settings, settings
from server_monitor.core.database import Base, build_engine, build_session_factory
from server_monitor.core.exceptions import (
    BackendUnavailableError,
    DuplicateDateError,
    DuplicateRecordIdError,
    MonitoringError,
    RecordNotFoundError,
)

__all__ = [
    "Base",
    "BackendUnavailableError",
    "DuplicateDateError",
    "DuplicateRecordIdError",
    "MonitoringError",
    "RecordNotFoundError",
    "Settings",
    "build_engine",
    "build_session_factory",
    "settings",
]
