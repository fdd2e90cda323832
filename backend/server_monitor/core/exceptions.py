class MonitoringError(Exception):
    """Base class for errors raised by the monitoring data layer."""


class DuplicateDateError(MonitoringError):
    def __init__(self, date: str) -> None:
        super().__init__(f"A monitoring record already exists for {date}")
        self.date = date


class DuplicateRecordIdError(MonitoringError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Monitoring record id {record_id} is already in use")
        self.record_id = record_id


class RecordNotFoundError(MonitoringError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Monitoring record {record_id} not found")
        self.record_id = record_id


class BackendUnavailableError(MonitoringError):
    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(f"Storage backend '{backend}' unavailable: {reason}")
        self.backend = backend
        self.reason = reason
