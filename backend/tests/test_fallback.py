import pytest

from server_monitor.core.database import build_engine
from server_monitor.core.exceptions import BackendUnavailableError
from server_monitor.storage import RecordRepository
from server_monitor.storage.json_backend import JsonFileBackend
from server_monitor.storage.sql_backend import SqlBackend
from conftest import make_record


@pytest.fixture
def broken_sql_backend(tmp_path):
    # SQLite cannot create a database inside a missing directory
    return SqlBackend(build_engine(f"sqlite:///{tmp_path / 'missing' / 'monitor.db'}"))


def test_first_backend_that_opens_is_used(sql_backend, json_backend):
    repository = RecordRepository([sql_backend, json_backend])
    assert repository.open() is sql_backend
    assert not repository.status().degraded


def test_falls_back_when_rich_backend_cannot_open(broken_sql_backend, json_backend):
    repository = RecordRepository([broken_sql_backend, json_backend])
    assert repository.open() is json_backend

    status = repository.status()
    assert status.active_backend == "json"
    assert status.degraded
    assert "sql" in status.warnings[0]

    repository.insert(make_record())
    assert repository.count() == 1


def test_falls_back_when_backend_fails_mid_session(document_backend, fake_collection, json_backend):
    repository = RecordRepository([document_backend, json_backend])
    repository.open()
    repository.insert(make_record(date="2024-01-01"))

    fake_collection.available = False
    stored = repository.insert(make_record(date="2024-01-02"))

    assert repository.backend is json_backend
    assert repository.degraded
    assert [r.id for r in repository.list()] == [stored.id]


def _break(sql_backend, broken_sql_backend, monkeypatch):
    monkeypatch.setattr(sql_backend, "_session_factory", broken_sql_backend._session_factory)


def test_aggregates_survive_sql_failure_mid_session(sql_backend, broken_sql_backend, json_backend, monkeypatch):
    repository = RecordRepository([sql_backend, json_backend])
    repository.open()
    repository.insert(make_record(date="2024-01-10"))
    assert repository.get_aggregate("2024-01").record_count == 1

    _break(sql_backend, broken_sql_backend, monkeypatch)

    # The local store starts empty, so the month has no aggregate there
    assert repository.get_aggregate("2024-01") is None
    assert repository.backend is json_backend
    assert repository.degraded

    repository.insert(make_record(date="2024-01-11", temperature=24.0))
    assert repository.get_aggregate("2024-01").avg_temperature == 24.0
    assert [aggregate.month_year for aggregate in repository.list_aggregates()] == ["2024-01"]


def test_mutation_after_sql_failure_skips_aggregate_store(sql_backend, broken_sql_backend, json_backend, monkeypatch):
    repository = RecordRepository([sql_backend, json_backend])
    repository.open()
    _break(sql_backend, broken_sql_backend, monkeypatch)

    stored = repository.insert(make_record(date="2024-02-01"))

    assert repository.backend is json_backend
    assert repository.recompute_month("2024-02").record_count == 1
    assert repository.delete(stored.id) is True
    assert repository.list_aggregates() == []


def test_does_not_return_to_recovered_backend(document_backend, fake_collection, json_backend):
    repository = RecordRepository([document_backend, json_backend])
    repository.open()
    fake_collection.available = False
    repository.list()
    fake_collection.available = True

    repository.insert(make_record())
    assert repository.backend is json_backend
    assert fake_collection.documents == []


def test_raises_when_nothing_is_left(document_backend, fake_collection):
    repository = RecordRepository([document_backend])
    repository.open()
    fake_collection.available = False
    with pytest.raises(BackendUnavailableError):
        repository.insert(make_record())


def test_open_fails_without_any_backend(broken_sql_backend, tmp_path):
    corrupt = tmp_path / "monitoring_data.json"
    corrupt.write_text("{not json", encoding="utf-8")
    repository = RecordRepository([broken_sql_backend, JsonFileBackend(corrupt)])
    with pytest.raises(BackendUnavailableError):
        repository.open()
    assert len(repository.warnings) == 2


def test_unopened_repository_refuses_work(json_backend):
    repository = RecordRepository([json_backend])
    with pytest.raises(BackendUnavailableError):
        repository.list()


def test_requires_a_provider():
    with pytest.raises(ValueError):
        RecordRepository([])
