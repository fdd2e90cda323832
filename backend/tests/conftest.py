"""
Shared fixtures for the server monitor test suite.
"""
import copy
import os
from datetime import datetime, timezone

# Settings are read at import time; keep test runs from writing log files
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SEED_SAMPLE_DATA", "false")

import pytest
from pymongo.errors import BulkWriteError, DuplicateKeyError, ServerSelectionTimeoutError
from sqlalchemy.pool import StaticPool

from server_monitor.core.database import build_engine
from server_monitor.schemas import RecordIn
from server_monitor.storage import RecordRepository
from server_monitor.storage.document_backend import DocumentBackend
from server_monitor.storage.json_backend import JsonFileBackend
from server_monitor.storage.sql_backend import SqlBackend


def make_record(date="2024-01-15", time="08:00", temperature=22.0, humidity=50.0, **overrides):
    values = {
        "date": date,
        "time": time,
        "temperature": temperature,
        "humidity": humidity,
        "ac_status": "normal",
        "ups_status": "normal",
        "rack_count": 4,
        "active_servers": 12,
        "power_usage": 4.5,
        "fire_extinguisher_status": "ready",
        "notes": "Routine inspection",
    }
    values.update(overrides)
    return RecordIn(**values)


class FakeCollection:
    """In-memory stand-in for the handful of pymongo collection calls we use."""

    def __init__(self):
        self.documents = []
        self.unique_fields = set()
        self.indexes = []
        self.available = True
        self.failing_calls = set()
        self.current_date_fields = []
        self._next_id = 1

    def _check_available(self, call=None):
        if not self.available or call in self.failing_calls:
            raise ServerSelectionTimeoutError("connection refused")

    def _touch(self, document, update):
        for field in update.get("$currentDate", {}):
            document[field] = datetime.now(timezone.utc)
            self.current_date_fields.append(field)

    @staticmethod
    def _matches(document, query):
        for key, condition in query.items():
            if isinstance(condition, dict) and "$in" in condition:
                if document.get(key) not in condition["$in"]:
                    return False
            elif document.get(key) != condition:
                return False
        return True

    @staticmethod
    def _project(document, projection):
        projected = copy.deepcopy(document)
        if projection and projection.get("_id") == 0:
            projected.pop("_id", None)
        return projected

    def _conflict(self, document, ignore=None):
        for field in sorted(self.unique_fields):
            for other in self.documents:
                if other is not ignore and other.get(field) == document.get(field):
                    return {field: document.get(field)}
        return None

    def create_index(self, keys, unique=False):
        self._check_available()
        field = keys[0][0]
        self.indexes.append((field, unique))
        if unique:
            self.unique_fields.add(field)
        return f"{field}_1"

    def insert_one(self, document):
        self._check_available()
        conflict = self._conflict(document)
        if conflict:
            raise DuplicateKeyError("E11000 duplicate key error", 11000, {"keyValue": conflict})
        document["_id"] = self._next_id
        self._next_id += 1
        self.documents.append(copy.deepcopy(document))

    def insert_many(self, documents, ordered=True):
        self._check_available()
        for index, document in enumerate(documents):
            try:
                self.insert_one(document)
            except DuplicateKeyError as exc:
                raise BulkWriteError(
                    {
                        "nInserted": index,
                        "writeErrors": [{"index": index, "code": 11000, "keyValue": exc.details["keyValue"]}],
                    }
                )

    def find(self, query, projection=None, sort=None):
        self._check_available()
        found = [document for document in self.documents if self._matches(document, query)]
        for key, direction in reversed(sort or []):
            found.sort(key=lambda document: document[key], reverse=direction < 0)
        return [self._project(document, projection) for document in found]

    def find_one(self, query, projection=None):
        self._check_available()
        for document in self.documents:
            if self._matches(document, query):
                return self._project(document, projection)
        return None

    def find_one_and_update(self, query, update, projection=None, return_document=None):
        self._check_available()
        for document in self.documents:
            if self._matches(document, query):
                candidate = {**document, **update.get("$set", {})}
                conflict = self._conflict(candidate, ignore=document)
                if conflict:
                    raise DuplicateKeyError("E11000 duplicate key error", 11000, {"keyValue": conflict})
                document.update(update.get("$set", {}))
                self._touch(document, update)
                return self._project(document, projection)
        return None

    def find_one_and_delete(self, query, projection=None):
        self._check_available()
        for document in self.documents:
            if self._matches(document, query):
                self.documents.remove(document)
                return self._project(document, projection)
        return None

    def update_many(self, query, update):
        self._check_available()
        for document in self.documents:
            if self._matches(document, query):
                self._touch(document, update)

    def delete_many(self, query):
        self._check_available("delete_many")
        self.documents = [document for document in self.documents if not self._matches(document, query)]


@pytest.fixture
def sql_backend():
    backend = SqlBackend(build_engine("sqlite://", poolclass=StaticPool))
    yield backend
    backend.close()


@pytest.fixture
def json_backend(tmp_path):
    return JsonFileBackend(tmp_path / "monitoring_data.json")


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def document_backend(fake_collection):
    return DocumentBackend(client_collection=fake_collection)


@pytest.fixture
def sql_repository(sql_backend):
    repository = RecordRepository([sql_backend])
    repository.open()
    return repository


@pytest.fixture
def json_repository(json_backend):
    repository = RecordRepository([json_backend])
    repository.open()
    return repository


@pytest.fixture
def document_repository(document_backend):
    repository = RecordRepository([document_backend])
    repository.open()
    return repository


@pytest.fixture(params=["sql", "json", "document"])
def repository(request):
    """Repository over each backend in turn."""
    return request.getfixturevalue(f"{request.param}_repository")
