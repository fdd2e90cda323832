import logging
from typing import Any

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError

from server_monitor.core.exceptions import (
    BackendUnavailableError,
    DuplicateDateError,
    DuplicateRecordIdError,
    RecordNotFoundError,
)
from server_monitor.schemas.record import MonitoringRecord
from server_monitor.storage.base import RecordBackend

logger = logging.getLogger(__name__)

# _id carries insertion order for records sharing date and time
NEWEST_FIRST = [("date", DESCENDING), ("time", DESCENDING), ("_id", DESCENDING)]
PROJECTION = {"_id": 0}


def _duplicate_error(key_value: dict[str, Any] | None, record: MonitoringRecord) -> Exception:
    if key_value and "id" in key_value:
        return DuplicateRecordIdError(str(key_value["id"]))
    date = (key_value or {}).get("date", record.date)
    return DuplicateDateError(str(date))


class DocumentBackend(RecordBackend):
    """Remote document collection (MongoDB) with unique date and id indices."""

    name = "document"
    unique_dates = True
    persists_aggregates = False

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        database: str = "server_room",
        collection: str = "monitoring_records",
        timeout_ms: int = 3000,
        client_collection: Collection | None = None,
    ) -> None:
        self.url = url
        self.database = database
        self.collection_name = collection
        self.timeout_ms = timeout_ms
        self._client: MongoClient | None = None
        self._collection = client_collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            raise BackendUnavailableError(self.name, "backend is not open")
        return self._collection

    def open(self) -> None:
        try:
            if self._collection is None:
                self._client = MongoClient(self.url, serverSelectionTimeoutMS=self.timeout_ms)
                self._client.admin.command("ping")
                self._collection = self._client[self.database][self.collection_name]
            self._collection.create_index([("id", ASCENDING)], unique=True)
            self._collection.create_index([("date", ASCENDING)], unique=True)
            self._collection.create_index([("month_year", ASCENDING)])
        except PyMongoError as exc:
            raise BackendUnavailableError(self.name, str(exc)) from exc
        logger.info("Connected to document store %s/%s", self.database, self.collection_name)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _document(self, record: MonitoringRecord) -> dict[str, Any]:
        document = record.model_dump(exclude={"created_at", "updated_at"})
        document["month_year"] = record.month_year
        return document

    def _unavailable(self, exc: PyMongoError) -> BackendUnavailableError:
        return BackendUnavailableError(self.name, str(exc))

    def insert(self, record: MonitoringRecord) -> MonitoringRecord:
        try:
            self.collection.insert_one(self._document(record))
            # Timestamps come from the server clock, as on update
            document = self.collection.find_one_and_update(
                {"id": record.id},
                {"$currentDate": {"created_at": True, "updated_at": True}},
                projection=PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise _duplicate_error((exc.details or {}).get("keyValue"), record) from exc
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc
        return MonitoringRecord.model_validate(document)

    def insert_many(self, records: list[MonitoringRecord]) -> list[MonitoringRecord]:
        documents = [self._document(record) for record in records]
        ids = [document["id"] for document in documents]
        try:
            self.collection.insert_many(documents, ordered=True)
        except BulkWriteError as exc:
            self._undo_prefix(ids[: exc.details.get("nInserted", 0)])
            errors = exc.details.get("writeErrors") or [{}]
            failed = records[min(errors[0].get("index", 0), len(records) - 1)]
            raise _duplicate_error(errors[0].get("keyValue"), failed) from exc
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc

        try:
            self.collection.update_many(
                {"id": {"$in": ids}}, {"$currentDate": {"created_at": True, "updated_at": True}}
            )
            found = {document["id"]: document for document in self.collection.find({"id": {"$in": ids}}, PROJECTION)}
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc
        return [MonitoringRecord.model_validate(found[record_id]) for record_id in ids]

    def _undo_prefix(self, ids: list[str]) -> None:
        # No multi-document transaction: remove the part of the batch that did land
        if not ids:
            return
        try:
            self.collection.delete_many({"id": {"$in": ids}})
        except PyMongoError as exc:
            logger.error("Could not undo %d records of a rejected batch: %s", len(ids), exc)
            raise self._unavailable(exc) from exc

    def _find(self, query: dict[str, Any]) -> list[MonitoringRecord]:
        try:
            documents = self.collection.find(query, PROJECTION, sort=NEWEST_FIRST)
            return [MonitoringRecord.model_validate(document) for document in documents]
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc

    def list_all(self) -> list[MonitoringRecord]:
        return self._find({})

    def query_by_month(self, month_year: str) -> list[MonitoringRecord]:
        return self._find({"month_year": month_year})

    def get(self, record_id: str) -> MonitoringRecord | None:
        try:
            document = self.collection.find_one({"id": record_id}, PROJECTION)
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc
        return MonitoringRecord.model_validate(document) if document else None

    def update(self, record_id: str, changes: dict[str, Any]) -> MonitoringRecord:
        fields = dict(changes)
        if "date" in fields:
            fields["month_year"] = fields["date"][:7]
        try:
            document = self.collection.find_one_and_update(
                {"id": record_id},
                {"$set": fields, "$currentDate": {"updated_at": True}},
                projection=PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise DuplicateDateError(str(fields.get("date", ""))) from exc
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc
        if document is None:
            raise RecordNotFoundError(record_id)
        return MonitoringRecord.model_validate(document)

    def delete(self, record_id: str) -> MonitoringRecord | None:
        try:
            document = self.collection.find_one_and_delete({"id": record_id}, projection=PROJECTION)
        except PyMongoError as exc:
            raise self._unavailable(exc) from exc
        return MonitoringRecord.model_validate(document) if document else None
