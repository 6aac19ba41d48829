"""
Record store for the storefront.

State lives in named collections: users, products, orders, and one cart per
user. A collection is always read whole and written whole; the last write
wins. Collections are addressed by `CollectionKey(kind, owner_id)` and only
the store decides how that key is spelled in the backing storage.

Two backends are provided:
- MemoryRecordStore keeps each collection as JSON text under a string key,
  the way browser key-value storage does.
- MongoRecordStore keeps one MongoDB document per collection.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from bson import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient

from config import DATABASE_NAME, DATABASE_URL

logger = logging.getLogger(__name__)


class CollectionKey(NamedTuple):
    kind: str
    owner_id: Optional[str] = None

    def storage_key(self) -> str:
        if self.owner_id is None:
            return self.kind
        return f"{self.kind}:{self.owner_id}"


USERS = CollectionKey("users")
PRODUCTS = CollectionKey("products")
ORDERS = CollectionKey("orders")


def cart_key(user_id: str) -> CollectionKey:
    return CollectionKey("cart", user_id)


def new_id() -> str:
    return str(ObjectId())


class RecordStore:
    """Base class; backends implement _read, _write and _delete."""

    def __init__(self):
        self._journal: Optional[Dict[CollectionKey, Optional[List[dict]]]] = None

    def load_collection(self, key: CollectionKey) -> List[dict]:
        records = self._read(key)
        return [] if records is None else records

    def save_collection(self, key: CollectionKey, records: Iterable[dict]) -> None:
        if self._journal is not None and key not in self._journal:
            self._journal[key] = self._read(key)
        self._write(key, list(records))

    @contextmanager
    def transaction(self):
        """
        Group several collection writes so they apply together or not at all.

        The first write to each key inside the block remembers the previous
        contents; if an exception leaves the block every touched key is put
        back and the exception propagates. Nested blocks join the outer one.
        """
        if self._journal is not None:
            yield self
            return
        self._journal = {}
        try:
            yield self
        except Exception:
            journal, self._journal = self._journal, None
            for key, records in journal.items():
                if records is None:
                    self._delete(key)
                else:
                    self._write(key, records)
            logger.warning("Rolled back %d collection(s)", len(journal))
            raise
        finally:
            self._journal = None

    def describe(self) -> Dict[str, Any]:
        return {"backend": type(self).__name__}

    def _read(self, key: CollectionKey) -> Optional[List[dict]]:
        raise NotImplementedError

    def _write(self, key: CollectionKey, records: List[dict]) -> None:
        raise NotImplementedError

    def _delete(self, key: CollectionKey) -> None:
        raise NotImplementedError


class MemoryRecordStore(RecordStore):
    def __init__(self, items: Optional[Dict[str, str]] = None):
        super().__init__()
        self.items: Dict[str, str] = items if items is not None else {}

    def _read(self, key):
        raw = self.items.get(key.storage_key())
        if not raw:
            return None
        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning("Unreadable data under %r, treating it as empty", key.storage_key())
            return None
        return records if isinstance(records, list) else None

    def _write(self, key, records):
        self.items[key.storage_key()] = json.dumps(records)

    def _delete(self, key):
        self.items.pop(key.storage_key(), None)

    def describe(self):
        return {"backend": "memory", "collections": sorted(self.items)}


class MongoRecordStore(RecordStore):
    """Each collection is one document in `collections`, keyed by its storage key."""

    def __init__(self, database):
        super().__init__()
        self.database = database
        self.collection = database["collections"]

    def _read(self, key):
        doc = self.collection.find_one({"_id": key.storage_key()})
        if not doc:
            return None
        return list(doc.get("records", []))

    def _write(self, key, records):
        self.collection.replace_one(
            {"_id": key.storage_key()},
            {"kind": key.kind, "owner_id": key.owner_id, "records": records},
            upsert=True,
        )

    def _delete(self, key):
        self.collection.delete_one({"_id": key.storage_key()})

    def describe(self):
        return {
            "backend": "mongo",
            "database": self.database.name,
            "collections": [d["_id"] for d in self.collection.find({}, {"_id": 1}).limit(10)],
        }


def connect(url: Optional[str] = None, name: Optional[str] = None) -> RecordStore:
    if url and name:
        logger.info("Using MongoDB record store %s", name)
        return MongoRecordStore(MongoClient(url)[name])
    logger.info("DATABASE_URL/DATABASE_NAME not set, using in-memory record store")
    return MemoryRecordStore()


db = connect(DATABASE_URL, DATABASE_NAME)


# Helpers over whole collections

def _as_record(data) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def create_document(store: RecordStore, key: CollectionKey, data) -> str:
    """Append a record, assigning an id when it has none. Returns the id."""
    record = _as_record(data)
    if not record.get("id"):
        record["id"] = new_id()
    records = store.load_collection(key)
    records.append(record)
    store.save_collection(key, records)
    return record["id"]


def get_documents(
    store: RecordStore,
    key: CollectionKey,
    filter_dict: Optional[Dict[str, Any]] = None,
) -> List[dict]:
    records = store.load_collection(key)
    if filter_dict:
        records = [r for r in records if all(r.get(k) == v for k, v in filter_dict.items())]
    return records


def find_document(store: RecordStore, key: CollectionKey, record_id: str) -> Optional[dict]:
    for record in store.load_collection(key):
        if record.get("id") == record_id:
            return record
    return None


def replace_document(store: RecordStore, key: CollectionKey, data) -> Optional[dict]:
    """
    Replace the record with the same id and return it as now stored.
    Returns None when no record has that id.
    """
    record = _as_record(data)
    records = store.load_collection(key)
    for i, existing in enumerate(records):
        if existing.get("id") == record["id"]:
            records[i] = record
            store.save_collection(key, records)
            return find_document(store, key, record["id"])
    return None
