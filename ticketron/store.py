"""
Document store facade over a PyMongo database.

Documents are addressed by collection name and a string ``_id``; reads hand
back the public shape ``{"id": <doc id>, **fields}``. Queries are expressed as
``(field_path, op, value)`` conditions where ``op`` is ``"=="`` or ``"in"`` and
the field path ``"id"`` stands for the document id.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from itertools import groupby
from operator import itemgetter
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DeleteOne, MongoClient, ReplaceOne, UpdateOne
from pymongo.collection import Collection
from pymongo.database import Database

logger = logging.getLogger(__name__)

# Collection names
USERS = "users"
EVENTS = "events"
TICKETS = "tickets"
PAYMENTS = "payments"
ATTENDANCE = "attendance"
FAVORITES = "favorites"
NOTIFICATIONS = "notifications"

Condition = Tuple[str, str, Any]

OPERATORS = ("==", "in")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def server_timestamp() -> str:
    """ISO-8601 UTC timestamp stamped on the server side of a write."""
    return now_utc().isoformat()


def to_public(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    data = dict(doc)
    doc_id = data.pop("_id")
    return {"id": str(doc_id), **data}


def compile_filter(conditions: Iterable[Condition], match: str = "all") -> Dict[str, Any]:
    clauses = []
    for field, op, value in conditions:
        if op not in OPERATORS:
            raise ValueError(f"Unsupported operator {op!r}; expected one of {OPERATORS}")
        key = "_id" if field == "id" else field
        if op == "in":
            clauses.append({key: {"$in": list(value)}})
        else:
            clauses.append({key: value})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    if match == "any":
        return {"$or": clauses}
    return {"$and": clauses}


class DocumentStore:
    def __init__(self, db: Database, use_transactions: bool = False):
        self.db = db
        self.use_transactions = use_transactions

    @classmethod
    def connect(cls, settings) -> "DocumentStore":
        try:
            client = MongoClient(
                settings.mongo_uri,
                serverSelectionTimeoutMS=3000,
                connectTimeoutMS=3000,
                socketTimeoutMS=5000,
                retryWrites=True,
            )
            # Verify connectivity early (will raise if unreachable)
            client.admin.command("ping")
        except Exception as e:
            logger.exception("MongoDB connection failed")
            raise RuntimeError(f"MongoDB connection failed: {e}") from e
        return cls(client[settings.mongo_db], use_transactions=settings.mongo_transactions)

    def ensure_indexes(self) -> None:
        events = self.collection(EVENTS)
        events.create_index([("organizer.organizerId", ASCENDING)])
        events.create_index([("category", ASCENDING), ("location", ASCENDING)])
        tickets = self.collection(TICKETS)
        tickets.create_index([("eventId", ASCENDING), ("status", ASCENDING)])
        tickets.create_index([("userId", ASCENDING)])
        payments = self.collection(PAYMENTS)
        payments.create_index([("eventId", ASCENDING), ("status", ASCENDING)])
        payments.create_index([("userId", ASCENDING)])
        self.collection(ATTENDANCE).create_index([("userId", ASCENDING), ("eventId", ASCENDING)])

    def collection(self, name: str) -> Collection:
        return self.db[name]

    @staticmethod
    def new_id() -> str:
        return str(ObjectId())

    # -------------------------
    # Point operations
    # -------------------------
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return to_public(self.collection(collection).find_one({"_id": doc_id}))

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.collection(collection).replace_one({"_id": doc_id}, dict(data), upsert=True)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> bool:
        """Merge ``fields`` into an existing document. False when it does not exist."""
        res = self.collection(collection).update_one({"_id": doc_id}, {"$set": dict(fields)})
        return res.matched_count > 0

    def update_where(
        self, collection: str, doc_id: str, expected: Dict[str, Any], fields: Dict[str, Any]
    ) -> bool:
        """Compare-and-set: merge ``fields`` only while the document still matches ``expected``."""
        query = {"_id": doc_id, **expected}
        res = self.collection(collection).update_one(query, {"$set": dict(fields)})
        return res.matched_count > 0

    def delete(self, collection: str, doc_id: str) -> bool:
        return self.collection(collection).delete_one({"_id": doc_id}).deleted_count > 0

    def array_union(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        res = self.collection(collection).update_one({"_id": doc_id}, {"$addToSet": {field: value}})
        return res.matched_count > 0

    def array_remove(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        res = self.collection(collection).update_one({"_id": doc_id}, {"$pull": {field: value}})
        return res.matched_count > 0

    def increment(self, collection: str, doc_id: str, field: str, amount: int, floor: Optional[int] = None) -> bool:
        """Atomically add ``amount`` to a numeric field.

        Applies only when the field exists and, if ``floor`` is given, only when
        the result stays ``>= floor``. Returns whether the write happened.
        """
        query: Dict[str, Any] = {"_id": doc_id}
        if floor is None:
            query[field] = {"$exists": True}
        else:
            query[field] = {"$gte": floor - amount}
        res = self.collection(collection).update_one(query, {"$inc": {field: amount}})
        return res.modified_count > 0

    # -------------------------
    # Queries
    # -------------------------
    def find(self, collection: str, *conditions: Condition, limit: int = 0, match: str = "all") -> List[Dict[str, Any]]:
        cursor = self.collection(collection).find(compile_filter(conditions, match))
        if limit:
            cursor = cursor.limit(limit)
        return [to_public(d) for d in cursor]

    def batch(self) -> "WriteBatch":
        return WriteBatch(self)


class WriteBatch:
    """Collects writes across collections and commits them together.

    With transactions enabled the commit is all-or-nothing; otherwise each
    collection's writes go out as one ordered bulk write.
    """

    def __init__(self, store: DocumentStore):
        self._store = store
        self._writes: List[Tuple[str, Any]] = []

    def __len__(self) -> int:
        return len(self._writes)

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteBatch":
        self._writes.append((collection, ReplaceOne({"_id": doc_id}, dict(data), upsert=True)))
        return self

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> "WriteBatch":
        self._writes.append((collection, UpdateOne({"_id": doc_id}, {"$set": dict(fields)})))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._writes.append((collection, DeleteOne({"_id": doc_id})))
        return self

    def commit(self) -> int:
        if not self._writes:
            return 0
        if self._store.use_transactions:
            with self._store.db.client.start_session() as session:
                session.with_transaction(self._apply)
        else:
            self._apply()
        count = len(self._writes)
        self._writes = []
        return count

    def _apply(self, session=None) -> None:
        kwargs = {"session": session} if session is not None else {}
        for name, group in groupby(self._writes, key=itemgetter(0)):
            ops = [op for _, op in group]
            self._store.collection(name).bulk_write(ops, ordered=True, **kwargs)
