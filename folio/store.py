"""
Document store abstraction over Firestore, SQL and an in-memory test double.

Documents are plain camelCase dicts keyed by (collection, doc_id). The store
only forwards CRUD calls; validation and defaults live in `folio.actions`.
"""

from __future__ import annotations

import copy
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol

from google.cloud.firestore_v1 import Increment, Query
from google.cloud.firestore_v1 import SERVER_TIMESTAMP as FIRESTORE_TIMESTAMP
from google.cloud.firestore_v1.base_query import FieldFilter
from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class _ServerTimestamp:
    """Sentinel replaced with the write time by every store."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


SERVER_TIMESTAMP = _ServerTimestamp()

Where = Iterable[tuple[str, Any]]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_doc_id() -> str:
    return uuid.uuid4().hex[:20]


def _resolve_timestamps(data: dict, now: str) -> dict:
    return {
        key: (now if value is SERVER_TIMESTAMP else value)
        for key, value in data.items()
    }


def _sort_key(value: Any):
    # Missing values sort after present ones when ascending.
    return (value is None, value if value is not None else "")


def _apply_query(
    docs: list[tuple[str, dict]],
    *,
    order_by: Optional[str],
    descending: bool,
    where: Optional[Where],
    limit: Optional[int],
) -> list[tuple[str, dict]]:
    if where:
        conditions = list(where)
        docs = [
            (doc_id, data)
            for doc_id, data in docs
            if all(data.get(field) == value for field, value in conditions)
        ]
    if order_by:
        docs = sorted(
            docs, key=lambda item: _sort_key(item[1].get(order_by)), reverse=descending
        )
    if limit is not None:
        docs = docs[:limit]
    return docs


class DocumentStore(Protocol):
    """Interface for document database access."""

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[Where] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    def increment(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> None:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection, {})

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        data = self._collection(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[Where] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        docs = [
            (doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
        ]
        return _apply_query(
            docs, order_by=order_by, descending=descending, where=where, limit=limit
        )

    def add(self, collection: str, data: dict) -> str:
        doc_id = _new_doc_id()
        self._collection(collection)[doc_id] = _resolve_timestamps(
            copy.deepcopy(data), utc_now_iso()
        )
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        resolved = _resolve_timestamps(copy.deepcopy(data), utc_now_iso())
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(resolved)
        else:
            docs[doc_id] = resolved

    def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None

    def increment(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> None:
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return
        doc[field] = (doc.get(field) or 0) + amount

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g.,
    Postgres, or SQLite for tests).

    Filtering and ordering happen in Python after loading a collection, which
    is fine for the few hundred documents a personal site holds.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            return copy.deepcopy(row.data) if row else None

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[Where] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        with self.Session() as session:
            stmt = (
                select(DocumentRow)
                .where(DocumentRow.collection == collection)
                .order_by(DocumentRow.created_at.asc())
            )
            rows = session.execute(stmt).scalars().all()
            docs = [(row.doc_id, copy.deepcopy(row.data)) for row in rows]
        return _apply_query(
            docs, order_by=order_by, descending=descending, where=where, limit=limit
        )

    def add(self, collection: str, data: dict) -> str:
        doc_id = _new_doc_id()
        self.set(collection, doc_id, data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        now = time.time()
        resolved = _resolve_timestamps(data, utc_now_iso())
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if row:
                # Reassign so SQLAlchemy notices the JSON change.
                row.data = {**row.data, **resolved} if merge else resolved
                row.updated_at = now
            else:
                session.add(
                    DocumentRow(
                        collection=collection,
                        doc_id=doc_id,
                        data=resolved,
                        created_at=now,
                        updated_at=now,
                    )
                )
            session.commit()

    def delete(self, collection: str, doc_id: str) -> bool:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def increment(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> None:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id), with_for_update=True)
            if not row:
                return
            data = dict(row.data)
            data[field] = (data.get(field) or 0) + amount
            row.data = data
            row.updated_at = time.time()
            session.commit()


class FirestoreDocumentStore:
    """
    Pass-through to Cloud Firestore via firebase_admin.

    Timestamps come back as datetimes and are normalised to ISO strings so
    every store returns the same shapes.
    """

    def __init__(self, client=None):
        if client is None:
            from firebase_admin import firestore

            client = firestore.client()
        self.client = client

    @staticmethod
    def _encode(data: dict) -> dict:
        return {
            key: (FIRESTORE_TIMESTAMP if value is SERVER_TIMESTAMP else value)
            for key, value in data.items()
        }

    @classmethod
    def _decode(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, dict):
            return {key: cls._decode(item) for key, item in value.items()}
        if isinstance(value, list):
            return [cls._decode(item) for item in value]
        return value

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return self._decode(snapshot.to_dict() or {})

    def list(
        self,
        collection: str,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        where: Optional[Where] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        query = self.client.collection(collection)
        for field, value in where or ():
            query = query.where(filter=FieldFilter(field, "==", value))
        if order_by:
            direction = Query.DESCENDING if descending else Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return [
            (snapshot.id, self._decode(snapshot.to_dict() or {}))
            for snapshot in query.stream()
        ]

    def add(self, collection: str, data: dict) -> str:
        _, doc_ref = self.client.collection(collection).add(self._encode(data))
        return doc_ref.id

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        self.client.collection(collection).document(doc_id).set(
            self._encode(data), merge=merge
        )

    def delete(self, collection: str, doc_id: str) -> bool:
        doc_ref = self.client.collection(collection).document(doc_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True

    def increment(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> None:
        self.client.collection(collection).document(doc_id).update(
            {field: Increment(amount)}
        )


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
