"""
Document store implementations: SQLAlchemy for deployments and in-memory for
tests. Both satisfy `feedback_shared.interfaces.DocumentStore`.
"""

from __future__ import annotations

import copy
import logging
import time
import uuid
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import JSON, Column, Float, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from feedback_shared.interfaces import Document

logger = logging.getLogger(__name__)


def _matches(data: Mapping[str, Any], predicate: Mapping[str, Any]) -> bool:
    return all(data.get(key) == value for key, value in predicate.items())


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _collection(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection, {})

    def find(self, collection: str, predicate: Mapping[str, Any]) -> list[Document]:
        return [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if _matches(data, predicate)
        ]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    def insert(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def update(self, collection: str, doc_id: str, patch: dict) -> bool:
        existing = self._collection(collection).get(doc_id)
        if existing is None:
            return False
        existing.update(copy.deepcopy(patch))
        return True

    def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None

    def list_all(self, collection: str, limit: int | None = None) -> list[Document]:
        docs = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
        ]
        return docs[:limit] if limit is not None else docs

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
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

    def find(self, collection: str, predicate: Mapping[str, Any]) -> list[Document]:
        # Equality filters are applied in Python so the JSON column stays portable
        # across Postgres and SQLite.
        return [
            doc
            for doc in self.list_all(collection)
            if _matches(doc.data, predicate)
        ]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if not row:
                return None
            return Document(id=row.id, data=dict(row.data))

    def insert(self, collection: str, data: dict) -> str:
        now = time.time()
        doc_id = uuid.uuid4().hex
        with self.Session() as session:
            session.add(
                DocumentRow(
                    collection=collection,
                    id=doc_id,
                    data=data,
                    created_at=now,
                    updated_at=now,
                )
            )
            session.commit()
        logger.debug("Inserted %s/%s", collection, doc_id)
        return doc_id

    def update(self, collection: str, doc_id: str, patch: dict) -> bool:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if not row:
                return False
            # Reassign so SQLAlchemy notices the JSON change.
            row.data = {**row.data, **patch}
            row.updated_at = time.time()
            session.commit()
            return True

    def delete(self, collection: str, doc_id: str) -> bool:
        with self.Session() as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def list_all(self, collection: str, limit: int | None = None) -> list[Document]:
        with self.Session() as session:
            stmt = (
                select(DocumentRow)
                .where(DocumentRow.collection == collection)
                .order_by(DocumentRow.created_at.asc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars().all()
            return [Document(id=row.id, data=dict(row.data)) for row in rows]


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False, index=True)
    updated_at = Column(Float, nullable=False)
