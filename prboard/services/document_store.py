"""Collection/document store on top of the SQLAlchemy `documents` table."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from prboard.config.database import SessionLocal
from prboard.models.document import Document

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _insert_for(db: Any):
    dialect_name = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect_name]
    except KeyError:
        raise ValueError(f"Unsupported database dialect for document upserts: {dialect_name}") from None


class DocumentStore:
    """Keyed JSON documents grouped in named collections.

    Every call opens its own session, so writes may run from worker threads.
    """

    def __init__(self, session_factory: Callable[[], Any] = SessionLocal) -> None:
        self._session_factory = session_factory

    def set_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Merge-upsert a document and return its stored payload.

        Keys absent from `data` keep their stored values. Concurrent writers
        to the same id never conflict; the last commit wins.
        """
        db = self._session_factory()
        try:
            now = datetime.utcnow()
            statement = _insert_for(db)(Document).values(
                collection=collection,
                doc_id=doc_id,
                data={},
                created_at=now,
                updated_at=now,
            )
            db.execute(statement.on_conflict_do_nothing(index_elements=[Document.collection, Document.doc_id]))

            row = db.execute(
                select(Document)
                .where(Document.collection == collection, Document.doc_id == doc_id)
                .with_for_update()
            ).scalar_one()
            stored = {**(row.data or {}), **data}
            # Reassign so the JSON column is flagged dirty
            row.data = stored
            row.updated_at = now
            db.commit()
            return stored
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get_document(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        db = self._session_factory()
        try:
            row = db.get(Document, (collection, doc_id))
            return dict(row.data or {}) if row is not None else None
        finally:
            db.close()

    def list_documents(self, collection: str) -> list[dict[str, Any]]:
        """All documents of a collection with `id` set to the document key."""
        db = self._session_factory()
        try:
            rows = (
                db.query(Document)
                .filter(Document.collection == collection)
                .order_by(Document.doc_id)
                .all()
            )
            return [{**(row.data or {}), "id": row.doc_id} for row in rows]
        finally:
            db.close()
