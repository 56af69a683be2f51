"""Document model backing the collection/document store."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Index, String

from prboard.config.database import Base


class Document(Base):
    """JSON document addressed by `(collection, doc_id)` in the `documents` table."""

    __tablename__ = "documents"

    collection = Column(String(100), primary_key=True)
    doc_id = Column(String(300), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_documents_collection", "collection"),
    )

    def __repr__(self):
        return f"<Document {self.collection}/{self.doc_id}>"
