"""Database models"""

from prboard.models.document import Document
from prboard.models.records import (
    METADATA_COLLECTION,
    METADATA_DOC_ID,
    PRS_COLLECTION,
    PullRequestRecord,
    RefreshMetadata,
    build_record_id,
)

__all__ = [
    "Document",
    "PullRequestRecord",
    "RefreshMetadata",
    "build_record_id",
    "PRS_COLLECTION",
    "METADATA_COLLECTION",
    "METADATA_DOC_ID",
]
