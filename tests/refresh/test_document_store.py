from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from prboard.config.database import init_db
from prboard.crawlers.persistence_stage import PersistenceStage
from prboard.models.records import PRS_COLLECTION, PullRequestRecord
from prboard.services.document_store import DocumentStore


@pytest.fixture
def store(tmp_path) -> DocumentStore:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'documents.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(bind=engine)
    return DocumentStore(sessionmaker(bind=engine, autoflush=False))


def _records(count: int, *, approvals: int = 0) -> list[PullRequestRecord]:
    return [
        PullRequestRecord(
            id=f"api-{n}",
            title=f"PR {n}",
            repo="acme/api",
            author="octocat",
            url=f"https://github.com/acme/api/pull/{n}",
            updated_at="2024-05-01T00:00:00Z",
            approvals=approvals,
        )
        for n in range(1, count + 1)
    ]


def test_merge_keeps_fields_missing_from_new_payload(store: DocumentStore) -> None:
    store.set_document("prs", "api-1", {"title": "Old", "approvals": 0, "note": "keep me"})
    store.set_document("prs", "api-1", {"title": "New", "approvals": 2})

    assert store.get_document("prs", "api-1") == {"title": "New", "approvals": 2, "note": "keep me"}


def test_collections_are_isolated(store: DocumentStore) -> None:
    store.set_document("prs", "system", {"kind": "record"})
    store.set_document("metadata", "system", {"kind": "meta"})

    assert store.list_documents("prs") == [{"kind": "record", "id": "system"}]
    assert store.get_document("metadata", "system") == {"kind": "meta"}
    assert store.get_document("metadata", "missing") is None


def test_concurrent_record_upserts_all_land(store: DocumentStore) -> None:
    records = _records(5)

    outcomes = asyncio.run(PersistenceStage(store).upsert_records(records))

    assert [outcome.id for outcome in outcomes] == [record.id for record in records]
    assert all(outcome.success for outcome in outcomes)
    assert {doc["id"] for doc in store.list_documents(PRS_COLLECTION)} == {record.id for record in records}


def test_overlapping_batches_for_new_ids_both_succeed(store: DocumentStore) -> None:
    stage = PersistenceStage(store)

    async def run_both():
        return await asyncio.gather(
            stage.upsert_records(_records(40, approvals=1)),
            stage.upsert_records(_records(40, approvals=2)),
        )

    first, second = asyncio.run(run_both())

    assert [outcome for outcome in first + second if not outcome.success] == []
    docs = store.list_documents(PRS_COLLECTION)
    assert len(docs) == 40
    assert {doc["approvals"] for doc in docs} <= {1, 2}
