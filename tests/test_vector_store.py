"""Tests for vector_store.py: ChromaVectorIndex against a real local Chroma store.

Uses chromadb.PersistentClient under pytest's tmp_path; embeddings are tiny
synthetic 3-dim vectors so no OpenAI key is needed.
"""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from multiquery_rag.schema import RetrievalHit
from multiquery_rag.settings import VectorStoreSettings
from multiquery_rag.vector_store import ChromaVectorIndex, build_chroma_client

EMBS = [
    [1.0, 0.0, 0.0],  # event loop
    [0.0, 1.0, 0.0],  # streams
    [0.0, 0.0, 1.0],  # modules
]


@pytest.fixture()
def filled_index(chroma_index, sample_chunks):
    chroma_index.upsert(sample_chunks, EMBS)
    return chroma_index


class TestCollectionLifecycle:
    def test_new_index_does_not_exist(self, chroma_index):
        assert chroma_index.exists() is False

    def test_create_then_exists(self, chroma_index):
        chroma_index.create()
        assert chroma_index.exists() is True

    def test_collection_uses_cosine_distance(self, chroma_index, sample_chunks):
        chroma_index.upsert(sample_chunks, EMBS)
        # same direction, different magnitude: cosine similarity is still 1
        hit = chroma_index.search([5.0, 0.0, 0.0], limit=1)[0]
        assert hit.score == pytest.approx(1.0, abs=1e-5)

    def test_ensure_creates_missing_collection(self, chroma_index):
        chroma_index.ensure()
        assert chroma_index.exists() is True
        assert chroma_index.count() == 0

    def test_ensure_reuses_existing_collection(self, chroma_index, sample_chunks):
        chroma_index.upsert(sample_chunks, EMBS)
        reopened = ChromaVectorIndex(chroma_index.client, chroma_index.collection_name)
        assert reopened.exists() is True
        assert reopened.count() == 3

    def test_drop_removes_collection_and_points(self, chroma_index, sample_chunks):
        chroma_index.upsert(sample_chunks, EMBS)
        chroma_index.drop()
        assert chroma_index.exists() is False
        assert chroma_index.count() == 0

    def test_drop_missing_collection_is_noop(self, chroma_index):
        chroma_index.drop()
        assert chroma_index.exists() is False


class TestUpsert:
    def test_count_matches_chunks(self, filled_index):
        assert filled_index.count() == 3

    def test_returns_one_uuid_per_chunk(self, chroma_index, sample_chunks):
        ids = chroma_index.upsert(sample_chunks, EMBS)
        assert len(ids) == 3
        assert len(set(ids)) == 3

    def test_misaligned_inputs_raise(self, chroma_index, sample_chunks):
        with pytest.raises(ValueError, match="must align"):
            chroma_index.upsert(sample_chunks, EMBS[:2])

    def test_empty_upsert_is_noop(self, chroma_index):
        assert chroma_index.upsert([], []) == []


class TestSearch:
    def test_returns_retrieval_hits(self, filled_index):
        hits = filled_index.search(EMBS[0], limit=3)
        assert all(isinstance(hit, RetrievalHit) for hit in hits)

    def test_limit_caps_results(self, filled_index):
        assert len(filled_index.search(EMBS[0], limit=1)) == 1

    def test_nearest_chunk_ranks_first_with_score_one(self, filled_index, sample_chunks):
        hits = filled_index.search(EMBS[1], limit=3)
        assert hits[0].text == sample_chunks[1].text
        assert hits[0].score == pytest.approx(1.0, abs=1e-5)

    def test_scores_ordered_descending(self, filled_index):
        scores = [hit.score for hit in filled_index.search([0.9, 0.4, 0.1], limit=3)]
        assert scores == sorted(scores, reverse=True)

    def test_payload_metadata_round_trips(self, filled_index):
        hit = filled_index.search(EMBS[2], limit=1)[0]
        assert hit.metadata["doc_id"] == "node-p0003"
        assert hit.metadata["page"] == 3

    def test_hits_are_untagged(self, filled_index):
        assert filled_index.search(EMBS[0], limit=1)[0].query is None


class TestBuildChromaClient:
    @patch("multiquery_rag.vector_store.chromadb")
    def test_host_selects_http_client(self, mock_chromadb):
        settings = VectorStoreSettings(host="chroma.internal", port=9000)
        build_chroma_client(settings)
        mock_chromadb.HttpClient.assert_called_once_with(host="chroma.internal", port=9000)
        mock_chromadb.PersistentClient.assert_not_called()

    @patch("multiquery_rag.vector_store.chromadb")
    def test_no_host_selects_persistent_client(self, mock_chromadb, tmp_path):
        persist_dir = tmp_path / "store"
        build_chroma_client(VectorStoreSettings(persist_dir=str(persist_dir)))
        mock_chromadb.PersistentClient.assert_called_once_with(path=str(persist_dir))
        assert persist_dir.is_dir()
