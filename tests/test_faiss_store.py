"""Unit tests for FaissVectorIndex persistence."""

import faiss
import pytest

from newsrag import FaissVectorIndex, ValidationError


def test_ensure_collection_creates_empty_index(temp_faiss_index):
    temp_faiss_index.ensure_collection()

    assert temp_faiss_index.index is not None
    assert temp_faiss_index.index.ntotal == 0


def test_persistence_roundtrip(temp_faiss_index, point_factory, mock_embedder):
    store = temp_faiss_index
    store.ensure_collection()
    store.upsert(point_factory(["rates held", "storm warning"]))
    store.save()

    reloaded = FaissVectorIndex(
        db_path=store.db_path,
        index_path=store.index_path,
        dimension=store.dimension,
        collection_name=store.collection_name,
    )
    reloaded.load()

    assert reloaded.index is not None
    assert reloaded.index.ntotal == 2
    hits = reloaded.search(mock_embedder.embed_one("rates held"), top_k=1)
    assert hits[0].payload == {"text": "rates held", "title": "Title 0", "url": "u0"}


def test_search_loads_saved_index_lazily(
    temp_faiss_index, point_factory, mock_embedder
):
    temp_faiss_index.ensure_collection()
    temp_faiss_index.upsert(point_factory(["only point"]))
    temp_faiss_index.save()

    fresh = FaissVectorIndex(
        db_path=temp_faiss_index.db_path,
        index_path=temp_faiss_index.index_path,
        dimension=temp_faiss_index.dimension,
    )

    assert len(fresh.search(mock_embedder.embed_one("only point"), top_k=1)) == 1


def test_payloads_are_stored_in_sqlite(temp_faiss_index, point_factory):
    temp_faiss_index.upsert(point_factory(["a", "b"], first_id=10))

    assert temp_faiss_index.payload_count() == 2
    assert temp_faiss_index.get_payloads([11]) == {
        11: {"text": "b", "title": "Title 1", "url": "u1"}
    }


def test_load_without_file_leaves_index_unset(temp_faiss_index):
    temp_faiss_index.load()

    assert temp_faiss_index.index is None


def test_load_rejects_dimension_mismatch(tmp_path):
    index_path = tmp_path / "wrong.faiss"
    faiss.write_index(faiss.IndexIDMap(faiss.IndexFlatIP(4)), str(index_path))
    store = FaissVectorIndex(
        db_path=tmp_path / "store.db", index_path=index_path, dimension=8
    )

    with pytest.raises(ValidationError, match="dimension"):
        store.load()


def test_load_wraps_plain_index_with_id_map(tmp_path):
    index_path = tmp_path / "plain.faiss"
    faiss.write_index(faiss.IndexFlatIP(8), str(index_path))
    store = FaissVectorIndex(
        db_path=tmp_path / "store.db", index_path=index_path, dimension=8
    )

    store.load()

    assert isinstance(store.index, faiss.IndexIDMap)


def test_delete_collection_removes_file(temp_faiss_index, point_factory):
    temp_faiss_index.upsert(point_factory(["a"]))
    temp_faiss_index.save()
    assert temp_faiss_index.index_path.exists()

    temp_faiss_index.delete_collection()

    assert not temp_faiss_index.index_path.exists()
    assert temp_faiss_index.payload_count() == 0
