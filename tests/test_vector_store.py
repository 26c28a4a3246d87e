"""Tests for the Pinecone and Chroma adapters."""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import chromadb
import pytest

from pdf_rag.config import Cloud, Metric
from pdf_rag.ingest import ingest_document
from pdf_rag.vector_store import ChromaDatabase, PineconeDatabase, PineconeIndex, VectorRecord


def _records(n, dimension=3):
    return [
        VectorRecord(
            id=f"id-{i}",
            values=[1.0 if j == i % dimension else 0.0 for j in range(dimension)],
            metadata={"text": f"chunk {i}", "source": "doc.pdf", "page": i},
        )
        for i in range(n)
    ]


class TestPineconeDatabase:
    def test_list_index_names(self):
        client = MagicMock()
        client.list_indexes.return_value.names.return_value = ["a", "b"]
        assert PineconeDatabase(client).list_index_names() == ["a", "b"]

    def test_create_index_uses_serverless_spec(self):
        client = MagicMock()
        PineconeDatabase(client).create_index("demo-index", 768, Metric.COSINE, Cloud.AWS, "us-east-1")

        kwargs = client.create_index.call_args.kwargs
        assert kwargs["name"] == "demo-index"
        assert kwargs["dimension"] == 768
        assert kwargs["metric"] == "cosine"
        assert kwargs["spec"].cloud == "aws"
        assert kwargs["spec"].region == "us-east-1"

    def test_index_handle(self):
        client = MagicMock()
        handle = PineconeDatabase(client).index("demo-index")
        client.Index.assert_called_once_with("demo-index")
        assert handle.name == "demo-index"


class TestPineconeIndex:
    @pytest.mark.parametrize(
        "namespaces,expected",
        [
            ({}, 0),
            ({"doc-ns": SimpleNamespace(vector_count=0)}, 0),
            ({"doc-ns": SimpleNamespace(vector_count=42)}, 42),
            ({"doc-ns": {"vector_count": 7}}, 7),
            ({"other": SimpleNamespace(vector_count=5)}, 0),
        ],
    )
    def test_namespace_count(self, namespaces, expected):
        raw = MagicMock()
        raw.describe_index_stats.return_value = SimpleNamespace(namespaces=namespaces)
        assert PineconeIndex(raw, "demo-index").namespace_count("doc-ns") == expected

    def test_upsert_in_batches(self):
        raw = MagicMock()
        sent = PineconeIndex(raw, "demo-index").upsert(_records(5), namespace="doc-ns", batch_size=2)

        assert sent == 5
        assert raw.upsert.call_count == 3
        first = raw.upsert.call_args_list[0].kwargs
        assert first["namespace"] == "doc-ns"
        assert first["vectors"][0] == {
            "id": "id-0",
            "values": [1.0, 0.0, 0.0],
            "metadata": {"text": "chunk 0", "source": "doc.pdf", "page": 0},
        }

    def test_query_maps_matches(self):
        raw = MagicMock()
        raw.query.return_value = SimpleNamespace(
            matches=[
                SimpleNamespace(id="id-1", score=0.9, metadata={"text": "best", "page": 1}),
                SimpleNamespace(id="id-2", score=0.5, metadata=None),
            ]
        )

        matches = PineconeIndex(raw, "demo-index").query([0.1, 0.2], top_k=2, namespace="doc-ns")

        raw.query.assert_called_once_with(vector=[0.1, 0.2], top_k=2, namespace="doc-ns", include_metadata=True)
        assert [(m.id, m.score, m.text) for m in matches] == [("id-1", 0.9, "best"), ("id-2", 0.5, "")]
        assert matches[0].metadata == {"page": 1}


class TestChromaDatabase:
    @pytest.fixture
    def chroma(self):
        return ChromaDatabase(chromadb.EphemeralClient())

    @pytest.fixture
    def name(self):
        return f"test-{uuid.uuid4().hex[:12]}"

    def test_create_list_and_namespaces(self, chroma, name):
        assert name not in chroma.list_index_names()
        chroma.create_index(name, 3, Metric.COSINE, Cloud.AWS, "us-east-1")
        assert name in chroma.list_index_names()

        index = chroma.index(name)
        assert index.namespace_count("doc-ns") == 0

        index.upsert(_records(3), namespace="doc-ns", batch_size=2)
        index.upsert(_records(1), namespace="other-ns")

        assert index.namespace_count("doc-ns") == 3
        assert index.namespace_count("other-ns") == 1

    def test_query_is_scoped_to_namespace(self, chroma, name):
        chroma.create_index(name, 3, Metric.COSINE, Cloud.AWS, "us-east-1")
        index = chroma.index(name)
        index.upsert(_records(3), namespace="doc-ns")

        matches = index.query([0.0, 1.0, 0.0], top_k=2, namespace="doc-ns")

        assert len(matches) == 2
        assert matches[0].id == "id-1"
        assert matches[0].text == "chunk 1"
        assert matches[0].metadata == {"source": "doc.pdf", "page": 1}
        assert index.query([0.0, 1.0, 0.0], top_k=2, namespace="missing-ns") == []

    def test_query_empty_index(self, chroma, name):
        chroma.create_index(name, 3, Metric.EUCLIDEAN, Cloud.AWS, "us-east-1")
        assert chroma.index(name).query([1.0, 0.0, 0.0], top_k=3, namespace="doc-ns") == []

    def test_same_document_in_two_namespaces(self, chroma, name, embedder, alphabet_file):
        chroma.create_index(name, embedder.dimension, Metric.COSINE, Cloud.AWS, "us-east-1")
        index = chroma.index(name)

        for namespace in ("ns-a", "ns-b"):
            ingest_document(
                alphabet_file, index=index, embedder=embedder, namespace=namespace, chunk_size=10, chunk_overlap=2
            )

        assert index.namespace_count("ns-a") == 3
        assert index.namespace_count("ns-b") == 3

        ids_a = {m.id for m in index.query(embedder.embed_query("abc"), top_k=3, namespace="ns-a")}
        ids_b = {m.id for m in index.query(embedder.embed_query("abc"), top_k=3, namespace="ns-b")}
        assert ids_a == ids_b
        assert not any(i.startswith("ns-") for i in ids_a)
