"""Pytest fixtures and in-memory fakes for the provider clients."""

import hashlib
import math

import pytest

from pdf_rag.config import Settings
from pdf_rag.vector_store import Match


class FakeEmbedder:
    """Deterministic embeddings derived from a hash of the text."""

    def __init__(self, dimension: int = 8):
        self.dimension = dimension
        self.calls = []

    def _vector(self, text):
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [digest[i % len(digest)] / 255.0 for i in range(self.dimension)]

    def embed_documents(self, texts):
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]

    def embed_query(self, text):
        self.calls.append([text])
        return self._vector(text)


class InMemoryIndex:
    """Namespaced cosine-similarity index."""

    def __init__(self, name="test-index"):
        self.name = name
        self.namespaces = {}
        self.upsert_calls = 0

    def namespace_count(self, namespace):
        return len(self.namespaces.get(namespace, {}))

    def upsert(self, records, namespace, batch_size=100):
        self.upsert_calls += 1
        store = self.namespaces.setdefault(namespace, {})
        for r in records:
            store[r.id] = r
        return len(records)

    def query(self, vector, top_k, namespace):
        def cosine(a, b):
            dot = sum(x * y for x, y in zip(a, b))
            norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
            return dot / norm if norm else 0.0

        scored = [
            (cosine(vector, r.values), r) for r in self.namespaces.get(namespace, {}).values()
        ]
        scored.sort(key=lambda pair: (-pair[0], pair[1].id))
        matches = []
        for score, r in scored[:top_k]:
            meta = dict(r.metadata)
            text = meta.pop("text", "")
            matches.append(Match(id=r.id, score=score, text=text, metadata=meta))
        return matches


class InMemoryDatabase:
    def __init__(self):
        self.indexes = {}
        self.create_calls = []

    def list_index_names(self):
        return list(self.indexes)

    def create_index(self, name, dimension, metric, cloud, region):
        self.create_calls.append(
            {"name": name, "dimension": dimension, "metric": metric, "cloud": cloud, "region": region}
        )
        self.indexes[name] = InMemoryIndex(name)

    def index(self, name):
        return self.indexes[name]


class FakeGenerator:
    def __init__(self, reply="generated answer"):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def alphabet_file(tmp_path):
    """A 26-character text document: three chunks at size 10, overlap 2."""
    path = tmp_path / "alphabet.txt"
    path.write_text("abcdefghijklmnopqrstuvwxyz", encoding="utf-8")
    return path


@pytest.fixture
def settings(alphabet_file):
    """Settings isolated from the environment and any local .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        pinecone_api_key="pc-test",
        index_name="demo-index",
        pdf_namespace="doc-ns",
        embedding_dimension=8,
        file_name=alphabet_file,
        chunk_size=10,
        chunk_overlap=2,
        top_k=3,
    )


@pytest.fixture
def index():
    return InMemoryIndex()
