"""
Adapters over the vector database providers.

Both backends expose the same small surface:

    database.list_index_names() / create_index(...) / index(name)
    index.namespace_count(ns) / upsert(records, ns) / query(vector, top_k, ns)

Provider exceptions are raised unchanged; callers decide how to wrap them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

import chromadb
from pinecone import Pinecone, ServerlessSpec

from .config import Cloud, Metric
from .log import get_logger

logger = get_logger("vector_store")

# Metadata key holding the chunk text alongside each vector
TEXT_KEY = "text"


@dataclass
class VectorRecord:
    id: str
    values: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Match:
    id: str
    score: float | None
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def _batched(items: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _pop_text(metadata: Dict[str, Any] | None) -> tuple[str, Dict[str, Any]]:
    meta = dict(metadata or {})
    text = meta.pop(TEXT_KEY, "") or ""
    return text, meta


# --- Pinecone ---------------------------------------------------------------


class PineconeIndex:
    """Vector operations on one Pinecone index."""

    def __init__(self, index, name: str):
        self._index = index
        self.name = name

    def namespace_count(self, namespace: str) -> int:
        """
        Record count of `namespace` from the index statistics.
        Returns 0 when the namespace does not exist yet.
        """
        stats = self._index.describe_index_stats()
        namespaces = getattr(stats, "namespaces", None) or {}
        summary = namespaces.get(namespace)
        if summary is None:
            return 0
        if isinstance(summary, dict):
            return int(summary.get("vector_count") or 0)
        return int(getattr(summary, "vector_count", 0) or 0)

    def upsert(self, records: Sequence[VectorRecord], namespace: str, batch_size: int = 100) -> int:
        """Upsert records in batches; returns how many were sent."""
        sent = 0
        for batch in _batched(records, batch_size):
            self._index.upsert(
                vectors=[
                    {"id": r.id, "values": r.values, "metadata": r.metadata}
                    for r in batch
                ],
                namespace=namespace,
            )
            sent += len(batch)
            logger.debug(f"Upserted {sent}/{len(records)} vectors into {self.name}/{namespace}")
        return sent

    def query(self, vector: List[float], top_k: int, namespace: str) -> List[Match]:
        """Top-k matches for `vector`, best first."""
        resp = self._index.query(
            vector=vector,
            top_k=top_k,
            namespace=namespace,
            include_metadata=True,
        )
        matches: List[Match] = []
        for m in getattr(resp, "matches", None) or []:
            text, meta = _pop_text(m.metadata)
            matches.append(Match(id=m.id, score=m.score, text=text, metadata=meta))
        return matches


class PineconeDatabase:
    """Index management against a Pinecone project."""

    def __init__(self, client: Pinecone):
        self._client = client

    def list_index_names(self) -> List[str]:
        return list(self._client.list_indexes().names())

    def create_index(
        self,
        name: str,
        dimension: int,
        metric: Metric,
        cloud: Cloud,
        region: str,
    ) -> None:
        # Blocks until the serverless index is ready
        self._client.create_index(
            name=name,
            dimension=dimension,
            metric=Metric(metric).value,
            spec=ServerlessSpec(cloud=Cloud(cloud).value, region=region),
        )

    def index(self, name: str) -> PineconeIndex:
        return PineconeIndex(self._client.Index(name), name)


# --- Chroma (local persistent) ------------------------------------------------

# Chroma names its distance functions differently
_CHROMA_SPACES = {
    Metric.COSINE: "cosine",
    Metric.EUCLIDEAN: "l2",
    Metric.DOT_PRODUCT: "ip",
}

# Metadata key used to partition one Chroma collection into namespaces
NAMESPACE_KEY = "namespace"


def _scoped_id(namespace: str, record_id: str) -> str:
    # Chroma ids are unique per collection, so the namespace is part of the id
    return f"{namespace}:{record_id}"


class ChromaIndex:
    """
    One Chroma collection playing the role of an index.
    Namespaces are a metadata field filtered on every read, and each stored
    id is prefixed with its namespace so the same record can live in several.
    """

    def __init__(self, collection, name: str):
        self._collection = collection
        self.name = name

    def namespace_count(self, namespace: str) -> int:
        # Fetch only IDs to avoid pulling full docs/embeddings
        existing = self._collection.get(where={NAMESPACE_KEY: namespace}, include=[])
        return len(existing.get("ids") or [])

    def upsert(self, records: Sequence[VectorRecord], namespace: str, batch_size: int = 100) -> int:
        sent = 0
        for batch in _batched(records, batch_size):
            documents: List[str] = []
            metadatas: List[Dict[str, Any]] = []
            for r in batch:
                text, meta = _pop_text(r.metadata)
                meta[NAMESPACE_KEY] = namespace
                documents.append(text)
                metadatas.append(meta)

            self._collection.upsert(
                ids=[_scoped_id(namespace, r.id) for r in batch],
                embeddings=[r.values for r in batch],
                documents=documents,
                metadatas=metadatas,
            )
            sent += len(batch)
            logger.debug(f"Upserted {sent}/{len(records)} vectors into {self.name}/{namespace}")
        return sent

    def query(self, vector: List[float], top_k: int, namespace: str) -> List[Match]:
        if self._collection.count() == 0:
            return []

        raw = self._collection.query(
            query_embeddings=[vector],
            n_results=top_k,
            where={NAMESPACE_KEY: namespace},
            include=["documents", "metadatas", "distances"],
        )

        ids = (raw.get("ids") or [[]])[0]
        docs_lists = raw.get("documents") or [[]]
        metas_lists = raw.get("metadatas") or [[]]
        dists_lists = raw.get("distances") or [[]]

        docs = docs_lists[0] if docs_lists else [""] * len(ids)
        metadatas = metas_lists[0] if metas_lists else [{}] * len(ids)
        distances = dists_lists[0] if dists_lists else [None] * len(ids)

        prefix = _scoped_id(namespace, "")
        matches: List[Match] = []
        for vid, text, meta, dist in zip(ids, docs, metadatas, distances):
            meta = dict(meta or {})
            meta.pop(NAMESPACE_KEY, None)
            vid = vid.removeprefix(prefix)
            matches.append(Match(id=vid, score=dist, text=text or "", metadata=meta))
        return matches


class ChromaDatabase:
    """
    Local stand-in for the managed index, backed by a Chroma client.
    Cloud and region are accepted for interface parity and ignored.
    """

    def __init__(self, client):
        self._client = client

    @classmethod
    def persistent(cls, path) -> "ChromaDatabase":
        return cls(chromadb.PersistentClient(path=str(path)))

    def list_index_names(self) -> List[str]:
        # Older Chroma releases return names, newer ones Collection objects
        return [getattr(c, "name", c) for c in self._client.list_collections()]

    def create_index(
        self,
        name: str,
        dimension: int,
        metric: Metric,
        cloud: Cloud,
        region: str,
    ) -> None:
        self._client.create_collection(
            name=name,
            metadata={"hnsw:space": _CHROMA_SPACES[Metric(metric)], "dimension": dimension},
            embedding_function=None,
        )

    def index(self, name: str) -> ChromaIndex:
        collection = self._client.get_collection(name=name, embedding_function=None)
        return ChromaIndex(collection, name)
