import hashlib
from pathlib import Path
from typing import Any, Dict, List, Sequence

from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document
from langchain_text_splitters import CharacterTextSplitter

from .config import Settings
from .errors import ConfigurationError, IngestionError, ProviderError
from .index import get_or_create_index
from .log import get_logger
from .vector_store import TEXT_KEY, VectorRecord

logger = get_logger("ingest")


def load_docs(path: Path | str) -> Sequence[Document]:
    """
    Load one source file into LangChain Document objects.
    PDFs yield one Document per page; .txt files yield a single Document.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Source document not found: {path}")

    if path.suffix.lower() == ".txt":
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            text = path.read_text(errors="ignore")
        return [Document(page_content=text, metadata={"source": str(path), "page": 0})]

    return PyPDFLoader(str(path)).load()


def split_docs(
    docs: Sequence[Document],
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> Sequence[Document]:
    """
    Chunk documents with a fixed-size character window.

    Each chunk after the first starts `chunk_size - chunk_overlap` characters
    after the previous one, so consecutive chunks of a page share exactly
    `chunk_overlap` characters. Whitespace is kept so the overlap is exact.
    """
    if chunk_size <= 0:
        raise ConfigurationError("chunk_size must be positive", setting="chunk_size")
    if not 0 <= chunk_overlap < chunk_size:
        raise ConfigurationError(
            "chunk_overlap must be >= 0 and smaller than chunk_size",
            setting="chunk_overlap",
        )

    splitter = CharacterTextSplitter(
        separator="",
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        strip_whitespace=False,
        add_start_index=True,
    )
    return splitter.split_documents(docs)


def _clean_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    # Vector stores only accept scalar metadata values
    clean: Dict[str, Any] = {}
    for key, value in metadata.items():
        if isinstance(value, (str, int, float, bool)):
            clean[key] = value
    return clean


def _record_id(chunk: Document) -> str:
    meta = chunk.metadata
    key = f"{meta.get('source', '')}:{meta.get('page', '')}:{meta.get('start_index', '')}:{chunk.page_content}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


def build_records(chunks: Sequence[Document], vectors: Sequence[List[float]]) -> List[VectorRecord]:
    """Pair each chunk with its vector; the chunk text travels in metadata."""
    records: List[VectorRecord] = []
    for chunk, vector in zip(chunks, vectors, strict=True):
        metadata = _clean_metadata(chunk.metadata)
        metadata[TEXT_KEY] = chunk.page_content
        records.append(VectorRecord(id=_record_id(chunk), values=list(vector), metadata=metadata))
    return records


def should_ingest(index, namespace: str) -> bool:
    """
    Decide whether the namespace still needs the document.

    Returns False when the namespace already holds at least one vector,
    True when it is missing or empty. Failing to read the statistics raises
    ProviderError; the caller must not ingest in that case.
    """
    try:
        count = index.namespace_count(namespace)
    except Exception as e:
        logger.error(f'Error reading stats for namespace "{namespace}": {e}')
        raise ProviderError(
            f"Could not read index statistics: {e}",
            operation="describe_index_stats",
            details={"namespace": namespace},
        ) from e

    if count > 0:
        logger.info(f'Namespace "{namespace}" already holds {count} vectors; skipping ingestion.')
        return False
    return True


def ingest_document(
    path: Path | str,
    *,
    index,
    embedder,
    namespace: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
    batch_size: int = 100,
) -> int:
    """
    Load, split, embed and upsert one document into `namespace`.

    All chunks are embedded before anything is upserted, so a dimension
    mismatch never leaves a half-written namespace. A failure during the
    upsert itself is not rolled back.

    Returns the number of chunks upserted.
    """
    source = str(path)
    try:
        docs = load_docs(path)
        logger.info(f"Loaded {len(docs)} pages from {source}")

        chunks = split_docs(docs, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        logger.info(f"Split into {len(chunks)} chunks (size={chunk_size}, overlap={chunk_overlap})")
        if not chunks:
            return 0

        vectors = embedder.embed_documents([c.page_content for c in chunks])
        records = build_records(chunks, vectors)

        upserted = index.upsert(records, namespace=namespace, batch_size=batch_size)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(f"Error ingesting {source}: {e}")
        raise IngestionError(f"Could not ingest {source}: {e}", source=source) from e

    logger.info(f'PDF processed and stored in namespace "{namespace}" ({upserted} vectors).')
    return upserted


def provision_index(settings: Settings, database):
    """Get or create the configured index and return its handle."""
    return get_or_create_index(
        database,
        settings.index_name,
        dimension=settings.embedding_dimension,
        metric=settings.index_metric,
        cloud=settings.index_cloud,
        region=settings.index_region,
    )


def ingest_if_needed(settings: Settings, *, index, embedder) -> int:
    """Ingest the configured file unless its namespace is already populated."""
    if not should_ingest(index, settings.pdf_namespace):
        return 0

    return ingest_document(
        settings.file_name,
        index=index,
        embedder=embedder,
        namespace=settings.pdf_namespace,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        batch_size=settings.upsert_batch_size,
    )


def initialize_vector_store(settings: Settings, *, database, embedder) -> int:
    """
    Provision the index, then ingest the configured file unless its
    namespace is already populated.

    Returns the number of chunks ingested (0 when ingestion was skipped).
    """
    index = provision_index(settings, database)
    return ingest_if_needed(settings, index=index, embedder=embedder)
