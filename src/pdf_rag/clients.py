"""
Factories for the provider clients.

Every client is built here from Settings and handed to the pipeline
functions explicitly; nothing is cached at module level.
"""

from openai import OpenAI
from pinecone import Pinecone

from .config import Settings, VectorBackend
from .embeddings import OpenAIEmbedder
from .errors import ProviderError
from .llm import ChatGenerator
from .vector_store import ChromaDatabase, PineconeDatabase


def build_openai_client(settings: Settings) -> OpenAI:
    """
    Return an OpenAI client configured with the API key from settings.
    Retries are handled by the callers, so the SDK's own are disabled.
    """
    return OpenAI(
        api_key=settings.require("openai_api_key"),
        timeout=settings.request_timeout,
        max_retries=0,
    )


def build_vector_database(settings: Settings):
    """
    Connect to the configured vector backend.
    A missing key raises ConfigurationError; a client that cannot be
    constructed raises ProviderError.
    """
    backend = settings.vector_backend
    api_key = settings.require("pinecone_api_key") if backend == VectorBackend.PINECONE else None
    try:
        if backend == VectorBackend.CHROMA:
            settings.chroma_path.mkdir(parents=True, exist_ok=True)
            return ChromaDatabase.persistent(settings.chroma_path)
        return PineconeDatabase(Pinecone(api_key=api_key))
    except Exception as e:
        raise ProviderError(
            f"Could not connect to the {backend.value} vector database: {e}",
            operation="connect",
        ) from e


def build_embedder(settings: Settings, client: OpenAI) -> OpenAIEmbedder:
    return OpenAIEmbedder(
        client,
        model=settings.embedding_model,
        dimension=settings.embedding_dimension,
        batch_size=settings.embedding_batch_size,
        max_retries=settings.max_retries,
    )


def build_generator(settings: Settings, client: OpenAI) -> ChatGenerator:
    return ChatGenerator(
        client,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_output_tokens=settings.max_output_tokens,
        max_retries=settings.max_retries,
    )
