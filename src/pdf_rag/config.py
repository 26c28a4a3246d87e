from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Metric(str, Enum):
    """Similarity metrics supported by the vector index."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT_PRODUCT = "dotproduct"

    @classmethod
    def _missing_(cls, value):
        # Accept "dot-product", "dot_product", " Cosine " and similar spellings
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "").replace("_", "")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class Cloud(str, Enum):
    """Serverless cloud providers for the vector index."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class VectorBackend(str, Enum):
    PINECONE = "pinecone"
    CHROMA = "chroma"


class Settings(BaseSettings):
    # API keys / models
    openai_api_key: str | None = None
    pinecone_api_key: str | None = None
    llm_model: str = "gpt-4.1-mini"
    llm_temperature: float = 0.1
    max_output_tokens: int = 800
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536
    embedding_batch_size: int = 64

    # Vector index
    vector_backend: VectorBackend = VectorBackend.PINECONE
    chroma_path: Path = Path("data/vector_store")
    index_name: str = "pdf-index"
    index_metric: Metric = Metric.COSINE
    index_cloud: Cloud = Cloud.AWS
    index_region: str = "us-east-1"
    pdf_namespace: str = "pdf-namespace"
    upsert_batch_size: int = 100

    # Source document and splitting
    file_name: Path = Path("data/raw/document.pdf")
    chunk_size: int = 1000
    chunk_overlap: int = 100
    top_k: int = 3

    # Transport
    max_retries: int = 3
    request_timeout: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Where to read env vars / .env from
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("index_metric", mode="before")
    @classmethod
    def _parse_metric(cls, value):
        return Metric(value) if isinstance(value, str) else value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator(
        "embedding_dimension",
        "embedding_batch_size",
        "upsert_batch_size",
        "chunk_size",
        "top_k",
        "max_retries",
        "max_output_tokens",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if not self.index_name.strip():
            raise ValueError("index_name must be non-empty")
        if not self.pdf_namespace.strip():
            raise ValueError("pdf_namespace must be non-empty")
        return self

    def require(self, name: str) -> str:
        """
        Return a credential/setting that must be present for the current run.
        Raises ConfigurationError when it is unset or blank.
        """
        value = getattr(self, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(f"{name.upper()} is required but not set", setting=name)
        return value


@lru_cache
def get_settings() -> Settings:
    """
    Load settings once per process from the environment and .env.
    Validation failures surface as ConfigurationError.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid settings",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
