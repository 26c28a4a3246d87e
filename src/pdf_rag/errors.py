"""Exception classes for the PDF RAG assistant."""

from typing import Any, Dict, Optional


class RagError(Exception):
    """Base exception for all assistant errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary, e.g. for structured logs."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


class ConfigurationError(RagError):
    """A required setting is missing or invalid."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if setting:
            error_details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=error_details)


class ProviderError(RagError):
    """A vector database call (list, create, stats) failed."""

    def __init__(
        self,
        message: str = "Vector database operation failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(message=message, code="PROVIDER_ERROR", details=error_details)


class IngestionError(RagError):
    """Loading, splitting, embedding or upserting a document failed."""

    def __init__(
        self,
        message: str = "Document ingestion failed",
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if source:
            error_details["source"] = source
        super().__init__(message=message, code="INGESTION_ERROR", details=error_details)


class QueryError(RagError):
    """Embedding, searching or generating an answer failed."""

    def __init__(
        self,
        message: str = "Query failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="QUERY_ERROR", details=details)


class DimensionMismatchError(RagError):
    """An embedding does not have the dimension the index was declared with."""

    def __init__(self, expected: int, actual: int, model: Optional[str] = None):
        details: Dict[str, Any] = {"expected_dimension": expected, "actual_dimension": actual}
        if model:
            details["model"] = model
        super().__init__(
            message=f"Embedding dimension mismatch: expected {expected}, got {actual}",
            code="DIMENSION_MISMATCH",
            details=details,
        )
