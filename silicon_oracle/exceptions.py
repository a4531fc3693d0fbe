"""
Error taxonomy shared by the indexing, retrieval and generation layers.
"""

from __future__ import annotations

from typing import Any, Dict


class OracleError(Exception):
    """Base exception for the oracle service."""

    def __init__(self, message: str, component: str = "unknown", details: Dict[str, Any] | None = None) -> None:
        self.message = message
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "details": self.details,
        }


class MalformedInput(OracleError):
    """A lore document cannot be parsed or flattened."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, component="flattener", details=details)


class LoreSourceError(OracleError):
    """The lore collection as a whole cannot be read."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, component="loader", details=details)


class EmbeddingServiceError(OracleError):
    """Embedding backend unreachable or rejected the request."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, component="embeddings", details=details)


class RetrievalUnavailable(OracleError):
    """No context can be retrieved for this request; callers continue without it."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, component="retriever", details=details)


class ExternalServiceError(OracleError):
    """Failure of an external capability that carries an HTTP-style status."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        component: str = "external",
        details: Dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, component=component, details=details)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["status_code"] = self.status_code
        return payload


class GenerationServiceError(ExternalServiceError):
    def __init__(self, message: str, status_code: int = 500, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=status_code, component="generation", details=details)


class SpeechServiceError(ExternalServiceError):
    def __init__(self, message: str, status_code: int = 500, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=status_code, component="speech", details=details)


__all__ = [
    "OracleError",
    "MalformedInput",
    "LoreSourceError",
    "EmbeddingServiceError",
    "RetrievalUnavailable",
    "ExternalServiceError",
    "GenerationServiceError",
    "SpeechServiceError",
]
