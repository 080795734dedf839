from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    VALIDATION = "validation"
    EMBEDDING = "embedding"
    STORE_WRITE = "store_write"
    STORE_READ = "store_read"
    GENERATION = "generation"


class NotesRagError(Exception):
    """Base class for every failure the pipeline reports to its caller."""

    kind: FailureKind

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ValidationFailure(NotesRagError):
    """Required input was missing or empty."""

    kind = FailureKind.VALIDATION


class EmbeddingFailure(NotesRagError):
    kind = FailureKind.EMBEDDING


class StoreWriteFailure(NotesRagError):
    kind = FailureKind.STORE_WRITE


class StoreReadFailure(NotesRagError):
    kind = FailureKind.STORE_READ


class GenerationFailure(NotesRagError):
    kind = FailureKind.GENERATION


__all__ = [
    "FailureKind",
    "NotesRagError",
    "ValidationFailure",
    "EmbeddingFailure",
    "StoreWriteFailure",
    "StoreReadFailure",
    "GenerationFailure",
]
