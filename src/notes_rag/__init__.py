"""
Notes RAG.

Small, explicit retrieval-augmented question answering over short notes.
"""

__all__ = [
    "cli",
    "config",
    "context",
    "embeddings",
    "errors",
    "generation",
    "index",
    "ingest",
    "models",
    "pipeline",
    "prompt",
    "query",
]
