from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. When answering the question or responding, "
    "use the context provided, if it is provided and relevant."
)
DEFAULT_QUESTION = "What is the square root of 9?"


class RetrievalSettings(BaseModel):
    top_k: int = Field(default=2, ge=1)
    # Calibrated for FaissNoteStore, whose scores are cosine similarity in [-1, 1].
    similarity_cutoff: float = Field(default=0.5)
    max_context_notes: int = Field(default=2, ge=1)
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, min_length=1)
    default_question: str = Field(default=DEFAULT_QUESTION, min_length=1)

    model_config = {"frozen": True}


class AppConfig(BaseModel):
    data_dir: Path = Field(default=Path("data"))
    index_dir: Path = Field(default=Path("index"))
    embedding_model_name: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2"
    )
    openai_model: str = Field(default="gpt-4o-mini")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    chunk_size: int = Field(default=800, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(default="INFO")
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def data_dir_resolved(self) -> Path:
        return self.data_dir.resolve()

    @property
    def index_dir_resolved(self) -> Path:
        return self.index_dir.resolve()


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    If `path` is None, looks for `config.yaml` in the current working directory.
    Also loads environment variables from a `.env` file if present.
    """
    load_dotenv()

    if path is None:
        path = Path("config.yaml")

    if not path.exists():
        cfg = AppConfig()
    else:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        try:
            cfg = AppConfig(**raw)
        except ValidationError as e:
            raise SystemExit(f"Invalid configuration in {path}:\n{e}") from e

    if cfg.chunk_overlap >= cfg.chunk_size:
        raise SystemExit(
            f"Invalid configuration in {path}: chunk_overlap must be less than chunk_size"
        )

    cfg.data_dir_resolved.mkdir(parents=True, exist_ok=True)
    cfg.index_dir_resolved.mkdir(parents=True, exist_ok=True)
    return cfg


__all__ = ["AppConfig", "RetrievalSettings", "load_config", "DEFAULT_SYSTEM_PROMPT", "DEFAULT_QUESTION"]
