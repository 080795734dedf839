from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Tuple

EmbeddingVector = List[float]

Role = Literal["system", "user"]


@dataclass(frozen=True)
class Note:
    id: str
    text: str
    embedding: Tuple[float, ...]


@dataclass(frozen=True)
class ScoredNote:
    note: Note
    score: float


@dataclass(frozen=True)
class RetrievalContext:
    """Note texts selected for a prompt, most relevant first."""

    notes: Tuple[str, ...] = ()

    HEADER = "Context:"

    @property
    def is_empty(self) -> bool:
        return len(self.notes) == 0

    def __len__(self) -> int:
        return len(self.notes)

    def render(self) -> str:
        if self.is_empty:
            return ""
        lines = [self.HEADER]
        lines.extend(f"- {text}" for text in self.notes)
        return "\n".join(lines)


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class Prompt:
    messages: Tuple[ChatMessage, ...]

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def roles(self) -> List[str]:
        return [m.role for m in self.messages]

    def as_openai_messages(self) -> List[dict]:
        return [{"role": m.role, "content": m.content} for m in self.messages]


__all__ = [
    "EmbeddingVector",
    "Note",
    "ScoredNote",
    "RetrievalContext",
    "ChatMessage",
    "Prompt",
]
