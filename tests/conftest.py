"""
Pytest configuration and fixtures.
Fakes stand in for the embedding and chat models so the pipeline runs offline.
"""

import hashlib
import re
from typing import List, Optional, Sequence

import pytest
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from openai.types.chat.chat_completion import Choice

from notes_rag.config import RetrievalSettings
from notes_rag.embeddings import EmbeddingClient
from notes_rag.generation import GenerationClient
from notes_rag.index import FaissNoteStore
from notes_rag.models import Note, Prompt, ScoredNote
from notes_rag.pipeline import RagOrchestrator


class BagOfWordsEmbeddingClient(EmbeddingClient):
    """Hashes lowercase tokens into a fixed number of buckets."""

    def __init__(self, size: int = 64):
        super().__init__()
        self.size = size
        self.calls: List[List[str]] = []

    def vector(self, text: str) -> List[float]:
        vec = [0.0] * self.size
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % self.size
            vec[bucket] += 1.0
        return vec

    async def _embed(self, texts: List[str]) -> Sequence[Sequence[float]]:
        self.calls.append(list(texts))
        return [self.vector(t) for t in texts]


class ScriptedEmbeddingClient(EmbeddingClient):
    """Returns queued responses, or raises queued exceptions, one per call."""

    def __init__(self, *responses):
        super().__init__()
        self.responses = list(responses)

    async def _embed(self, texts: List[str]) -> Sequence[Sequence[float]]:
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingGenerationClient(GenerationClient):
    def __init__(self, answer: str = "4"):
        self.answer = answer
        self.prompts: List[Prompt] = []

    async def generate(self, prompt: Prompt) -> str:
        self.prompts.append(prompt)
        return self.answer


class StaticNoteStore(FaissNoteStore):
    """In-memory store whose search results are fixed up front."""

    def __init__(self, results: Optional[List[ScoredNote]] = None):
        super().__init__()
        self.results = results or []

    async def search(self, query_embedding, top_k):
        return self.results[:top_k]


def make_completion(content: Optional[str]) -> ChatCompletion:
    return ChatCompletion(
        id="chatcmpl-test",
        object="chat.completion",
        created=0,
        model="gpt-4o-mini",
        choices=[
            Choice(
                index=0,
                finish_reason="stop",
                message=ChatCompletionMessage(role="assistant", content=content),
            )
        ],
    )


def scored(text: str, score: float) -> ScoredNote:
    return ScoredNote(note=Note(id=text, text=text, embedding=(1.0,)), score=score)


@pytest.fixture
def embedder() -> BagOfWordsEmbeddingClient:
    return BagOfWordsEmbeddingClient()


@pytest.fixture
def store() -> FaissNoteStore:
    return FaissNoteStore()


@pytest.fixture
def generator() -> RecordingGenerationClient:
    return RecordingGenerationClient()


@pytest.fixture
def settings() -> RetrievalSettings:
    return RetrievalSettings(similarity_cutoff=0.5)


@pytest.fixture
def orchestrator(embedder, store, generator, settings) -> RagOrchestrator:
    return RagOrchestrator(embedder=embedder, store=store, generator=generator, settings=settings)
