from __future__ import annotations

import logging
from typing import List, Optional

from .config import AppConfig, RetrievalSettings
from .context import ContextAssembler
from .embeddings import EmbeddingClient, SentenceTransformerEmbeddingClient
from .errors import EmbeddingFailure, ValidationFailure
from .generation import GenerationClient, OpenAIGenerationClient
from .index import FaissNoteStore, NoteStore
from .models import Note
from .prompt import PromptBuilder

logger = logging.getLogger(__name__)


class RagOrchestrator:
    """
    Runs the two user-facing operations over injected collaborators.

    Every stage runs in sequence and the first failure ends the request.
    Nothing is retried here.
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        store: NoteStore,
        generator: GenerationClient,
        settings: Optional[RetrievalSettings] = None,
        assembler: Optional[ContextAssembler] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.generator = generator
        self.settings = settings or RetrievalSettings()
        self.assembler = assembler or ContextAssembler()
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def _embed_one(self, text: str) -> List[float]:
        vectors = await self.embedder.embed([text])
        if len(vectors) != 1:
            raise EmbeddingFailure(f"Expected one embedding, got {len(vectors)}")
        return vectors[0]

    async def ingest_note(self, text: Optional[str]) -> Note:
        if not text:
            raise ValidationFailure("Missing text")

        vector = await self._embed_one(text)
        note = await self.store.insert(text, vector)
        logger.info("Stored note %s (%d chars)", note.id, len(text))
        return note

    async def answer_query(
        self,
        question: Optional[str],
        settings: Optional[RetrievalSettings] = None,
    ) -> str:
        settings = settings or self.settings

        if not question:
            question = settings.default_question
            logger.info("No question given, using default: %r", question)

        vector = await self._embed_one(question)

        scored_notes = await self.store.search(vector, settings.top_k)
        for scored in scored_notes:
            logger.debug("Retrieved %r (score=%.3f)", scored.note.text, scored.score)

        context = self.assembler.assemble(
            scored_notes,
            settings.similarity_cutoff,
            settings.max_context_notes,
        )
        prompt = self.prompt_builder.build(settings.system_prompt, context, question)
        logger.info(
            "Answering with %d context notes (%d retrieved)", len(context), len(scored_notes)
        )

        return await self.generator.generate(prompt)


def build_orchestrator(cfg: AppConfig) -> RagOrchestrator:
    """Wire the default backends from configuration. Build once and reuse."""
    return RagOrchestrator(
        embedder=SentenceTransformerEmbeddingClient(cfg.embedding_model_name),
        store=FaissNoteStore(cfg.index_dir_resolved),
        generator=OpenAIGenerationClient(cfg.openai_model, temperature=cfg.temperature),
        settings=cfg.retrieval,
    )


__all__ = ["RagOrchestrator", "build_orchestrator"]
