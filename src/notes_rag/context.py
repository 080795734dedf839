from __future__ import annotations

import logging
from typing import Sequence

from .models import RetrievalContext, ScoredNote

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Selects which retrieved notes make it into the prompt."""

    def assemble(
        self,
        scored_notes: Sequence[ScoredNote],
        cutoff: float,
        max_notes: int,
    ) -> RetrievalContext:
        """
        Keep notes scoring strictly above `cutoff`, in the order given, and
        return at most `max_notes` of them.
        """
        if max_notes < 1:
            raise ValueError("max_notes must be a positive integer")

        passing = [s.note.text for s in scored_notes if s.score > cutoff]
        selected = tuple(passing[:max_notes])

        logger.debug(
            "Selected %d/%d notes (cutoff=%s, max_notes=%d)",
            len(selected),
            len(scored_notes),
            cutoff,
            max_notes,
        )
        return RetrievalContext(notes=selected)


__all__ = ["ContextAssembler"]
