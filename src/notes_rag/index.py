from __future__ import annotations

import asyncio
import logging
import pickle
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

import faiss
import numpy as np

from .errors import StoreReadFailure, StoreWriteFailure
from .models import Note, ScoredNote

logger = logging.getLogger(__name__)

INDEX_FILENAME = "notes.index"
NOTES_FILENAME = "notes.pkl"


class NoteStore(ABC):
    """Persists notes with their embeddings and answers similarity searches."""

    @abstractmethod
    async def insert(self, text: str, embedding: Sequence[float]) -> Note:
        """Store a note; raises StoreWriteFailure if it cannot be persisted."""

    @abstractmethod
    async def search(self, query_embedding: Sequence[float], top_k: int) -> List[ScoredNote]:
        """
        Return at most `top_k` notes ordered by descending score.

        An empty store yields an empty list. Backend errors raise
        StoreReadFailure.
        """


def _as_matrix(vector: Sequence[float]) -> np.ndarray:
    matrix = np.asarray([vector], dtype="float32")
    faiss.normalize_L2(matrix)
    return matrix


class FaissNoteStore(NoteStore):
    """
    FAISS flat inner-product index over L2-normalised embeddings.

    Scores are cosine similarity in [-1, 1]; higher is more similar. When
    `index_dir` is given the index and note records are written there after
    every insert and loaded back on construction.
    """

    def __init__(self, index_dir: Optional[Path] = None) -> None:
        self.index_dir = index_dir
        self._lock = threading.Lock()
        self._index: Optional[faiss.IndexFlatIP] = None
        self._notes: List[Note] = []
        if index_dir is not None:
            self._load()

    def __len__(self) -> int:
        return len(self._notes)

    @property
    def dimension(self) -> Optional[int]:
        return None if self._index is None else self._index.d

    def _load(self) -> None:
        faiss_path = self.index_dir / INDEX_FILENAME
        meta_path = self.index_dir / NOTES_FILENAME
        if not faiss_path.exists() or not meta_path.exists():
            return

        logger.info("Loading FAISS index from: %s", faiss_path)
        try:
            index = faiss.read_index(str(faiss_path))
            with meta_path.open("rb") as f:
                notes: List[Note] = pickle.load(f)
        except Exception as exc:  # faiss raises RuntimeError, pickle raises UnpicklingError and friends
            raise StoreReadFailure(f"Failed to load notes from {self.index_dir}: {exc}") from exc

        if index.ntotal != len(notes):
            raise StoreReadFailure(
                f"Index at {self.index_dir} is inconsistent: "
                f"{index.ntotal} vectors but {len(notes)} notes"
            )
        self._index = index
        self._notes = notes
        logger.info("Loaded %d notes", len(notes))

    def _save(self) -> None:
        self.index_dir.mkdir(parents=True, exist_ok=True)
        faiss.write_index(self._index, str(self.index_dir / INDEX_FILENAME))
        with (self.index_dir / NOTES_FILENAME).open("wb") as f:
            pickle.dump(self._notes, f)

    def _insert(self, text: str, embedding: Sequence[float]) -> Note:
        with self._lock:
            if self._index is None:
                self._index = faiss.IndexFlatIP(len(embedding))
            if len(embedding) != self._index.d:
                raise StoreWriteFailure(
                    f"Embedding has {len(embedding)} dimensions, index expects {self._index.d}"
                )

            note = Note(id=uuid.uuid4().hex, text=text, embedding=tuple(float(x) for x in embedding))
            self._index.add(_as_matrix(embedding))
            self._notes.append(note)

            if self.index_dir is not None:
                try:
                    self._save()
                except Exception as exc:  # faiss raises RuntimeError, pickle/open raise OSError
                    self._index.remove_ids(np.array([self._index.ntotal - 1], dtype="int64"))
                    self._notes.pop()
                    raise StoreWriteFailure(f"Failed to persist note: {exc}") from exc

            return note

    def _search(self, query_embedding: Sequence[float], top_k: int) -> List[ScoredNote]:
        with self._lock:
            if self._index is None or self._index.ntotal == 0:
                return []
            if len(query_embedding) != self._index.d:
                raise StoreReadFailure(
                    f"Query has {len(query_embedding)} dimensions, index expects {self._index.d}"
                )

            scores, indices = self._index.search(_as_matrix(query_embedding), top_k)

            results: List[ScoredNote] = []
            for score, idx in zip(scores[0], indices[0]):
                if idx < 0 or idx >= len(self._notes):
                    continue
                results.append(ScoredNote(note=self._notes[int(idx)], score=float(score)))
            return results

    async def insert(self, text: str, embedding: Sequence[float]) -> Note:
        try:
            return await asyncio.to_thread(self._insert, text, embedding)
        except StoreWriteFailure:
            raise
        except Exception as exc:
            raise StoreWriteFailure(f"Failed to insert note: {exc}") from exc

    async def search(self, query_embedding: Sequence[float], top_k: int) -> List[ScoredNote]:
        if top_k < 1:
            raise ValueError("top_k must be a positive integer")
        try:
            return await asyncio.to_thread(self._search, query_embedding, top_k)
        except StoreReadFailure:
            raise
        except Exception as exc:
            raise StoreReadFailure(f"Similarity search failed: {exc}") from exc


__all__ = ["NoteStore", "FaissNoteStore"]
