"""Embedding index backed by a single JSON file.

The index owns the full set of :class:`EmbeddingRecord` objects in memory and
mirrors it to ``<project>/.docs/embeddings.json``:

- :meth:`EmbeddingIndex.build` embeds chunks batch by batch, replaces the
  in-memory set wholesale and rewrites the file.
- :meth:`EmbeddingIndex.query` loads the file lazily on first use and ranks
  every record by cosine similarity to the query.

The file is a plain JSON array (UTF-8, indented) so it stays diffable.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Iterable, List, Sequence

from .chunking import build_chunks
from .config import EMBEDDING_BATCH_SIZE, index_path_for
from .embeddings import Embedder, cosine_similarity
from .models import Chunk, EmbeddingRecord, SearchResult, SourceFile

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")

# Characters shown when no sentence matches the query.
_FALLBACK_CONTEXT_CHARS = 200


def extract_context(text: str, query: str) -> str:
    """Return the sentence of *text* containing the most query words.

    Query words are split on whitespace and compared lower-cased. When no
    sentence contains any query word the first 200 characters are returned.
    """
    query_words = [w for w in query.lower().split() if w]
    best_sentence = ""
    max_matches = 0

    for sentence in _SENTENCE_SPLIT_RE.split(text):
        lowered = sentence.lower()
        matches = sum(1 for word in query_words if word in lowered)
        if matches > max_matches:
            max_matches = matches
            best_sentence = sentence.strip()

    return best_sentence or text[:_FALLBACK_CONTEXT_CHARS] + "..."


class EmbeddingIndex:
    """In-memory vector index with a durable JSON mirror."""

    def __init__(
        self,
        embedder: Embedder,
        index_path: Path,
        batch_size: int = EMBEDDING_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.embedder = embedder
        self.index_path = Path(index_path)
        self.batch_size = batch_size
        self._records: List[EmbeddingRecord] = []
        self._lock = threading.Lock()

    @classmethod
    def for_project(cls, embedder: Embedder, project_path: Path, **kwargs) -> "EmbeddingIndex":
        return cls(embedder, index_path_for(project_path), **kwargs)

    @property
    def records(self) -> List[EmbeddingRecord]:
        return list(self._records)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self, chunks: Sequence[Chunk]) -> int:
        """Embed *chunks* in batches and replace the index with the result.

        A batch whose provider call fails is logged and left out; the
        remaining batches still run. Returns the number of records stored.
        """
        with self._lock:
            records: List[EmbeddingRecord] = []
            total_batches = (len(chunks) + self.batch_size - 1) // self.batch_size

            for batch_no, start in enumerate(range(0, len(chunks), self.batch_size), start=1):
                batch = chunks[start:start + self.batch_size]
                try:
                    vectors = self.embedder.embed([chunk.text for chunk in batch])
                    if len(vectors) != len(batch):
                        raise ValueError(
                            f"expected {len(batch)} embeddings, got {len(vectors)}"
                        )
                except Exception as exc:
                    logger.error(
                        "Error generating embeddings for batch %d/%d: %s",
                        batch_no, total_batches, exc,
                    )
                    continue

                records.extend(
                    EmbeddingRecord(
                        text=chunk.text,
                        embedding=list(vector),
                        file=chunk.file,
                        declaration_line=chunk.declaration_line,
                    )
                    for chunk, vector in zip(batch, vectors)
                )
                logger.info("Generated embeddings for batch %d/%d", batch_no, total_batches)

            self._records = records
            self._save()

        logger.info("Generated %d embeddings for %d chunks", len(records), len(chunks))
        return len(records)

    def generate_embeddings(self, files: Iterable[SourceFile]) -> int:
        """Chunk the scanned files and :meth:`build` the index from them."""
        return self.build(build_chunks(files))

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, text: str, limit: int = 10) -> List[SearchResult]:
        """Rank stored records against *text* and return the top *limit*.

        Provider errors while embedding the query propagate to the caller.
        """
        if not self._records:
            self.load()

        if not self._records:
            logger.warning("No embeddings available. Please generate embeddings first.")
            return []

        query_vector = self.embedder.embed([text])[0]
        scored = [
            (cosine_similarity(query_vector, record.embedding), record)
            for record in self._records
        ]
        # sorted() is stable, so equal scores keep insertion order
        scored = sorted(scored, key=lambda pair: pair[0], reverse=True)

        return [
            SearchResult(
                text=record.text,
                file=record.file,
                declaration_line=record.declaration_line,
                similarity=similarity,
                context=extract_context(record.text, text),
            )
            for similarity, record in scored[:max(limit, 0)]
        ]

    search = query

    def search_by_function(self, function_name: str) -> List[SearchResult]:
        return self.query(f"function {function_name}", 5)

    def search_by_class(self, class_name: str) -> List[SearchResult]:
        return self.query(f"class {class_name}", 5)

    def search_by_type(self, type_name: str) -> List[SearchResult]:
        return self.query(f"type {type_name}", 5)

    def find_similar_code(self, code_snippet: str) -> List[SearchResult]:
        return self.query(code_snippet, 10)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save(self) -> None:
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [record.to_dict() for record in self._records]
        tmp_path = self.index_path.with_suffix(self.index_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.index_path)

    def load(self) -> int:
        """Load records from disk; a missing or corrupt file loads nothing."""
        if not self.index_path.exists():
            return 0
        try:
            raw = json.loads(self.index_path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise ValueError("index file is not a JSON array")
            records = [EmbeddingRecord.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to load embeddings from %s: %s", self.index_path, exc)
            self._records = []
            return 0

        self._records = records
        logger.info("Loaded %d embeddings from cache", len(records))
        return len(records)

    def clear(self) -> None:
        """Empty memory and delete the durable file if present."""
        with self._lock:
            self._records = []
            if self.index_path.exists():
                self.index_path.unlink()

    def count(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return self.count()
