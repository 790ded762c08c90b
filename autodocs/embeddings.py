"""Embedding providers and vector utilities.

Two providers implement the :class:`Embedder` interface:

========== ============================== ====== ===============================
Key        Backend                        Dim    Notes
========== ============================== ====== ===============================
openai     OpenAI ``/v1/embeddings``      1536   ``text-embedding-3-small``
hash       (none)                          256   Deterministic, offline, tests
========== ============================== ====== ===============================

Both return one vector per input text, all of the same dimensionality.
"""

from __future__ import annotations

import logging
import math
import re
from hashlib import blake2b
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests

from . import config

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

DEFAULT_TIMEOUT = 60


class EmbeddingError(Exception):
    """Raised when the embedding provider cannot return vectors."""


class Embedder(Protocol):
    """Capability interface: one fixed-length vector per input text."""

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        ...


# ===================================================================
# OpenAIEmbedder  (network client)
# ===================================================================

class OpenAIEmbedder:
    """Client for the OpenAI embeddings endpoint (or a compatible gateway)."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        endpoint: str = "https://api.openai.com/v1/embeddings",
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        if not self.api_key:
            raise EmbeddingError("OpenAI API key is required for embeddings")

        try:
            response = self.session.post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={"model": self.model, "input": list(texts)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()["data"]
        except (requests.RequestException, ValueError, KeyError) as exc:
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        items = sorted(data, key=lambda item: item.get("index", 0))
        vectors = [list(map(float, item["embedding"])) for item in items]
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        return vectors


# ===================================================================
# HashEmbeddingModel  (offline, deterministic)
# ===================================================================

class HashEmbeddingModel:
    """Deterministic token-hashing embedder with no network access.

    Provides keyword-level similarity only. Used for tests and for offline
    runs selected with ``provider = "hash"`` in ``[embeddings]``.
    """

    def __init__(self, dim: int = 256) -> None:
        self.dim = dim

    def embed_text(self, text: str) -> List[float]:
        vec = [0.0] * self.dim
        tokens = _TOKEN_RE.findall(text.lower())
        if not tokens:
            return vec
        for token in tokens:
            digest = blake2b(token.encode("utf-8"), digest_size=8).digest()
            idx = int.from_bytes(digest[:4], "big") % self.dim
            sign = 1.0 if (digest[4] & 1) == 0 else -1.0
            vec[idx] += sign
        return _l2_normalize(vec)

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        return [self.embed_text(text) for text in texts]


# ===================================================================
# Factory
# ===================================================================

def get_embedder(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> Embedder:
    """Return the configured embedder.

    Resolution order for each setting: explicit argument, then the
    ``[embeddings]`` section of ``~/.autodocs/config.toml``, then defaults
    (``openai`` / ``text-embedding-3-small``).
    """
    provider = (provider or config.EMBEDDING_PROVIDER).lower()

    if provider == "hash":
        return HashEmbeddingModel()

    if provider != "openai":
        logger.warning("Unknown embedding provider '%s'; using openai.", provider)

    return OpenAIEmbedder(
        api_key=config.resolve_api_key(api_key),
        model=model or config.EMBEDDING_MODEL,
        endpoint=config.EMBEDDING_ENDPOINT,
    )


# ===================================================================
# Utility
# ===================================================================

def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity between two vectors.

    Returns a value in ``[-1, 1]``. Empty, zero-norm or mismatched-length
    vectors return ``0.0``.
    """
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def _l2_normalize(vec: List[float]) -> List[float]:
    """Return *vec* scaled to unit length; a zero vector is returned unchanged."""
    norm = math.sqrt(sum(v * v for v in vec))
    if norm < 1e-12:
        return vec
    return [v / norm for v in vec]


def describe_embedder(embedder: Any) -> Dict[str, Any]:
    """Small diagnostic dict used by ``autodocs stats``."""
    return {
        "provider": "hash" if isinstance(embedder, HashEmbeddingModel) else "openai",
        "model": getattr(embedder, "model", "hash"),
        "dim": getattr(embedder, "dim", None),
    }
