import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Protocol, Sequence

import numpy as np
from cachetools import TTLCache

from ..api.exceptions import APIClientError
from ..config import Settings, get_settings
from ..models.podcast import Podcast, Topic

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    def embed(self, text: str) -> List[float]:
        ...


def build_weights(settings: Settings) -> Dict[str, float]:
    return {
        'title': settings.WEIGHT_TITLE,
        'description': settings.WEIGHT_DESCRIPTION,
        'publisher': settings.WEIGHT_PUBLISHER,
        'topic_match': settings.WEIGHT_TOPIC_MATCH,
    }


def _repetitions(weight: float) -> int:
    return max(1, int(round(weight)))


def create_weighted_text(podcast: Optional[Podcast], weights: Optional[Dict[str, float]] = None) -> str:
    """Concatenates title, description and publisher, repeated by importance.

    With the default weights this is `title title desc desc desc publisher`.
    """
    if podcast is None:
        return ''
    weights = weights or build_weights(get_settings())
    parts = (
        [podcast.title or ''] * _repetitions(weights['title'])
        + [podcast.description or ''] * _repetitions(weights['description'])
        + [podcast.publisher or ''] * _repetitions(weights['publisher'])
    )
    return ' '.join(parts)


def _is_vector(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(x, (int, float)) and not isinstance(x, bool) for x in value
    )


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 for empty, mismatched or zero vectors."""
    if not _is_vector(vec1) or not _is_vector(vec2):
        return 0.0
    if not vec1 or not vec2 or len(vec1) != len(vec2):
        return 0.0

    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)
    norm_product = np.linalg.norm(a) * np.linalg.norm(b)
    if norm_product == 0:
        return 0.0
    return float(np.dot(a, b) / norm_product)


def topic_similarity(topics_a: Optional[Sequence[Topic]], topics_b: Optional[Sequence[Topic]]) -> float:
    """Share of A's topic mass that B also covers.

    For every term of A present in B, adds min(score_a, score_b), then divides
    by the total score of A. Not symmetric: it measures how well B covers A.
    """
    if not topics_a or not topics_b:
        return 0.0

    scores_a = {t.term: t.score for t in topics_a}
    scores_b = {t.term: t.score for t in topics_b}

    total_possible = sum(scores_a.values())
    match_score = sum(min(score, scores_b[term]) for term, score in scores_a.items() if term in scores_b)
    return match_score / total_possible if total_possible > 0 else 0.0


class SimilarityEngine:
    """Embeds podcast text through an external provider with a per-engine cache."""

    def __init__(self, embedding_client: EmbeddingProvider, settings: Optional[Settings] = None,
                 cache: Optional[TTLCache] = None):
        self.settings = settings or get_settings()
        self.embedding_client = embedding_client
        self.weights = build_weights(self.settings)
        self.cache = cache if cache is not None else TTLCache(
            maxsize=self.settings.EMBEDDING_CACHE_SIZE, ttl=self.settings.EMBEDDING_CACHE_TTL
        )
        # TTLCache is not thread-safe and embed() runs in worker threads
        self._lock = threading.Lock()

    def zero_vector(self) -> List[float]:
        return [0.0] * self.settings.EMBEDDING_DIMENSION

    def weighted_text(self, podcast: Podcast) -> str:
        return create_weighted_text(podcast, self.weights)

    def embed(self, text: str) -> List[float]:
        """Embedding of `text`, or a zero vector when the provider fails.

        Texts sharing their first EMBEDDING_CACHE_KEY_CHARS characters share a
        cache entry. Failures are logged and never cached.
        """
        if not text:
            return self.zero_vector()

        cache_key = text[:self.settings.EMBEDDING_CACHE_KEY_CHARS]
        with self._lock:
            cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            vector = self.embedding_client.embed(text[:self.settings.EMBEDDING_MAX_INPUT_CHARS])
        except APIClientError as e:
            logger.error(f"Error generating embedding: {e}")
            return self.zero_vector()
        except Exception as e:
            logger.exception(f"Unexpected error generating embedding: {e}")
            return self.zero_vector()

        if not vector or not _is_vector(vector):
            logger.warning("Invalid response from embedding provider")
            return self.zero_vector()

        with self._lock:
            self.cache[cache_key] = vector
        return vector

    async def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        """Embeds all texts concurrently, preserving order."""
        return list(await asyncio.gather(*(asyncio.to_thread(self.embed, text) for text in texts)))

    def clear_cache(self):
        with self._lock:
            self.cache.clear()
