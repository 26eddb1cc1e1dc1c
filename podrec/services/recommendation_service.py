import logging
from typing import List, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..models.podcast import Podcast, Topic
from ..models.recommendation import FavoriteMatch, Recommendation, ScoredCandidate
from .similarity_service import SimilarityEngine, cosine_similarity, topic_similarity
from .text_processing import extract_topics, generate_match_reason

logger = logging.getLogger(__name__)

# Embedding input for podcasts that have no text at all
FALLBACK_TEXT = 'podcast content'

class RecommendationService:
    """Ranks candidate podcasts against a user's favorites and explains the matches."""

    def __init__(self, similarity_engine: SimilarityEngine, settings: Optional[Settings] = None):
        self.similarity_engine = similarity_engine
        self.settings = settings or get_settings()

    def combined_score(self, semantic_score: float, topic_score: float) -> float:
        """Blends semantic and topic similarity.

        The topic term is multiplied by WEIGHT_TOPIC_MATCH, so the result can
        exceed 1.0 when topic overlap is high. Clamp only for display.
        """
        return (semantic_score * self.settings.SEMANTIC_SHARE
                + topic_score * self.settings.WEIGHT_TOPIC_MATCH * self.settings.TOPIC_SHARE)

    async def _profile(self, podcasts: Sequence[Podcast]) -> List[Tuple[Podcast, List[float], List[Topic]]]:
        texts = [self.similarity_engine.weighted_text(p).strip() or FALLBACK_TEXT for p in podcasts]
        embeddings = await self.similarity_engine.embed_many(texts)
        topics = [extract_topics(p.text_description, self.settings.TOPICS_PER_PODCAST) for p in podcasts]
        return list(zip(podcasts, embeddings, topics))

    async def rank_candidates(self, favorites: Sequence[Podcast], candidates: Sequence[Podcast]) -> List[ScoredCandidate]:
        """Scores every candidate against every favorite.

        A candidate's `similarity_score` is the mean combined score over all
        favorites and decides the order; `best_match` is the single favorite
        with the highest combined score and is what gets reported.

        Returns:
            Scored candidates sorted by `similarity_score` descending (stable).
        """
        if not favorites or not candidates:
            logger.error("Invalid inputs to rank_candidates")
            return []

        favorite_profiles = await self._profile(favorites)
        candidate_profiles = await self._profile(candidates)

        ranked: List[ScoredCandidate] = []
        for candidate, candidate_embedding, candidate_topics in candidate_profiles:
            matches = []
            for favorite, favorite_embedding, favorite_topics in favorite_profiles:
                semantic_score = cosine_similarity(favorite_embedding, candidate_embedding)
                topic_score = topic_similarity(favorite_topics, candidate_topics)
                matches.append(FavoriteMatch(
                    favorite=favorite,
                    semantic_score=semantic_score,
                    topic_score=topic_score,
                    score=self.combined_score(semantic_score, topic_score),
                ))

            best_match = matches[0]
            for match in matches[1:]:
                if match.score > best_match.score:
                    best_match = match

            ranked.append(ScoredCandidate(
                podcast=candidate,
                similarity_score=sum(m.score for m in matches) / len(matches),
                matches=matches,
                best_match=best_match,
            ))

        ranked.sort(key=lambda scored: scored.similarity_score, reverse=True)
        return ranked

    async def generate_recommendations(self, favorites: Sequence[Podcast], candidates: Sequence[Podcast]) -> List[Recommendation]:
        """Ranked, explained recommendations (at most MAX_RECOMMENDATIONS).

        Never raises: missing inputs or any failure while ranking yield an
        empty list.
        """
        if not favorites or not candidates:
            logger.error("Missing required inputs for recommendations")
            return []

        try:
            ranked = await self.rank_candidates(favorites, candidates)
            if not ranked:
                return []

            recommendations = []
            for scored in ranked:
                best = scored.best_match
                if best is None or best.favorite is None:
                    continue
                recommendations.append(Recommendation(
                    podcast=scored.podcast,
                    similarity_score=best.score,
                    semantic_score=best.semantic_score,
                    topic_score=best.topic_score,
                    reason=generate_match_reason(scored.podcast, best.favorite, best.semantic_score, best.topic_score),
                    most_similar_to=best.favorite_id,
                ))

            return recommendations[:self.settings.MAX_RECOMMENDATIONS]
        except Exception as e:
            logger.exception(f"Error in generate_recommendations: {e}")
            return []
