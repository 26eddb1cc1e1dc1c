from pydantic import BaseModel, Field, computed_field
from typing import Optional, List

from .podcast import Podcast

class FavoriteMatch(BaseModel):
    """Similarity of one candidate to one favorite."""
    favorite: Podcast
    semantic_score: float
    topic_score: float
    score: float = Field(..., description="Combined score; may exceed 1.0 because of the topic boost.")

    @property
    def favorite_id(self) -> Optional[str]:
        return self.favorite.id

class ScoredCandidate(BaseModel):
    """Result of one ranking pass for a single candidate. Never persisted."""
    podcast: Podcast
    similarity_score: float = Field(..., description="Mean combined score across all favorites; used for ordering.")
    matches: List[FavoriteMatch] = Field(default_factory=list)
    best_match: Optional[FavoriteMatch] = None

class Recommendation(BaseModel):
    """A ranked, explained recommendation returned to the caller."""
    podcast: Podcast
    similarity_score: float = Field(..., description="Combined score of the best matching favorite.")
    semantic_score: float
    topic_score: float
    reason: str
    most_similar_to: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def match_percent(self) -> int:
        """similarity_score as a percentage, clamped to 0-100 for display."""
        return round(min(max(self.similarity_score, 0.0), 1.0) * 100)
