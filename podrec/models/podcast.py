from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal

DEFAULT_TITLE = "Unknown Podcast"
DEFAULT_DESCRIPTION = "No description available"
DEFAULT_PUBLISHER = "Unknown Publisher"

class Podcast(BaseModel):
    """Standardized podcast record used throughout the recommendation pipeline."""
    id: Optional[str] = None
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    publisher: str = DEFAULT_PUBLISHER
    genre_ids: List[int] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None
    website_url: Optional[str] = None
    explicit: bool = False
    # Source fields outside the typed record (listennotes_url, total_episodes, ...)
    extra: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(validate_assignment=True, extra='forbid')

    @property
    def text_description(self) -> str:
        """Description for lexical features; empty when only the placeholder is present."""
        return '' if self.description == DEFAULT_DESCRIPTION else self.description

class Topic(BaseModel):
    """A TF-IDF weighted term of one document."""
    term: str
    score: float

    model_config = ConfigDict(frozen=True)

class SearchQuery(BaseModel):
    """Content search sent to the catalog while collecting candidates."""
    q: str
    type: Literal["podcast", "episode"] = "podcast"
    sort_by_date: int = 0
    page_size: int = 20
    only_in: str = "description"
    safe_mode: int = 0

    model_config = ConfigDict(frozen=True)

    def to_params(self) -> Dict[str, Any]:
        """Search parameters without the query string itself."""
        return self.model_dump(exclude={"q"})
