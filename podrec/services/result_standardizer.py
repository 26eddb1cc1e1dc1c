import logging
import abc
from typing import Dict, Any, List, Optional, Union

from ..api.exceptions import APIParsingError
from ..models.podcast import Podcast, DEFAULT_TITLE, DEFAULT_DESCRIPTION, DEFAULT_PUBLISHER

logger = logging.getLogger(__name__)

# --- Source field names, in lookup order, for each standardized field ---
ID_FIELDS = ("id",)
TITLE_FIELDS = ("title", "title_original")
DESCRIPTION_FIELDS = ("description", "description_original")
PUBLISHER_FIELDS = ("publisher", "publisher_original")
THUMBNAIL_FIELDS = ("thumbnail", "thumbnail_url", "image")
WEBSITE_FIELDS = ("website", "website_url")
EXPLICIT_FIELDS = ("explicit_content", "explicit")
GENRE_FIELD = "genre_ids"
EXTRA_FIELD = "extra"

CONSUMED_FIELDS = {
    *ID_FIELDS, *TITLE_FIELDS, *DESCRIPTION_FIELDS, *PUBLISHER_FIELDS,
    *THUMBNAIL_FIELDS, *WEBSITE_FIELDS, *EXPLICIT_FIELDS, GENRE_FIELD, EXTRA_FIELD,
}

RawPodcast = Union[Dict[str, Any], Podcast]


def _first_present(result: Dict[str, Any], fields, default=None):
    """Returns the first truthy value among `fields`, else `default`."""
    for field in fields:
        value = result.get(field)
        if value:
            return value
    return default


def _clean_genre_ids(raw_genres: Any) -> List[int]:
    if not isinstance(raw_genres, (list, tuple, set)):
        return []
    genre_ids: List[int] = []
    for genre in raw_genres:
        if isinstance(genre, bool):
            continue
        try:
            genre_id = int(genre)
        except (TypeError, ValueError):
            continue
        if genre_id not in genre_ids:
            genre_ids.append(genre_id)
    return genre_ids


class BaseResultMapper(abc.ABC):
    """Abstract base class for mapping catalog results to `Podcast` records."""
    @abc.abstractmethod
    def map_to_podcast(self, result: RawPodcast) -> Optional[Podcast]:
        """Maps a single catalog result to a Podcast."""
        pass

    def map_results(self, results: Optional[List[RawPodcast]]) -> List[Podcast]:
        """Maps a list of catalog results, skipping the ones that cannot be parsed."""
        podcasts = []
        for result in results or []:
            try:
                podcast = self.map_to_podcast(result)
                if podcast:
                    podcasts.append(podcast)
            except APIParsingError as e:
                logger.warning(f"Skipping result due to parsing error: {e}. Raw result: {result}")
        return podcasts


class ListenNotesResultMapper(BaseResultMapper):
    """Maps Listen Notes podcast objects (search, best_podcasts, recommendations) to `Podcast`.

    Mapping is idempotent: a `Podcast`, or its `model_dump()`, maps to an equal `Podcast`.
    """
    def map_to_podcast(self, result: RawPodcast) -> Optional[Podcast]:
        if isinstance(result, Podcast):
            result = result.model_dump()
        if not isinstance(result, dict):
            logger.warning(f"Invalid Listen Notes result format received: {result}")
            return None

        try:
            api_id = result.get('id')
            extra = dict(result.get(EXTRA_FIELD) or {})
            extra.update({k: v for k, v in result.items() if k not in CONSUMED_FIELDS})
            return Podcast(
                id=str(api_id) if api_id not in (None, "") else None,
                title=str(_first_present(result, TITLE_FIELDS, DEFAULT_TITLE)),
                description=str(_first_present(result, DESCRIPTION_FIELDS, DEFAULT_DESCRIPTION)),
                publisher=str(_first_present(result, PUBLISHER_FIELDS, DEFAULT_PUBLISHER)),
                genre_ids=_clean_genre_ids(result.get(GENRE_FIELD)),
                thumbnail_url=_first_present(result, THUMBNAIL_FIELDS),
                website_url=_first_present(result, WEBSITE_FIELDS),
                explicit=bool(_first_present(result, EXPLICIT_FIELDS, False)),
                extra=extra,
            )
        except Exception as e:
            logger.error(f"Error mapping ListenNotes data to Podcast: {e}. Data: {result}")
            raise APIParsingError(f"Failed to map ListenNotes result: {e}")


_mapper = ListenNotesResultMapper()


def standardize_podcast(raw: RawPodcast) -> Optional[Podcast]:
    """Standardizes one raw podcast; None only when `raw` is not a mapping."""
    try:
        return _mapper.map_to_podcast(raw)
    except APIParsingError:
        return None


def standardize_favorites(favorites: Any) -> List[Podcast]:
    """Standardizes the user's favorites at pipeline entry.

    Every returned podcast has a non-empty title, description and publisher,
    falling back to the `*_original` fields and then to fixed defaults.
    Anything other than a non-empty list yields an empty list.
    """
    if not isinstance(favorites, (list, tuple)) or not favorites:
        return []
    return _mapper.map_results(list(favorites))
