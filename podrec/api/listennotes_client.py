import logging
from typing import Any, Callable, Dict, List, Optional

from .base_client import JSONResponse, PodcastCatalogClient
from .exceptions import APIClientError, AuthenticationError
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

# Search parameters forwarded verbatim to GET /search
SEARCH_PARAMS = (
    'sort_by_date', 'type', 'offset', 'len_min', 'len_max', 'genre_ids', 'published_before',
    'published_after', 'only_in', 'language', 'region', 'ocid', 'ncid', 'safe_mode', 'page_size',
)
# Parameters accepted by GET /best_podcasts besides genre_id and page_size
BEST_PODCASTS_PARAMS = ('sort', 'page', 'region', 'safe_mode')


def _known(kwargs: Dict[str, Any], allowed) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k in allowed and v is not None}


class ListenNotesAPIClient(PodcastCatalogClient):
    """Listen Notes catalog: search, best podcasts per genre, single podcasts and genres."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        if not settings.LISTENNOTES_API_KEY:
            logger.error("LISTENNOTES_API_KEY is not configured.")
            raise AuthenticationError("Listen Notes API key not configured", status_code=None)
        super().__init__(
            api_key=settings.LISTENNOTES_API_KEY,
            base_url=settings.LISTENNOTES_BASE_URL,
            timeout=settings.API_TIMEOUT,
            max_retries=settings.API_MAX_RETRIES,
        )
        logger.info("ListenNotesAPIClient ready.")

    def _set_auth_header(self):
        if self.api_key:
            self.session.headers.update({"X-ListenAPI-Key": self.api_key})

    def _call(self, operation: str, send: Callable[[], JSONResponse]) -> JSONResponse:
        """Runs one request; client errors pass through, anything else becomes APIClientError."""
        try:
            return send()
        except APIClientError as e:
            logger.error(f"Listen Notes {operation} failed: {e}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during Listen Notes {operation}: {e}")
            raise APIClientError(f"Unexpected error in Listen Notes {operation}: {e}")

    def search_podcasts(self, query: str, **kwargs) -> Dict[str, Any]:
        """Full-text podcast search.

        Args:
            query: Search terms.
            **kwargs: Listen Notes search options such as only_in, page_size,
                      sort_by_date, genre_ids or safe_mode. Unknown keys and
                      None values are not sent.

        Returns:
            The raw response; matching podcasts are under `results`.

        Raises:
            APIClientError: When the request fails or the response is unusable.
        """
        params = {"q": query, "type": kwargs.get("type", "podcast"), **_known(kwargs, SEARCH_PARAMS)}
        logger.info(f"Listen Notes search '{query}' with params: {params}")
        return self._call("search", lambda: self._request("GET", "search", params=params))

    def get_best_podcasts(self, genre_id: Optional[int] = None, page_size: int = 20, **kwargs) -> Dict[str, Any]:
        """Curated best podcasts, for one genre or the whole catalog.

        Returns:
            The raw response; podcasts are under `podcasts`.
        """
        params: Dict[str, Any] = {"page_size": page_size}
        if genre_id is not None:
            params["genre_id"] = genre_id
        params.update(_known(kwargs, BEST_PODCASTS_PARAMS))

        logger.info(f"Listen Notes best podcasts with params: {params}")
        return self._call(f"best_podcasts (genre {genre_id})",
                          lambda: self._request("GET", "best_podcasts", params=params))

    def get_podcast(self, podcast_id: str) -> Dict[str, Any]:
        logger.info(f"Fetching Listen Notes podcast {podcast_id}")
        return self._call(f"podcast lookup for {podcast_id}",
                          lambda: self._request("GET", f"podcasts/{podcast_id}"))

    def get_genres(self) -> Dict[str, Any]:
        return self._call("genres", lambda: self._request("GET", "genres"))

    def get_recommendations(self, podcast_id: str, safe_mode: int = 0) -> Optional[List[Dict[str, Any]]]:
        """Podcasts Listen Notes itself lists as similar to `podcast_id`.

        Returns None instead of raising when the id is empty, the request
        fails or the response has no `recommendations` list.
        """
        if not podcast_id:
            return None

        try:
            data = self._request("GET", f"podcasts/{podcast_id}/recommendations", params={"safe_mode": safe_mode})
        except APIClientError as e:
            logger.error(f"Similar podcasts lookup for {podcast_id} failed: {e}")
            return None

        similar = data.get('recommendations') if isinstance(data, dict) else None
        if not isinstance(similar, list):
            logger.warning(f"Similar podcasts response for {podcast_id} has no recommendations list.")
            return None
        logger.info(f"Listen Notes lists {len(similar)} podcasts similar to {podcast_id}")
        return similar
