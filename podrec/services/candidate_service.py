import asyncio
import logging
from typing import Any, Callable, List, Optional, Sequence

from ..api.base_client import PodcastCatalogClient
from ..api.exceptions import APIClientError
from ..config import Settings, get_settings
from ..models.podcast import Podcast
from .deduplication_service import DeduplicationService
from .query_diversifier import generate_diverse_queries
from .result_standardizer import ListenNotesResultMapper

logger = logging.getLogger(__name__)

class CandidateService:
    """Collects candidate podcasts from the catalog for a set of favorites."""

    def __init__(self,
                 catalog_client: PodcastCatalogClient,
                 settings: Optional[Settings] = None,
                 mapper: Optional[ListenNotesResultMapper] = None,
                 deduplicator: Optional[DeduplicationService] = None):
        self.catalog_client = catalog_client
        self.settings = settings or get_settings()
        self.mapper = mapper or ListenNotesResultMapper()
        self.deduplicator = deduplicator or DeduplicationService()

    def _fetch_safely(self, description: str, results_key: Optional[str],
                      fetch: Callable[..., Any], *args, **kwargs) -> List[Podcast]:
        """Runs one catalog call; any failure counts as zero results."""
        try:
            response = fetch(*args, **kwargs)
        except APIClientError as e:
            logger.error(f"Error in {description}: {e}")
            return []
        except Exception as e:
            logger.exception(f"Unexpected error in {description}: {e}")
            return []

        if results_key is None:
            results = response
        else:
            results = response.get(results_key) if isinstance(response, dict) else None
        if not isinstance(results, list) or not results:
            logger.info(f"No podcasts found for {description}")
            return []

        podcasts = self.mapper.map_results(results)
        logger.info(f"Found {len(podcasts)} podcasts for {description}")
        return podcasts

    def _genre_ids(self, favorites: Sequence[Podcast]) -> List[int]:
        genres: List[int] = []
        for podcast in favorites:
            for genre_id in podcast.genre_ids:
                if genre_id not in genres:
                    genres.append(genre_id)
        return genres[:self.settings.MAX_GENRES]

    async def get_candidate_podcasts(self, favorites: Sequence[Podcast]) -> List[Podcast]:
        """Fetches, merges and deduplicates candidates for `favorites`.

        Strategy 1 asks for the best podcasts of (at most) the first two
        favorite genres; strategy 2 always runs the diversified description
        searches. All calls run concurrently and fail independently.

        Returns:
            Unique candidates in collection order, never including a favorite.
            An empty list when the catalog yields nothing.
        """
        if not favorites:
            return []

        tasks = []
        for genre_id in self._genre_ids(favorites):
            tasks.append(asyncio.to_thread(
                self._fetch_safely, f"curated podcasts for genre {genre_id}", "podcasts",
                self.catalog_client.get_best_podcasts,
                genre_id=genre_id, page_size=self.settings.GENRE_PAGE_SIZE, sort="listen_score",
            ))

        queries = generate_diverse_queries(favorites)
        logger.info(f"Generated {len(queries)} content-based search queries")
        for query in queries:
            tasks.append(asyncio.to_thread(
                self._fetch_safely, f"content query: {query.q}", "results",
                self.catalog_client.search_podcasts, query.q, **query.to_params(),
            ))

        batches = await asyncio.gather(*tasks)
        collected = [podcast for batch in batches for podcast in batch]

        if not collected and self.settings.USE_SIMILAR_FALLBACK and favorites[0].id:
            collected = await asyncio.to_thread(
                self._fetch_safely, f"podcasts similar to {favorites[0].id}", None,
                self.catalog_client.get_recommendations, favorites[0].id,
            )

        favorite_ids = [podcast.id for podcast in favorites]
        candidates = self.deduplicator.deduplicate(collected, exclude_ids=favorite_ids)
        logger.info(f"Found {len(candidates)} unique candidate podcasts for recommendation")
        return candidates


async def get_candidate_podcasts(favorites: Sequence[Podcast], catalog_client: PodcastCatalogClient,
                                 settings: Optional[Settings] = None) -> List[Podcast]:
    """Convenience wrapper around `CandidateService` for callers holding only a client."""
    return await CandidateService(catalog_client, settings=settings).get_candidate_podcasts(favorites)
