import logging
from typing import Iterable, List, Optional, Set

from ..models.podcast import Podcast

logger = logging.getLogger(__name__)

class DeduplicationService:
    """Service to deduplicate collected candidate podcasts."""

    def deduplicate(self,
                    podcasts: Iterable[Podcast],
                    exclude_ids: Optional[Iterable[Optional[str]]] = None) -> List[Podcast]:
        """Keeps the first podcast seen for each id, dropping excluded ids.

        Args:
            podcasts: Candidates in collection order.
            exclude_ids: Ids that must not appear in the output (the user's favorites).

        Returns:
            Unique podcasts in their original order. Podcasts without an id are skipped.
        """
        excluded: Set[str] = {pid for pid in (exclude_ids or []) if pid}
        seen_ids: Set[str] = set()
        unique: List[Podcast] = []
        skipped_records = 0
        duplicates = 0
        excluded_count = 0

        for podcast in podcasts:
            if not podcast.id:
                logger.warning(f"Skipping candidate without an id: {podcast.title}")
                skipped_records += 1
                continue
            if podcast.id in excluded:
                excluded_count += 1
                continue
            if podcast.id in seen_ids:
                duplicates += 1
                continue
            seen_ids.add(podcast.id)
            unique.append(podcast)

        logger.info(
            f"Deduplication complete. Dropped {duplicates} duplicates, {excluded_count} favorites "
            f"and {skipped_records} records without id. Returning {len(unique)} unique records."
        )
        return unique
