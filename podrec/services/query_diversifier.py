"""Builds a few diverse catalog searches from the user's favorites."""
import logging
from collections import Counter
from typing import List, Sequence, Set

from ..models.podcast import Podcast, SearchQuery
from .text_processing import extract_keywords, extract_topics

logger = logging.getLogger(__name__)

MAX_THEMES = 3
TOPICS_PER_DESCRIPTION = 10
KEYWORDS_FROM_DESCRIPTIONS = 10


def extract_themes(podcasts: Sequence[Podcast]) -> List[str]:
    """Description topics shared by more than one podcast, most common first (at most three)."""
    topic_frequency: Counter = Counter()
    for podcast in podcasts:
        topic_frequency.update(topic.term for topic in extract_topics(podcast.text_description, TOPICS_PER_DESCRIPTION))

    shared = [(topic, count) for topic, count in topic_frequency.items() if count > 1]
    shared.sort(key=lambda item: item[1], reverse=True)
    return [topic for topic, _ in shared[:MAX_THEMES]]


def _publisher_terms(podcasts: Sequence[Podcast]) -> Set[str]:
    terms: Set[str] = set()
    for podcast in podcasts:
        if not podcast.publisher:
            continue
        name = podcast.publisher.lower()
        terms.add(name)
        terms.update(name.split())
    return terms


def remove_duplicate_queries(queries: Sequence[SearchQuery]) -> List[SearchQuery]:
    seen: Set[SearchQuery] = set()
    unique: List[SearchQuery] = []
    for query in queries:
        if query in seen:
            continue
        seen.add(query)
        unique.append(query)
    return unique


def generate_diverse_queries(podcasts: Sequence[Podcast]) -> List[SearchQuery]:
    """Up to three description searches: the top shared theme, the top keyword, then the second theme.

    Keywords that are short or match a favorite's publisher (whole name or any
    word of it) are skipped so searches do not just return the same network.
    """
    if not podcasts:
        return []

    try:
        queries: List[SearchQuery] = []

        themes = extract_themes(podcasts)
        if themes:
            queries.append(SearchQuery(q=themes[0]))

        publishers = _publisher_terms(podcasts)
        description_text = ' '.join(podcast.text_description for podcast in podcasts)
        keywords = [
            kw for kw in extract_keywords(description_text, KEYWORDS_FROM_DESCRIPTIONS)
            if kw and len(kw) > 3 and kw.lower() not in publishers
        ]
        if keywords:
            queries.append(SearchQuery(q=keywords[0]))

        if len(themes) > 1:
            queries.append(SearchQuery(q=themes[1]))

        return remove_duplicate_queries(queries)
    except Exception as e:
        logger.exception(f"Error generating diverse queries: {e}")
        return []
