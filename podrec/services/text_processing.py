"""Lexical features of podcast text: normalization, keywords, TF-IDF topics and match explanations."""
import logging
import math
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from ..models.podcast import Podcast, Topic

logger = logging.getLogger(__name__)

# Words that carry no meaning in podcast descriptions, on top of the English stop words
DOMAIN_STOP_WORDS = frozenset({
    'the', 'and', 'a', 'an', 'in', 'on', 'at', 'to', 'for', 'of', 'is', 'are', 'was', 'were',
    'this', 'that', 'these', 'those', 'it', 'they', 'we', 'you', 'he', 'she', 'his', 'her',
    'them', 'their', 'our', 'your', 'its', 'has', 'have', 'had', 'been', 'would', 'could',
    'should', 'will', 'can', 'may', 'might', 'with', 'from', 'by', 'about', 'all', 'but', 'not',
    'what', 'when', 'where', 'who', 'how', 'why', 'which', 'podcast', 'show', 'episode', 'episodes',
    'season', 'seasons', 'listen', 'listening', 'host', 'hosts', 'guest', 'guests', 'talk', 'talks',
})

STOP_WORDS = ENGLISH_STOP_WORDS | DOMAIN_STOP_WORDS
MIN_TOKEN_LENGTH = 4
MIN_TOPIC_LENGTH = 3

_TAG_RE = re.compile(r'<[^>]*>')
_NON_WORD_RE = re.compile(r'[^\w\s]')
_WHITESPACE_RE = re.compile(r'\s+')
_TOKEN_RE = re.compile(r'\w+')


def preprocess_text(text: Optional[str]) -> str:
    """Lowercases, strips HTML tags and punctuation, and collapses whitespace."""
    if not text or not isinstance(text, str):
        return ''
    text = _TAG_RE.sub(' ', text.lower())
    text = _NON_WORD_RE.sub(' ', text)
    return _WHITESPACE_RE.sub(' ', text).strip()


def _is_number(token: str) -> bool:
    try:
        return math.isfinite(float(token))
    except ValueError:
        return False


def filter_tokens(tokens: Optional[Iterable[str]]) -> List[str]:
    """Drops stop words, domain jargon, tokens of three characters or fewer, and numbers."""
    if not tokens:
        return []
    return [
        token for token in tokens
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS and not _is_number(token)
    ]


def _significant_tokens(text: Optional[str]) -> List[str]:
    return filter_tokens(_TOKEN_RE.findall(preprocess_text(text)))


def extract_topics(text: Optional[str], num_topics: int = 10) -> List[Topic]:
    """Top TF-IDF terms of `text`, treated as a single-document corpus.

    Each term scores `tf * idf` with `idf = 1 + ln(N / (1 + df))` and N = 1, so
    the ordering follows term frequency, ties keeping first-seen order.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    try:
        counts = Counter(_significant_tokens(text))
        n_documents = 1
        idf = 1 + math.log(n_documents / (1 + 1))
        topics = [
            Topic(term=term, score=count * idf)
            for term, count in counts.items()
            if len(term) >= MIN_TOPIC_LENGTH
        ]
        topics.sort(key=lambda topic: topic.score, reverse=True)
        return topics[:num_topics]
    except Exception as e:
        logger.exception(f"Error extracting topics: {e}")
        return []


def extract_keywords(text: Optional[str], limit: int = 10) -> List[str]:
    """Most frequent significant words of `text`, ties in first-seen order."""
    if not text:
        return []

    try:
        counts = Counter(filter_tokens(preprocess_text(text).split(' ')))
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [word for word, _ in ranked[:limit]]
    except Exception as e:
        logger.exception(f"Error extracting keywords: {e}")
        return []


def extract_meaningful_keywords(favorites: Optional[Sequence[Podcast]], limit: int = 8) -> str:
    """Space-joined keywords shared across favorites, used as a broad search string.

    Each favorite contributes its top five keywords (description counted
    twice); keywords found in more favorites come first, then alphabetical.
    """
    if not favorites:
        return ''

    try:
        keyword_freq: Counter = Counter()
        for podcast in favorites:
            combined_text = f"{podcast.title or ''} {podcast.text_description} {podcast.text_description}"
            keyword_freq.update(extract_keywords(combined_text, 5))

        ranked = sorted(keyword_freq.items(), key=lambda item: (-item[1], item[0]))
        return ' '.join(word for word, _ in ranked[:limit])
    except Exception as e:
        logger.exception(f"Error extracting meaningful keywords: {e}")
        return ''


def generate_match_reason(candidate: Podcast, most_similar: Optional[Podcast],
                          match_score: float, topic_score: float) -> str:
    """Human readable explanation of why `candidate` was recommended."""
    if most_similar is None or not most_similar.title:
        return f"Match score: {round(match_score * 100)}%. This podcast matches your listening preferences."

    common_genres = set(candidate.genre_ids) & set(most_similar.genre_ids)

    favorite_keywords = extract_keywords(most_similar.text_description)
    common_keywords = [k for k in extract_keywords(candidate.text_description) if k in favorite_keywords]

    reason = f'Similar to "{most_similar.title}". '

    if common_genres:
        reason += 'Shares the same genre. '

    if common_keywords:
        reason += f"Discusses similar topics like {', '.join(common_keywords[:3])}. "

    if topic_score > 0.4:
        reason += 'Strong thematic similarity in content. '
    elif topic_score > 0.2:
        reason += 'Some thematic overlap in content. '

    if match_score > 0.85:
        reason += 'Very strong content match.'
    elif match_score > 0.7:
        reason += 'Strong content match.'
    elif match_score > 0.5:
        reason += 'Moderate content similarity.'
    else:
        reason += 'Some content similarities.'

    return reason
