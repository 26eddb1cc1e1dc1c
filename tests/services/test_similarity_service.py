import asyncio

import pytest
from cachetools import TTLCache

from podrec.api.exceptions import APIRequestError
from podrec.models.podcast import Podcast, Topic
from podrec.services.similarity_service import (
    SimilarityEngine,
    build_weights,
    cosine_similarity,
    create_weighted_text,
    topic_similarity,
)

class CountingClient:
    def __init__(self, vector=None, error=None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.vector

# --- cosine_similarity ---

def test_cosine_of_vector_with_itself_is_one():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

def test_cosine_with_zero_vector_is_zero():
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0

def test_cosine_is_symmetric():
    a, b = [0.3, -1.2, 4.0], [2.0, 0.5, 1.5]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

def test_cosine_orthogonal_vectors():
    assert cosine_similarity([1, 0], [0, 1]) == 0.0

def test_cosine_known_value_is_plain_float():
    result = cosine_similarity([1.0, 2.0], [2, 1])
    assert type(result) is float
    assert result == pytest.approx(0.8)

@pytest.mark.parametrize("vec1, vec2", [
    ([], [1.0]),
    ([1.0, 2.0], [1.0, 2.0, 3.0]),
    (["a", "b"], [1.0, 2.0]),
    (None, [1.0]),
    ([1.0, None], [1.0, 2.0]),
])
def test_cosine_invalid_vectors_return_zero(vec1, vec2):
    assert cosine_similarity(vec1, vec2) == 0.0

# --- topic_similarity ---

def test_topic_similarity_measures_coverage_of_first_argument():
    topics_a = [Topic(term="history", score=2.0), Topic(term="battles", score=1.0)]
    topics_b = [Topic(term="history", score=1.0), Topic(term="cooking", score=5.0)]

    assert topic_similarity(topics_a, topics_b) == pytest.approx(1.0 / 3.0)
    assert topic_similarity(topics_b, topics_a) == pytest.approx(1.0 / 6.0)

def test_topic_similarity_identical_topics():
    topics = [Topic(term="science", score=1.5), Topic(term="space", score=0.5)]
    assert topic_similarity(topics, topics) == pytest.approx(1.0)

def test_topic_similarity_empty_inputs():
    topics = [Topic(term="science", score=1.0)]
    assert topic_similarity([], topics) == 0.0
    assert topic_similarity(topics, []) == 0.0
    assert topic_similarity(None, None) == 0.0

# --- create_weighted_text ---

def test_weighted_text_repeats_fields_by_weight(settings):
    podcast = Podcast(id="p1", title="Title", description="Desc", publisher="Pub")
    assert create_weighted_text(podcast, build_weights(settings)) == "Title Title Desc Desc Desc Pub"

def test_weighted_text_follows_configured_weights(settings):
    podcast = Podcast(id="p1", title="Title", description="Desc", publisher="Pub")
    weights = {**build_weights(settings), 'title': 1.0, 'description': 1.0, 'publisher': 2.0}
    assert create_weighted_text(podcast, weights) == "Title Desc Pub Pub"

def test_weighted_text_of_missing_podcast():
    assert create_weighted_text(None) == ""

# --- SimilarityEngine.embed ---

def test_embed_caches_by_text_prefix(settings):
    client = CountingClient()
    engine = SimilarityEngine(client, settings=settings)
    prefix = "x" * settings.EMBEDDING_CACHE_KEY_CHARS

    first = engine.embed(prefix + " first ending")
    second = engine.embed(prefix + " a different ending")

    assert first == second == client.vector
    assert len(client.calls) == 1

def test_embed_uses_injected_cache(settings):
    cache = TTLCache(maxsize=10, ttl=60)
    engine = SimilarityEngine(CountingClient(), settings=settings, cache=cache)

    engine.embed("some podcast text")
    assert "some podcast text" in cache

    engine.clear_cache()
    assert len(cache) == 0

def test_embed_truncates_long_input(settings):
    client = CountingClient()
    engine = SimilarityEngine(client, settings=settings)

    engine.embed("a" * (settings.EMBEDDING_MAX_INPUT_CHARS + 500))

    assert len(client.calls[0]) == settings.EMBEDDING_MAX_INPUT_CHARS

def test_embed_provider_failure_returns_zero_vector_and_is_not_cached(settings):
    client = CountingClient(error=APIRequestError("service unavailable", status_code=503))
    engine = SimilarityEngine(client, settings=settings)

    vector = engine.embed("text that fails")
    engine.embed("text that fails")

    assert vector == [0.0] * settings.EMBEDDING_DIMENSION
    assert len(client.calls) == 2

def test_embed_unexpected_error_returns_zero_vector(settings):
    engine = SimilarityEngine(CountingClient(error=RuntimeError("boom")), settings=settings)
    assert engine.embed("anything") == [0.0] * settings.EMBEDDING_DIMENSION

@pytest.mark.parametrize("bad_vector", [[], ["a", "b"], {"error": "loading"}])
def test_embed_malformed_response_returns_zero_vector(settings, bad_vector):
    engine = SimilarityEngine(CountingClient(vector=bad_vector), settings=settings)
    assert engine.embed("anything") == [0.0] * settings.EMBEDDING_DIMENSION

def test_embed_empty_text_skips_provider(settings):
    client = CountingClient()
    engine = SimilarityEngine(client, settings=settings)

    assert engine.embed("") == [0.0] * settings.EMBEDDING_DIMENSION
    assert client.calls == []

def test_embed_many_preserves_order(settings, fake_embedding_client):
    engine = SimilarityEngine(fake_embedding_client, settings=settings)
    texts = ["history of rome", "cooking pasta", "history of rome"]

    vectors = asyncio.run(engine.embed_many(texts))

    assert len(vectors) == 3
    assert vectors[0] == vectors[2]
    assert vectors[0] == fake_embedding_client.embed("history of rome")
    assert vectors[1] != vectors[0]
