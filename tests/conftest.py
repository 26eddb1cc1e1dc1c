import os
import re
import sys
import zlib

import pytest

# Add the project root directory to sys.path so that 'podrec' can be imported
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from podrec.config import Settings
from podrec.models.podcast import Podcast


class FakeEmbeddingClient:
    """Deterministic bag-of-words embeddings; identical texts get identical vectors."""

    def __init__(self, dimension: int = 256):
        self.dimension = dimension
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        vector = [0.0] * self.dimension
        for token in re.findall(r'\w+', text.lower()):
            vector[zlib.crc32(token.encode('utf-8')) % self.dimension] += 1.0
        return vector


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        LISTENNOTES_API_KEY="test-listennotes-key",
        HUGGING_FACE_API_KEY="test-hf-key",
    )


@pytest.fixture
def fake_embedding_client():
    return FakeEmbeddingClient()


@pytest.fixture
def make_podcast():
    def _make(podcast_id, title="A Podcast", description="Some description", publisher="Some Publisher", genre_ids=None):
        return Podcast(
            id=podcast_id,
            title=title,
            description=description,
            publisher=publisher,
            genre_ids=genre_ids or [],
        )
    return _make
