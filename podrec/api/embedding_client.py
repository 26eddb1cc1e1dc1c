import logging
from typing import Any, List, Optional

from .base_client import BaseAPIClient
from .exceptions import AuthenticationError, EmbeddingError
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class HuggingFaceEmbeddingClient(BaseAPIClient):
    """Sentence embeddings from the Hugging Face Inference feature-extraction pipeline."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        if not settings.HUGGING_FACE_API_KEY:
            logger.error("HUGGING_FACE_API_KEY environment variable not set.")
            raise AuthenticationError("Hugging Face API key not configured", status_code=None)
        self.model_id = settings.EMBEDDING_MODEL
        super().__init__(
            api_key=settings.HUGGING_FACE_API_KEY,
            base_url=f"{settings.EMBEDDING_API_URL.rstrip('/')}/{self.model_id}",
            timeout=settings.API_TIMEOUT,
            max_retries=settings.API_MAX_RETRIES,
        )
        logger.info(f"HuggingFaceEmbeddingClient initialized with model: {self.model_id}")

    def _set_auth_header(self):
        if self.api_key:
            self.session.headers.update({"Authorization": f"Bearer {self.api_key}"})

    def embed(self, text: str) -> List[float]:
        """Returns the embedding vector of `text`.

        Raises:
            APIClientError: On request failures.
            EmbeddingError: If the response is not a non-empty numeric vector.
        """
        response = self._request("POST", "pipeline/feature-extraction", json={"inputs": text})
        return _as_vector(response)


def _as_vector(response: Any) -> List[float]:
    """Validates a feature-extraction response, unwrapping a single-row matrix."""
    if isinstance(response, list) and len(response) == 1 and isinstance(response[0], list):
        response = response[0]
    if not isinstance(response, list) or not response:
        raise EmbeddingError(f"Expected a non-empty list, got {type(response).__name__}")
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in response):
        raise EmbeddingError("Embedding contains non-numeric values")
    return [float(x) for x in response]
