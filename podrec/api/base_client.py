import abc
import requests
import time
import logging
from typing import Dict, Any, Optional, Union, List

from .exceptions import (
    APIClientError, AuthenticationError, RateLimitError, APIRequestError, APIParsingError
)

logger = logging.getLogger(__name__)

JSONResponse = Union[Dict[str, Any], List[Any]]

class BaseAPIClient(abc.ABC):
    """Abstract base class for the HTTP clients used by the recommender."""

    DEFAULT_TIMEOUT = 10 # seconds
    MAX_RETRIES = 0
    INITIAL_BACKOFF = 1 # seconds, doubled after every retry

    def __init__(self, api_key: Optional[str] = None, base_url: str = "",
                 timeout: Optional[int] = None, max_retries: Optional[int] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else self.MAX_RETRIES
        self.session = requests.Session()
        if self.api_key:
            self._set_auth_header()

    @abc.abstractmethod
    def _set_auth_header(self):
        """Adds the provider specific credentials to the session headers."""
        pass

    def _request(self, method: str, endpoint: str, params: Optional[Dict] = None, json: Optional[Any] = None) -> JSONResponse:
        """Makes an HTTP request, mapping failures onto APIClientError subclasses.

        Timeouts, connection errors, rate limits and 5xx responses are retried
        with exponential backoff up to `max_retries` times. 401 and other 4xx
        responses are raised immediately.
        """
        url = self.base_url.rstrip('/') + '/' + endpoint.lstrip('/')
        attempt = 0
        backoff = self.INITIAL_BACKOFF
        last_error: Optional[APIClientError] = None

        while attempt <= self.max_retries:
            if attempt > 0:
                logger.warning(f"Retrying {method} {url} in {backoff}s (attempt {attempt}/{self.max_retries})...")
                time.sleep(backoff)
                backoff *= 2 # Exponential backoff
            attempt += 1

            try:
                logger.debug(f"Making {method} request to {url} with params: {params}")
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json,
                    timeout=self.timeout
                )
            except requests.exceptions.Timeout:
                logger.warning(f"Request timed out for {url}.")
                last_error = APIRequestError(f"Request timed out for {url}")
                continue
            except requests.exceptions.RequestException as e:
                # ConnectionError and friends
                logger.error(f"Request failed for {url}: {e}")
                last_error = APIRequestError(f"Request failed for {url}: {e}")
                continue

            if response.status_code == 401:
                raise AuthenticationError(f"Authentication failed for {url}", status_code=401)
            if response.status_code == 429:
                retry_after = int(response.headers.get("Retry-After", backoff))
                logger.warning(f"Rate limit exceeded for {url}.")
                last_error = RateLimitError(f"Rate limit exceeded for {url}", status_code=429, retry_after=retry_after)
                backoff = max(backoff, retry_after)
                continue
            if response.status_code >= 500:
                logger.warning(f"Server error {response.status_code} for {url}.")
                last_error = APIRequestError(f"Server error {response.status_code} for {url}", status_code=response.status_code)
                continue
            if 400 <= response.status_code < 500:
                raise APIRequestError(f"Client error {response.status_code} for {url}: {response.text[:500]}", status_code=response.status_code)

            try:
                json_response = response.json()
                logger.debug(f"Request to {url} succeeded.")
                return json_response
            except ValueError:
                logger.error(f"Failed to parse JSON response from {url}. Response text: {response.text[:500]}...")
                raise APIParsingError(f"Invalid JSON received from {url}")

        logger.error(f"Giving up on {method} {url} after {attempt} attempt(s).")
        raise last_error or APIRequestError(f"Request failed for {url}")

    def close(self):
        self.session.close()


class PodcastCatalogClient(BaseAPIClient):
    """Query interface of a podcast catalog used for candidate collection."""

    @abc.abstractmethod
    def search_podcasts(self, query: str, **kwargs) -> Dict[str, Any]:
        """Full-text search; returns the raw response with a `results` list."""
        pass

    @abc.abstractmethod
    def get_best_podcasts(self, genre_id: Optional[int] = None, page_size: int = 20, **kwargs) -> Dict[str, Any]:
        """Top-ranked podcasts of a genre; returns the raw response with a `podcasts` list."""
        pass

    @abc.abstractmethod
    def get_recommendations(self, podcast_id: str, safe_mode: int = 0) -> Optional[List[Dict[str, Any]]]:
        """Podcasts the catalog itself considers similar to `podcast_id`."""
        pass
