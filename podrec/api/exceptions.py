"""Errors raised by the catalog and embedding clients."""

class APIClientError(Exception):
    """Root of every client error; carries the upstream HTTP status when there is one."""
    def __init__(self, message="External API call failed", status_code=None):
        self.status_code = status_code
        super().__init__(message)

class AuthenticationError(APIClientError):
    """API key missing from the configuration or rejected with a 401."""
    def __init__(self, message="API authentication failed", status_code=401):
        super().__init__(message, status_code)

class RateLimitError(APIClientError):
    """Upstream answered 429."""
    def __init__(self, message="API rate limit exceeded", status_code=429, retry_after=None):
        self.retry_after = retry_after # Seconds, from the Retry-After header
        super().__init__(message, status_code)

class APIRequestError(APIClientError):
    """Timeouts, connection failures, and 4xx/5xx responses other than 401 and 429."""
    pass

class APIParsingError(APIClientError):
    """A response body or catalog record that cannot be turned into our models."""
    def __init__(self, message="Failed to parse API response"):
        super().__init__(message, status_code=None)

class EmbeddingError(APIParsingError):
    """The embedding provider answered with something that is not a numeric vector."""
    def __init__(self, message="Embedding provider returned an invalid vector"):
        super().__init__(message)
