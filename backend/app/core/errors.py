"""
Error types shared by upstream clients, the LLM client and the API routes
"""
from typing import Any, Dict, Optional


class TipsterError(Exception):
    """Base class for all service errors"""

    status_code: int = 500

    def __init__(self, message: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}


class ConfigurationError(TipsterError):
    """A required setting (usually an API key) is missing"""


class UpstreamError(TipsterError):
    """A third-party data API answered with an error or could not be reached"""

    def __init__(
        self,
        message: str,
        provider: str,
        upstream_status: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, metadata)
        self.provider = provider
        self.upstream_status = upstream_status


class LLMError(TipsterError):
    """The generative language endpoint failed or returned an unusable payload"""


class InsufficientDataError(TipsterError):
    """Not enough price history to compute indicators"""

    status_code = 422


class NotFoundError(TipsterError):
    """Requested fixture or event does not exist upstream"""

    status_code = 404


class FixtureNotFoundError(NotFoundError):
    def __init__(self, message: str = "Fixture details could not be found."):
        super().__init__(message)


class EventNotFoundError(NotFoundError):
    def __init__(self, message: str = "Event odds could not be found."):
        super().__init__(message)
