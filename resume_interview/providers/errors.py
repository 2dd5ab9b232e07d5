"""Provider error taxonomy.

Adapters translate SDK-specific exceptions into these classes so the
interview pipeline can treat every backend failure the same way.

WHY SEPARATE ERROR CLASSES:
- Logs and metrics can tell a bad key apart from an overloaded backend
- Provider-agnostic error handling (adapters map to these)
"""

__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ModelNotFoundError",
    "ContentFilterError",
    "ContextLengthError",
    "TransientError",
]


class ProviderError(Exception):
    """Base class for all provider errors.

    The interview turn catches this single base class and answers with the
    rephrase message instead of failing the request.
    """

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded at the provider."""

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        """Initialize RateLimitError.

        Args:
            message: Error description from the provider.
            retry_after_seconds: Optional hint from provider on when to retry.
        """
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ProviderError):
    """Invalid or expired API key."""

    pass


class ModelNotFoundError(ProviderError):
    """Requested model doesn't exist or isn't accessible."""

    pass


class ContentFilterError(ProviderError):
    """Content blocked by provider's safety filter."""

    pass


class ContextLengthError(ProviderError):
    """Input exceeded model's context window.

    Long interviews can hit this; the history window in settings keeps the
    prompt bounded.
    """

    pass


class TransientError(ProviderError):
    """Temporary failure (network, timeout, 5xx responses)."""

    pass
