"""
Base exception hierarchy for LLM providers.

The data classes and protocol are defined in __init__.py to avoid circular imports.
"""


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(self, message: str, provider: str, model: str) -> None:
        self.provider = provider
        self.model = model
        super().__init__(message)


class StreamTransportError(LLMProviderError):
    """Raised when the model stream fails. Fatal to the session that owns it."""

    def __init__(
        self,
        message: str,
        provider: str,
        model: str,
        error_type: str = "unknown",
    ) -> None:
        self.error_type = error_type
        super().__init__(message, provider, model)


class AuthenticationError(StreamTransportError):
    """Raised when the provider rejects the credentials."""

    pass


class ModelNotFoundError(StreamTransportError):
    """Raised when the requested model doesn't exist."""

    pass


_ERRORS_BY_TYPE: dict[str, type[StreamTransportError]] = {
    "authentication": AuthenticationError,
    "model_not_found": ModelNotFoundError,
}


def stream_error_for(
    message: str, provider: str, model: str, error_type: str = "unknown"
) -> StreamTransportError:
    """Build the most specific transport error for a categorized stream failure."""
    error_class = _ERRORS_BY_TYPE.get(error_type, StreamTransportError)
    return error_class(message, provider, model, error_type=error_type)
