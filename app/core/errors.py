"""
Application errors for API error handling.

ServiceUnavailableError: a provider (vector store, embeddings, LLM) is not
configured or cannot be reached; the API answers 503 with the message.
MissingQueryError: request body has no usable query; the API answers 400.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required provider is unavailable or misconfigured."""

    def __init__(self, message: str, service: str = "") -> None:
        self.message = message
        self.service = service
        super().__init__(message)


class MissingQueryError(ValueError):
    """Raised when a request arrives without a query."""

    def __init__(self, message: str = "Query is required") -> None:
        self.message = message
        super().__init__(message)
