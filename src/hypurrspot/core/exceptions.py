"""HypurrSpot exception hierarchy.

This module defines the base exception class and specialized exceptions
for the store, the upstream APIs, token merging and admin authentication.
"""


class HypurrSpotError(Exception):
    """Base exception for all HypurrSpot errors.

    All custom exceptions in HypurrSpot should inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class StoreError(HypurrSpotError):
    """Raised when a read or write against the document store fails.

    Attributes:
        operation: Repository operation that failed (e.g. "tokens.get_all").

    Example:
        raise StoreError(operation="tokens.insert", message="duplicate key")
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class DatabaseConnectionError(StoreError):
    """Raised when the database connection fails or is used before connecting.

    Example:
        raise DatabaseConnectionError("Supabase: Client not connected")
    """

    def __init__(self, message: str) -> None:
        super().__init__(operation="connect", message=message)


class UpstreamError(HypurrSpotError):
    """Base class for failures talking to an upstream HTTP API.

    Attributes:
        service: Name of the upstream service that failed.
        status_code: HTTP status code if available, None otherwise.
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class RateLimitExceeded(UpstreamError):
    """Raised when an upstream answers with HTTP 429.

    Transient: retried with exponential backoff by BaseAPIClient.
    """

    pass


class UpstreamProtocolError(UpstreamError):
    """Raised when an upstream response does not have the expected shape.

    Never retried.

    Example:
        raise UpstreamProtocolError(service="hyperliquid", message="missing 'tokens'")
    """

    pass


class UpstreamUnavailable(UpstreamError):
    """Raised on network failure, non-429 HTTP errors or exhausted retries."""

    pass


class TokenMergeError(HypurrSpotError):
    """Raised when fetched token data cannot be merged into a record.

    Attributes:
        token_index: Index of the token being merged.
    """

    def __init__(self, message: str, token_index: int | None = None) -> None:
        super().__init__(message)
        self.token_index = token_index


class AuthenticationError(HypurrSpotError):
    """Raised when admin credentials or a session token are invalid."""

    pass
