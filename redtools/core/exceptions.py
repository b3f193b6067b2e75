"""Custom exception hierarchy for redtools."""

from typing import Optional


class RedToolsError(Exception):
    """Base exception for all redtools errors."""

    def __init__(self, message: str = "An error occurred in redtools"):
        self.message = message
        super().__init__(self.message)


class NetworkError(RedToolsError):
    """Connectivity failure or timeout."""

    def __init__(self, message: str = "A network error occurred"):
        super().__init__(message)


class RedditFetchError(NetworkError):
    """Error reaching Reddit."""

    def __init__(self, message: str = "Failed to fetch data from Reddit"):
        super().__init__(message)


class ApiError(RedToolsError):
    """Non-success HTTP status from an external API.

    Carries the HTTP status and whatever message the server supplied.
    """

    def __init__(self, status: int, message: Optional[str] = None):
        self.status = status
        self.server_message = message
        if not message:
            message = f"Server returned an error (HTTP {status})"
        super().__init__(message)


class AuthenticationError(ApiError):
    """Reddit token endpoint rejected the credentials."""


class DataError(RedToolsError):
    """Base exception for data-related errors."""

    def __init__(self, message: str = "A data error occurred"):
        super().__init__(message)


class ParseError(DataError):
    """Response body did not have the expected shape."""

    def __init__(self, message: str = "Failed to parse response"):
        super().__init__(message)


class DecodeError(ParseError):
    """Reddit listing or token response could not be decoded."""

    def __init__(self, message: str = "Failed to decode response"):
        super().__init__(message)


class ConfigError(DataError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message)


class StoreError(DataError):
    """Shared content store operation failed."""

    def __init__(self, message: str = "Shared store operation failed"):
        super().__init__(message)


class BusyError(RedToolsError):
    """The same action is already in flight."""

    def __init__(self, message: str = "Another request is already in progress"):
        super().__init__(message)
