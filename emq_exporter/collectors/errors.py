"""Failures of a single broker API fetch."""


class FetchError(Exception):
    """Base class for errors that abort one collection cycle."""


class TransportError(FetchError):
    """The request could not be sent or no response was received."""


class HTTPStatusError(FetchError):
    """The broker answered with a status other than 200."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP request to {url} failed with code {status_code}")
        self.status_code = status_code
        self.url = url


class DecodeError(FetchError):
    """The response body is not JSON of the expected shape."""
