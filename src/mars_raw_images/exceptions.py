"""
Exception hierarchy for manifest/catalog retrieval and the image cache.
"""

from typing import Optional


class MarsImagesError(Exception):
    """Base class for all errors raised by this package."""


class FetchError(MarsImagesError):
    """
    A single remote fetch failed.

    Parameters
    ----------
    message : str
        Human readable description
    url : str
        URL that was being fetched
    cause : Exception, optional
        Underlying exception (also chained as ``__cause__``)
    """

    def __init__(self, message: str, url: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.url = url
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"{base} (url={self.url}): {self.cause}"
        return f"{base} (url={self.url})"


class TransportError(FetchError):
    """Request could not be built or sent, or the server answered with an error status."""


class DecodeError(FetchError):
    """Response body is not valid JSON or does not have the expected shape."""


class InsufficientDataError(MarsImagesError, LookupError):
    """More records were requested from the cache than it currently holds."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Requested {requested} images but only {available} are cached"
        )
        self.requested = requested
        self.available = available


class ManifestOrderError(MarsImagesError, ValueError):
    """Manifest sols are not sorted oldest to newest."""

    def __init__(self, previous_sol: int, sol: int):
        super().__init__(
            f"Manifest sols are not in ascending order: sol {sol} follows sol {previous_sol}"
        )
        self.previous_sol = previous_sol
        self.sol = sol
