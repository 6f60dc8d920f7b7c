from __future__ import annotations


class DomainError(Exception):
    """Base domain error shown to the caller as a friendly message."""


class ValidationError(DomainError):
    pass


class UnsupportedPlatformError(DomainError):
    pass


class FetchError(DomainError):
    """Upstream page could not be fetched."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ThumbnailDownloadError(DomainError):
    pass
