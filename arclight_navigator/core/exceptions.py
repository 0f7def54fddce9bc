"""Navigator exception classes.

Every error raised by the context navigator derives from
:class:`NavigationError`. Errors are scoped to one engine instance: a
failure in one mount point never affects the disclosure of another.
"""

from __future__ import annotations

from typing import Optional


class NavigationError(Exception):
    """Base exception for all navigator errors."""

    def __init__(self, message: str, mount_point: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.mount_point = mount_point
        self.cause = cause

    def __str__(self) -> str:
        if self.mount_point:
            return f"[Mount point: {self.mount_point}] {super().__str__()}"
        return super().__str__()


class MountPointConfigError(NavigationError):
    """Raised when a mount point's ``data-arclight`` declaration is malformed.

    Covers a missing attribute, invalid JSON and missing or mistyped keys.
    """

    def __init__(self, message: str, mount_point: Optional[str] = None,
                 field: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, mount_point, cause)
        self.field = field


class DataIntegrityError(NavigationError):
    """Raised when a fetched node lacks the markup the navigator relies on.

    Typically a ``data-document-id`` attribute or the
    ``li.al-collection-context`` item inside an ``<article>``.
    """
    pass


class FetchError(NavigationError):
    """Raised by a fetcher when a request fails or the body is unusable."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, None, cause)
        self.url = url
        self.status_code = status_code


class NavigationStateError(NavigationError):
    """Raised when an engine is driven out of order (e.g. resolved twice)."""
    pass
