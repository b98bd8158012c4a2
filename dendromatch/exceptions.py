"""
Custom exceptions for the dendrogram matching package.
"""

from __future__ import annotations


class DendroMatchError(Exception):
    """Base exception for dendrogram parsing and matching errors."""

    pass


class NewickParseError(DendroMatchError, ValueError):
    """Raised when a tree description is not structurally well formed."""

    def __init__(self, message: str, fragment: str | None = None):
        self.fragment = fragment
        if fragment is not None:
            message = f"{message}: {fragment!r}"
        super().__init__(message)


class DendrogramStateError(DendroMatchError):
    """Raised when a dendrogram is used before (or after) its root is assigned."""

    pass
