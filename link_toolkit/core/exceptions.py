from __future__ import annotations

"""Link toolkit exception classes.

Configuration mistakes raise immediately; runtime catalog failures are
wrapped in :class:`CatalogFetchError` and delivered through events so they
never escape into the host editor.
"""

from typing import Optional


class LinkToolkitError(Exception):
    """Base exception for all link toolkit errors."""

    def __init__(self, message: str, category: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.category = category
        self.cause = cause

    def __str__(self) -> str:
        if self.category:
            return f"[Catalog: {self.category}] {super().__str__()}"
        return super().__str__()


class CatalogError(LinkToolkitError):
    """Raised for an unknown category or an unusable catalog source."""
    pass


class CatalogFetchError(LinkToolkitError):
    """A catalog producer raised or its future was rejected.

    Never raised out of the loader: it is the ``error`` payload of the
    ``request<Category>:error`` event.
    """
    pass
