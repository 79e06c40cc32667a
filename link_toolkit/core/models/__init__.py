from __future__ import annotations

"""Shared data structures used across the link toolkit core.

This package exposes dataclasses and value objects used by services and the
controller. It is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = [
    "LinkKind",
    "LinkTarget",
    "CatalogCategory",
    "CATEGORY_FOR_KIND",
    "TocNode",
    "AbbreviationEntry",
    "ReferenceEntry",
    "SelectionSnapshot",
    "VisibilityState",
    "OperationResult",
]


class LinkKind(str, Enum):
    """Target kind of a link, derived from its stored value."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    ABBREVIATION = "abbreviation"
    REFERENCE = "reference"


class CatalogCategory(str, Enum):
    """Named catalog sources feeding the selectable lists."""

    TOC = "toc"
    ABBREVIATION = "abbreviation"
    REFERENCE = "reference"

    @property
    def event_name(self) -> str:
        """Name of the failure event fired for this category."""
        return f"request{self.value.capitalize()}:error"

    @property
    def done_event_name(self) -> str:
        return f"request{self.value.capitalize()}:done"

    @property
    def warning_code(self) -> str:
        return f"link-{self.value}-callback-error"


# Link kind -> catalog whose rows are offered for it (external has none)
CATEGORY_FOR_KIND: Dict[LinkKind, CatalogCategory] = {
    LinkKind.INTERNAL: CatalogCategory.TOC,
    LinkKind.ABBREVIATION: CatalogCategory.ABBREVIATION,
    LinkKind.REFERENCE: CatalogCategory.REFERENCE,
}


@dataclass(frozen=True)
class LinkTarget:
    """Parsed form of a stored link value.

    Attributes
    ----------
    kind
        Target kind recognised from the stored value prefix.
    display_value
        Value shown to the user: the URL for external links, the section,
        abbreviation or reference identifier otherwise.
    """

    kind: LinkKind
    display_value: str


@dataclass
class TocNode:
    """A document section in the table of contents.

    ``level`` comes from the heading marker (``h1`` -> 1). Children are kept
    in document order and may nest to any depth.
    """

    id: str
    level: int = 1
    numbering: str = ""
    title: str = ""
    children: List["TocNode"] = field(default_factory=list)

    def is_leaf(self) -> bool:
        """Return True if this section has no subsections."""
        return len(self.children) == 0

    def iter_nodes(self):
        """Yield this node and all descendants depth-first, in order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


@dataclass(frozen=True)
class AbbreviationEntry:
    id: str
    description: str = ""


@dataclass(frozen=True)
class ReferenceEntry:
    id: str
    title: str = ""
    journal_name: str = ""
    doi: str = ""


@dataclass(frozen=True)
class SelectionSnapshot:
    """Identity-only view of the selection used across update ticks.

    Both handles are opaque: they are compared with ``is`` and never read.
    """

    selected_link_element: Optional[Any]
    containing_block: Optional[Any]

    def same_block(self, other: "SelectionSnapshot") -> bool:
        return self.containing_block is other.containing_block


class VisibilityState(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


@dataclass(frozen=True)
class OperationResult:
    """Result of a user-facing link operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None
