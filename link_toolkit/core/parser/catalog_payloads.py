from __future__ import annotations

"""Normalisation of catalog payloads into model objects.

Producers may hand back the payload shapes of the document service
(``chapters``/``chapter_level``/``ReferenceUniqueId``...) or the canonical
field names of :mod:`link_toolkit.core.models`. Both are accepted; model
instances pass through untouched. Entries without an identifier are skipped.
"""

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional

from link_toolkit.core.models import AbbreviationEntry, ReferenceEntry, TocNode

logger = logging.getLogger(__name__)

__all__ = [
    "parse_heading_level",
    "parse_toc",
    "parse_abbreviations",
    "parse_references",
]

_HEADING_RE = re.compile(r"^\s*h?(\d+)\s*$", re.IGNORECASE)


def _first(item: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return default


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_heading_level(marker: Any) -> int:
    """Return the numeric level of a heading marker (``"h3"`` -> 3).

    Integers pass through; unreadable markers count as level 1.
    """
    if isinstance(marker, int):
        return marker
    match = _HEADING_RE.match(_text(marker))
    if match is None:
        return 1
    return int(match.group(1))


def _parse_toc_node(item: Any) -> Optional[TocNode]:
    if isinstance(item, TocNode):
        return item
    if not isinstance(item, Mapping):
        logger.debug("Skipping TOC entry of type %s", type(item).__name__)
        return None
    node_id = _first(item, "id")
    if node_id is None:
        logger.debug("Skipping TOC entry without id: %r", item)
        return None
    return TocNode(
        id=_text(node_id),
        level=parse_heading_level(_first(item, "level", "chapter_level", default=1)),
        numbering=_text(_first(item, "numbering", "chapter_numtree", default="")),
        title=_text(_first(item, "title", "chapter_title", default="")),
        children=parse_toc(_first(item, "children", "chapters", default=[])),
    )


def parse_toc(payload: Any) -> List[TocNode]:
    """Return the top-level TOC nodes from a list or a ``{"chapters": [...]}`` mapping.

    A mapping without ``chapters`` yields an empty TOC.
    """
    if payload is None:
        return []
    if isinstance(payload, Mapping):
        payload = payload.get("chapters") or []
    nodes: List[TocNode] = []
    for item in payload:
        node = _parse_toc_node(item)
        if node is not None:
            nodes.append(node)
    return nodes


def parse_abbreviations(payload: Optional[Iterable[Any]]) -> List[AbbreviationEntry]:
    entries: List[AbbreviationEntry] = []
    for item in payload or []:
        if isinstance(item, AbbreviationEntry):
            entries.append(item)
            continue
        if not isinstance(item, Mapping):
            continue
        abbr_id = _first(item, "id", "abbr")
        if abbr_id is None:
            continue
        entries.append(AbbreviationEntry(_text(abbr_id), _text(_first(item, "description", default=""))))
    return entries


def parse_references(payload: Optional[Iterable[Any]]) -> List[ReferenceEntry]:
    entries: List[ReferenceEntry] = []
    for item in payload or []:
        if isinstance(item, ReferenceEntry):
            entries.append(item)
            continue
        if not isinstance(item, Mapping):
            continue
        ref_id = _first(item, "id", "ReferenceUniqueId")
        if ref_id is None:
            continue
        entries.append(
            ReferenceEntry(
                id=_text(ref_id),
                title=_text(_first(item, "title", "Title", default="")),
                journal_name=_text(_first(item, "journal_name", "JournalName", default="")),
                doi=_text(_first(item, "doi", "Doi", default="")),
            )
        )
    return entries
