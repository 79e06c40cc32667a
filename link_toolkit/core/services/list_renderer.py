from __future__ import annotations

"""Render catalogs into selectable list markup.

Every row carries one radio input in a shared group; the checked radio is
what the editing surface reports as the chosen target. The functions are
pure: same input, same markup, no I/O. An empty catalog renders as ``""``.

Markup is built with ``lxml.html.builder`` and serialised row by row, so
identifiers and titles are escaped by the serializer.
"""

import re
from typing import Iterable, List, Optional, Sequence

from lxml import html
from lxml.html import builder as E

from link_toolkit.core.models import AbbreviationEntry, ReferenceEntry, TocNode

__all__ = [
    "DEFAULT_INPUT_NAME",
    "render_toc",
    "render_abbreviations",
    "render_references",
    "wrap_list_group",
    "level_marker",
]

DEFAULT_INPUT_NAME = "listRadioInput"

_REFERENCE_COLUMNS = (("w-45", "Title"), ("w-20", "Journal Name"), ("w-25", "Doi"))

# Characters outside the XML 1.0 Char production (C0 controls, surrogates, U+FFFE/FFFF)
_XML_INCOMPATIBLE_RE = re.compile(r"[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _serialize(elements: Iterable[html.HtmlElement]) -> str:
    return "".join(html.tostring(el, encoding="unicode") for el in elements)


def _xml_text(value: Optional[str]) -> str:
    """Drop characters lxml refuses to serialise (e.g. \\x0b from DOCX text)."""
    return _XML_INCOMPATIBLE_RE.sub("", value or "")


def _input_id(value: str) -> str:
    return f"input_{_xml_text(value)}"


def _radio(value: str, input_name: str, *, disabled: bool = False, checked: bool = False) -> html.HtmlElement:
    attrs = {
        "class": "form-check-input me-1",
        "name": _xml_text(input_name),
        "type": "radio",
        "value": _xml_text(value),
        "id": _input_id(value),
    }
    if disabled:
        attrs["disabled"] = "disabled"
    if checked:
        attrs["checked"] = "checked"
    return E.INPUT(attrs)


def _label(value: str, text: str) -> html.HtmlElement:
    return E.LABEL({"class": "form-check-label", "for": _input_id(value)}, _xml_text(text))


def level_marker(level: int, marker: str = "-") -> str:
    """Indentation prefix for a TOC row: ``marker`` repeated ``level - 1`` times."""
    if level <= 1:
        return ""
    return marker * (level - 1)


def _toc_rows(
    nodes: Sequence[TocNode],
    checked: Optional[str],
    input_name: str,
    marker: str,
) -> List[html.HtmlElement]:
    rows: List[html.HtmlElement] = []
    for node in nodes:
        text = " ".join(part for part in (level_marker(node.level, marker), node.numbering, node.title) if part)
        if node.children:
            # Sections with subsections are shown for context but cannot be linked
            rows.append(
                E.LI(
                    E.CLASS("list-group-item"),
                    E.DIV(
                        E.CLASS("form-check"),
                        _radio(node.id, input_name, disabled=True),
                        _label(node.id, text),
                    ),
                )
            )
            rows.extend(_toc_rows(node.children, checked, input_name, marker))
        else:
            rows.append(
                E.LI(
                    E.CLASS("list-group-item list-group-item-action"),
                    E.DIV(
                        E.CLASS("form-check"),
                        _radio(node.id, input_name, checked=node.id == checked),
                        _label(node.id, text),
                    ),
                )
            )
    return rows


def render_toc(
    nodes: Sequence[TocNode],
    checked: Optional[str] = None,
    *,
    input_name: str = DEFAULT_INPUT_NAME,
    marker: str = "-",
) -> str:
    """Render the section tree depth-first as flat list rows.

    A section with children becomes a disabled row immediately followed by
    its children's rows; only leaf sections are choosable.
    """
    return _serialize(_toc_rows(nodes or [], checked, input_name, marker))


def render_abbreviations(
    entries: Sequence[AbbreviationEntry],
    checked: Optional[str] = None,
    *,
    input_name: str = DEFAULT_INPUT_NAME,
) -> str:
    return _serialize(
        E.LI(
            E.CLASS("list-group-item list-group-item-action"),
            E.DIV(
                E.CLASS("form-check"),
                _radio(entry.id, input_name, checked=entry.id == checked),
                _label(entry.id, entry.description),
            ),
        )
        for entry in entries or []
    )


def _reference_header() -> html.HtmlElement:
    cells = [E.LI(E.CLASS("list-group-item w-10"))]
    for width, heading in _REFERENCE_COLUMNS:
        cells.append(
            E.LI(
                E.CLASS(f"list-group-item {width}"),
                E.DIV(E.CLASS("form-check p-0 m-0"), E.LABEL(E.CLASS("form-check-label"), heading)),
            )
        )
    return E.UL(E.CLASS("list-group list-group-horizontal"), *cells)


def _reference_row(entry: ReferenceEntry, checked: Optional[str], input_name: str) -> html.HtmlElement:
    def cell(width: str, text: str) -> html.HtmlElement:
        return E.LI(
            E.CLASS(f"list-group-item {width}"),
            E.DIV(E.CLASS("form-check p-0 m-0"), _label(entry.id, text)),
        )

    return E.UL(
        {"class": "list-group list-group-horizontal", "for": _input_id(entry.id)},
        E.LI(E.CLASS("list-group-item w-10"), _radio(entry.id, input_name, checked=entry.id == checked)),
        cell("w-45", entry.title),
        cell("w-20", entry.journal_name),
        cell("w-25 text-break", entry.doi),
    )


def render_references(
    entries: Sequence[ReferenceEntry],
    checked: Optional[str] = None,
    *,
    input_name: str = DEFAULT_INPUT_NAME,
) -> str:
    """Render a column header row followed by one four-column row per reference."""
    entries = list(entries or [])
    if not entries:
        return ""
    return _serialize([_reference_header()] + [_reference_row(e, checked, input_name) for e in entries])


def wrap_list_group(markup: str) -> str:
    """Wrap row markup in the ``list-group`` container used by TOC and abbreviations."""
    return f'<ul class="list-group">{markup}</ul>'
