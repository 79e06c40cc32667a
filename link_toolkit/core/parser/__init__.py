from __future__ import annotations

"""Catalog payload parsers.

Turns raw producer output into :mod:`link_toolkit.core.models` objects.
"""

from .catalog_payloads import (  # noqa: F401
    parse_abbreviations,
    parse_heading_level,
    parse_references,
    parse_toc,
)

__all__: list[str] = [
    "parse_heading_level",
    "parse_toc",
    "parse_abbreviations",
    "parse_references",
]
