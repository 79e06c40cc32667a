from __future__ import annotations

"""Classification of stored link values.

A link stores its target kind inside the single value string:

- ``http...``, ``https...``, ``ftps...``, ``mailto...``: external URL
- ``abbr_<id>``: abbreviation
- ``REF_<id>``: bibliographic reference
- anything else: internal section identifier

:func:`classify` turns the stored string into a :class:`LinkTarget` right
away; :func:`encode` is its inverse for values chosen in the editing surface.
"""

import re
from typing import Optional, Union

from link_toolkit.core.models import LinkKind, LinkTarget

__all__ = ["ABBREVIATION_PREFIX", "REFERENCE_PREFIX", "classify", "encode"]

ABBREVIATION_PREFIX = "abbr_"
REFERENCE_PREFIX = "REF_"

_EXTERNAL_RE = re.compile(r"^(?:http|https|ftps|mailto)")
_ABBREVIATION_RE = re.compile(r"^" + re.escape(ABBREVIATION_PREFIX))
_REFERENCE_RE = re.compile(r"^" + re.escape(REFERENCE_PREFIX))


def classify(value: Optional[str]) -> LinkTarget:
    """Return the kind and display value of a stored link value.

    Tests run in order: external scheme, abbreviation prefix, reference
    prefix. Values matching none of them, including empty or malformed
    ones, are internal section identifiers.
    """
    value = value or ""
    if _EXTERNAL_RE.match(value):
        return LinkTarget(LinkKind.EXTERNAL, value)
    if _ABBREVIATION_RE.match(value):
        return LinkTarget(LinkKind.ABBREVIATION, value[len(ABBREVIATION_PREFIX):])
    if _REFERENCE_RE.match(value):
        # Reference rows are keyed by the full prefixed identifier
        return LinkTarget(LinkKind.REFERENCE, value)
    return LinkTarget(LinkKind.INTERNAL, value)


def encode(kind: Union[LinkKind, str], raw_choice: str) -> str:
    """Return the stored value for a choice made in the editing surface.

    No URL validation is done: any string is accepted for external links.
    Internal and reference identifiers are stored as chosen; reference
    catalog ids already carry the ``REF_`` prefix.
    """
    kind = LinkKind(kind)
    if kind is LinkKind.ABBREVIATION:
        return ABBREVIATION_PREFIX + raw_choice
    return raw_choice
