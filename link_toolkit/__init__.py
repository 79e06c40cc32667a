"""Top-level package for the link annotation toolkit.

This package hosts a GUI-agnostic implementation of a rich-text link editor:
link classification, target catalogs, list rendering and the visibility
state machine. Front-ends (Tk, web bridges, tests) should only depend on the
public API exposed here rather than importing internal modules directly.
"""

from .core.models import LinkKind, LinkTarget  # re-export for convenience
from .core.services.link_classifier import classify, encode
from .ui.controllers.link_controller import LinkController

__all__: list[str] = [
    "LinkKind",
    "LinkTarget",
    "LinkController",
    "classify",
    "encode",
]
