from __future__ import annotations

"""Link services: classification, catalog loading, list rendering and
selection synchronisation.

Services take their collaborators as constructor arguments and hold no
module-level state.
"""

from . import list_renderer  # noqa: F401
from .link_classifier import classify, encode  # noqa: F401
from .catalog_service import TargetCatalogLoader  # noqa: F401
from .selection_sync import SelectionSyncStateMachine  # noqa: F401

__all__: list[str] = [
    "classify",
    "encode",
    "list_renderer",
    "TargetCatalogLoader",
    "SelectionSyncStateMachine",
]
