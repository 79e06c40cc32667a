from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
import logging

from link_toolkit.config import ConfigManager, LINK_DEFAULTS
from link_toolkit.core.interfaces import DocumentEditor, LinkSurface, Scheduler
from link_toolkit.core.models import (
    CATEGORY_FOR_KIND,
    CatalogCategory,
    LinkKind,
    LinkTarget,
    OperationResult,
    VisibilityState,
)
from link_toolkit.core.services import list_renderer
from link_toolkit.core.services.catalog_service import TargetCatalogLoader
from link_toolkit.core.services.link_classifier import classify
from link_toolkit.core.services.selection_sync import SelectionSyncStateMachine

logger = logging.getLogger(__name__)

__all__ = ["LinkController"]

# Catalogs whose rows are wrapped in a list-group <ul> before display
_WRAPPED_CATEGORIES = (CatalogCategory.TOC, CatalogCategory.ABBREVIATION)


def _normalize_keystroke(keystroke: str) -> str:
    return "+".join(part.strip().lower() for part in str(keystroke or "").split("+") if part.strip())


class LinkController:
    """Controller for the link editing surface.

    Wires the catalog loader, the visibility state machine and the link
    classifier to an injected surface and editor. It contains no UI toolkit
    code; every presentation change goes through the :class:`LinkSurface`.

    Parameters
    ----------
    editor : DocumentEditor
        Adapter over the host rich-text editor.
    surface : LinkSurface
        Modal-style surface with kind selector, URL input and list container.
    scheduler : Scheduler
        Tk-style ``after`` provider used for catalog debouncing.
    sources : Mapping[str, Any], optional
        Catalog sources keyed ``toc``, ``abbreviation``, ``reference``; each a
        static collection or a zero-argument producer (sync or future).
    config : Mapping[str, Any], optional
        Link settings; defaults to ``ConfigManager().get_link_config()``.

    Notes
    -----
    - Every configured catalog is requested once at construction.
    - User actions return booleans or :class:`OperationResult` instead of
      raising; a failed commit leaves the surface open.
    """

    def __init__(
        self,
        editor: DocumentEditor,
        surface: LinkSurface,
        scheduler: Scheduler,
        sources: Optional[Mapping[str, Any]] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.editor = editor
        self.surface = surface

        settings: Dict[str, Any] = dict(LINK_DEFAULTS)
        settings.update(ConfigManager().get_link_config() if config is None else config)
        self.settings = settings
        self._keystroke = _normalize_keystroke(settings["keystroke"])

        self.catalogs = TargetCatalogLoader(
            sources,
            scheduler,
            debounce_ms=int(settings["debounce_ms"]),
            input_name=str(settings["list_input_name"]),
            level_marker=str(settings["level_marker"]),
        )
        self.selection_sync = SelectionSyncStateMachine(editor, marker_name=str(settings["marker_name"]))
        self.selection_sync.add_listener(self._on_visibility_changed)

        self._unsubscribe = [
            self.catalogs.on(category.done_event_name, self._on_catalog_updated)
            for category in CatalogCategory
        ]
        self.catalogs.request_all()

    # ------------------------------------------------------------------ State

    @property
    def is_visible(self) -> bool:
        return self.selection_sync.state is VisibilityState.VISIBLE

    def toolbar_state(self) -> Dict[str, bool]:
        """Return ``{"enabled", "on"}`` for a toolbar link button."""
        return {
            "enabled": bool(self.editor.is_command_enabled()),
            "on": bool(self.editor.get_link_value()),
        }

    # ------------------------------------------------------------ User actions

    def open(self) -> bool:
        """Show the surface for the current selection.

        Over an existing link the surface is pre-filled from the stored value;
        over plain text the state machine installs the fake selection marker.
        Returns False if the link command is disabled.
        """
        if not self.selection_sync.open():
            return False

        if self.editor.get_selection().selected_link_element is not None:
            self._prefill(classify(self.editor.get_link_value()))

        self.surface.set_unlink_visible(True)
        self.surface.show()
        return True

    def change_kind(self, kind: str) -> bool:
        """Switch the surface between the URL input and a catalog list.

        ``""`` and ``"external"`` show the URL input. Returns False for an
        unknown kind.
        """
        if kind in ("", LinkKind.EXTERNAL.value):
            self.surface.set_list_visible(False)
            self.surface.set_value_input_visible(True)
            return True
        try:
            link_kind = LinkKind(kind)
        except ValueError:
            logger.debug("Ignoring unknown link kind %r", kind)
            return False

        category = CATEGORY_FOR_KIND[link_kind]
        self.surface.set_list_markup(self._list_markup(category, self.catalogs.markup(category)))
        self.surface.set_value_input_visible(False)
        self.surface.set_list_visible(True)
        return True

    def commit(self) -> OperationResult:
        """Store the chosen target on the selection and hide the surface."""
        kind = self.surface.get_kind()
        if not kind:
            return OperationResult(False, "Select a link type first.", {"reason": "no_kind"})

        value = self.surface.get_value_input()
        if kind == LinkKind.EXTERNAL.value and value != "":
            return self._commit(LinkKind.EXTERNAL, value)

        checked = self.surface.get_checked_value()
        if not checked or kind == LinkKind.EXTERNAL.value:
            return OperationResult(False, "Select a link target first.", {"reason": "no_selection"})
        try:
            link_kind = LinkKind(kind)
        except ValueError:
            return OperationResult(False, f"Unknown link type: {kind}", {"reason": "unknown_kind"})

        return self._commit(link_kind, checked)

    def cancel(self) -> bool:
        return self.selection_sync.close()

    def unlink(self) -> OperationResult:
        """Remove the link from the selection, whatever its kind."""
        self.selection_sync.unlink()
        return OperationResult(True, "Link removed.")

    def refresh_category(self, category: str, callback: Any = None) -> None:
        """Re-fetch one catalog, optionally swapping its source first."""
        self.catalogs.request_category(category, callback)

    # ---------------------------------------------------------- Input routing

    def handle_keystroke(self, keystroke: str) -> bool:
        """Open on the configured shortcut. Returns True if the key was consumed."""
        if _normalize_keystroke(keystroke) != self._keystroke:
            return False
        if self.editor.is_command_enabled():
            self.open()
        return True

    def handle_escape(self) -> bool:
        if not self.is_visible:
            return False
        self.cancel()
        return True

    def handle_click(self) -> bool:
        """Open when a click placed the selection inside an existing link."""
        if self.editor.get_selection().selected_link_element is None:
            return False
        return self.open()

    def destroy(self) -> None:
        """End the editing session: hide, stop timers, drop listeners."""
        self.selection_sync.close()
        self.catalogs.close()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    # -------------------------------------------------------------- Internals

    @staticmethod
    def _list_markup(category: CatalogCategory, rows: str) -> str:
        if category in _WRAPPED_CATEGORIES:
            return list_renderer.wrap_list_group(rows)
        return rows

    def _prefill(self, target: LinkTarget) -> None:
        if target.kind is LinkKind.EXTERNAL:
            self.surface.set_kind(LinkKind.EXTERNAL.value)
            self.surface.set_value_input(target.display_value)
            self.surface.set_list_visible(False)
            self.surface.set_value_input_visible(True)
            return

        category = CATEGORY_FOR_KIND[target.kind]
        rows = self.catalogs.render(category, checked=target.display_value)
        self.surface.set_list_markup(self._list_markup(category, rows))
        self.surface.set_kind(target.kind.value)
        self.surface.set_value_input_visible(False)
        self.surface.set_list_visible(True)

    def _commit(self, kind: LinkKind, raw_choice: str) -> OperationResult:
        stored = self.selection_sync.commit(kind, raw_choice)
        if stored is None:
            return OperationResult(False, "The link editor is not open.", {"reason": "not_visible"})
        return OperationResult(True, "Link saved.", {"value": stored})

    def _clear_inputs(self) -> None:
        self.surface.set_kind("")
        self.surface.set_value_input("")
        self.surface.set_list_markup("")
        self.surface.set_value_input_visible(False)
        self.surface.set_list_visible(False)

    def _on_visibility_changed(self, old_state: VisibilityState, new_state: VisibilityState) -> None:
        if new_state is not VisibilityState.HIDDEN:
            return
        self.surface.hide()
        # Focus goes back to the editable before the form is cleared
        self.editor.focus()
        self._clear_inputs()

    def _on_catalog_updated(self, payload: Dict[str, Any]) -> None:
        if not self.is_visible:
            return
        category = CatalogCategory(payload["category"])
        try:
            kind = LinkKind(self.surface.get_kind())
        except ValueError:
            return
        if CATEGORY_FOR_KIND.get(kind) is not category:
            return
        rows = self.catalogs.render(category, checked=self.surface.get_checked_value())
        self.surface.set_list_markup(self._list_markup(category, rows))
