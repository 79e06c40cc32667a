from __future__ import annotations

"""Visibility state machine for the link editing surface.

The surface is either ``HIDDEN`` or ``VISIBLE``. Opening is guarded by the
link command being enabled. While visible, the machine holds a subscription
to the editor's per-tick update notification and hides the surface when:

- a link was selected on the previous tick and no link is selected now, or
- no link was selected on the previous tick and the nearest element
  ancestor of the selection focus changed (e.g. a collaborator's edit
  moved the caret).

Expanding the selection inside the same link is not a hide trigger.

When opened over plain text, a transient highlight marker stands in for the
selection that the modal steals focus from. It is removed on every hide.
"""

import logging
from typing import Any, Callable, List, Optional, Union

from link_toolkit.core.interfaces import DocumentEditor, Subscription
from link_toolkit.core.models import LinkKind, SelectionSnapshot, VisibilityState
from link_toolkit.core.services.link_classifier import encode

logger = logging.getLogger(__name__)

__all__ = ["SelectionSyncStateMachine", "VISUAL_SELECTION_MARKER_NAME"]

VISUAL_SELECTION_MARKER_NAME = "link-ui"

# Listener signature: (old_state, new_state)
TransitionListener = Callable[[VisibilityState, VisibilityState], None]


class SelectionSyncStateMachine:
    """Track whether the link editing surface should be visible.

    Parameters
    ----------
    editor : DocumentEditor
        Host editor adapter.
    marker_name : str
        Name of the fake visual selection marker.

    Notes
    -----
    - ``open`` and ``close`` return booleans instead of raising; closing an
      already hidden machine is a no-op that still clears any stray marker.
    - Transition listeners run after the state has changed; failures are
      logged and swallowed so one bad listener cannot wedge the surface.
    """

    def __init__(self, editor: DocumentEditor, *, marker_name: str = VISUAL_SELECTION_MARKER_NAME) -> None:
        self._editor = editor
        self._marker_name = marker_name
        self._state = VisibilityState.HIDDEN
        self._subscription: Optional[Subscription] = None
        self._previous: Optional[SelectionSnapshot] = None
        self._fake_selection = False
        self._listeners: List[TransitionListener] = []

    # ------------------------------------------------------------------ State

    @property
    def state(self) -> VisibilityState:
        return self._state

    @property
    def is_visible(self) -> bool:
        return self._state is VisibilityState.VISIBLE

    @property
    def has_fake_selection(self) -> bool:
        return self._fake_selection

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------ Transitions

    def open(self) -> bool:
        """Request ``HIDDEN -> VISIBLE``.

        Returns False when the link command is disabled. Opening while
        already visible refreshes the fake selection and keeps the state.
        """
        if not self._editor.is_command_enabled():
            logger.debug("Open refused: link command disabled")
            return False

        snapshot = self._editor.get_selection()
        if snapshot.selected_link_element is None:
            self._show_fake_selection()

        if self.is_visible:
            return True

        self._previous = snapshot
        self._subscription = self._editor.on_update(self._on_update)
        self._set_state(VisibilityState.VISIBLE)
        return True

    def close(self) -> bool:
        """Request ``VISIBLE -> HIDDEN``. Returns True if the state changed."""
        self._hide_fake_selection()
        if not self.is_visible:
            return False
        self._release()
        self._set_state(VisibilityState.HIDDEN)
        return True

    def commit(self, kind: Union[LinkKind, str], raw_choice: str) -> Optional[str]:
        """Store the encoded choice on the current selection and hide.

        Returns the stored link value, or None without touching the document
        when the surface is not visible.
        """
        if not self.is_visible:
            logger.debug("Commit ignored: link surface is hidden")
            return None
        value = encode(kind, raw_choice)
        # The fake marker must not end up inside the linked range
        self._hide_fake_selection()
        self._editor.apply_link_attribute(self._editor.get_selection_range(), value)
        logger.info("Link set to %r", value)
        self.close()
        return value

    def unlink(self) -> None:
        """Remove the link attribute from the selection and hide.

        Allowed in either state: removing a link that is not there is a no-op
        on the document side, so callers may unlink without opening first.
        """
        self._hide_fake_selection()
        self._editor.remove_link_attribute(self._editor.get_selection_range())
        logger.info("Link removed")
        self.close()

    # -------------------------------------------------------------- Internals

    def _release(self) -> None:
        subscription, self._subscription = self._subscription, None
        self._previous = None
        if subscription is not None:
            subscription.release()

    def _on_update(self) -> None:
        if not self.is_visible or self._previous is None:
            return
        current = self._editor.get_selection()
        previous = self._previous
        left_link = previous.selected_link_element is not None and current.selected_link_element is None
        moved = previous.selected_link_element is None and not current.same_block(previous)
        if left_link or moved:
            logger.debug("Selection moved away (left_link=%s, moved=%s); hiding", left_link, moved)
            self.close()
            return
        self._previous = current

    def _set_state(self, new_state: VisibilityState) -> None:
        old_state, self._state = self._state, new_state
        logger.debug("Link surface %s -> %s", old_state.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception("Visibility listener failed")

    def _show_fake_selection(self) -> None:
        editor = self._editor
        range_: Any = editor.get_selection_range()
        if editor.has_marker(self._marker_name):
            editor.update_marker(self._marker_name, range_)
        elif editor.is_range_start_at_end(range_):
            # Skip boundary positions so the highlight starts on real content
            start = editor.last_non_content_position(range_)
            editor.insert_marker(self._marker_name, editor.create_range(start, editor.range_end(range_)), transient=True)
        else:
            editor.insert_marker(self._marker_name, range_, transient=True)
        self._fake_selection = True

    def _hide_fake_selection(self) -> None:
        if self._editor.has_marker(self._marker_name):
            self._editor.remove_marker(self._marker_name)
        self._fake_selection = False
