from __future__ import annotations

"""Collaborator interface definitions.

The link core never touches the editor model or any widget directly. Hosts
supply objects satisfying these protocols: a document editor wrapping the
rich-text framework, a UI surface wrapping whatever modal the presentation
layer uses, and a Tk-style scheduler (any Tk widget qualifies).
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from link_toolkit.core.models import SelectionSnapshot


# Callback signature for the host's per-tick "UI should refresh" notification
UpdateListener = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """Tk-style timer API (``widget.after`` / ``widget.after_cancel``)."""

    def after(self, ms: int, func: Callable[[], Any]) -> Any:
        """Run ``func`` once after ``ms`` milliseconds; return a handle."""
        ...

    def after_cancel(self, handle: Any) -> None:
        """Cancel a callback scheduled with :meth:`after`."""
        ...


@runtime_checkable
class Subscription(Protocol):
    """Handle returned by :meth:`DocumentEditor.on_update`."""

    def release(self) -> None:
        ...


@runtime_checkable
class DocumentEditor(Protocol):
    """Narrow view of the host rich-text framework.

    Ranges and elements are opaque handles owned by the host. The core only
    passes them back, compares them by identity or asks the predicates below.
    """

    def get_selection(self) -> SelectionSnapshot:
        """Return the currently selected link element and the nearest
        element-type ancestor of the selection focus."""
        ...

    def get_selection_range(self) -> Any:
        ...

    def get_link_value(self) -> Optional[str]:
        """Stored link value on the selection (or the selected element)."""
        ...

    def is_command_enabled(self) -> bool:
        """Whether the link command is enabled for the current selection."""
        ...

    def is_range_start_at_end(self, range_: Any) -> bool:
        """True when the range start sits at the end of its container."""
        ...

    def last_non_content_position(self, range_: Any) -> Any:
        """Walk from the range start over non-content positions, bounded by
        the range, and return the last position reached."""
        ...

    def create_range(self, start: Any, end: Any) -> Any:
        ...

    def range_end(self, range_: Any) -> Any:
        ...

    def apply_link_attribute(self, range_: Any, value: str) -> None:
        ...

    def remove_link_attribute(self, range_: Any) -> None:
        ...

    def has_marker(self, name: str) -> bool:
        ...

    def insert_marker(self, name: str, range_: Any, transient: bool = True) -> None:
        """Add a marker that never affects saved document data."""
        ...

    def update_marker(self, name: str, range_: Any) -> None:
        ...

    def remove_marker(self, name: str) -> None:
        ...

    def on_update(self, listener: UpdateListener) -> Subscription:
        """Subscribe to the per-tick UI refresh notification."""
        ...

    def focus(self) -> None:
        """Return keyboard focus to the editable area."""
        ...


@runtime_checkable
class LinkSurface(Protocol):
    """Modal-style editing surface supplied by the presentation layer.

    Field names follow the surface layout: ``kind`` (the link type selector),
    ``value_input`` (the URL entry) and ``list_container`` (the selectable
    list markup). The surface reports the checked list row through
    :meth:`get_checked_value`.
    """

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def get_kind(self) -> str:
        ...

    def set_kind(self, kind: str) -> None:
        ...

    def get_value_input(self) -> str:
        ...

    def set_value_input(self, value: str) -> None:
        ...

    def set_list_markup(self, markup: str) -> None:
        ...

    def get_checked_value(self) -> Optional[str]:
        ...

    def set_value_input_visible(self, visible: bool) -> None:
        ...

    def set_list_visible(self, visible: bool) -> None:
        ...

    def set_unlink_visible(self, visible: bool) -> None:
        ...
