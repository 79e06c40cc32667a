"""Test configuration and fixtures for the link toolkit.

Provides in-memory fakes for the host editor and the editing surface plus a
virtual-time scheduler, so every test runs without a GUI or real timers.
"""

import pytest
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from link_toolkit.config import ConfigManager
from link_toolkit.core.models import SelectionSnapshot
from link_toolkit.core.scheduling import VirtualScheduler

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeSubscription:
    def __init__(self, listeners: List[Callable[[], None]], listener: Callable[[], None]) -> None:
        self._listeners = listeners
        self._listener = listener
        self.released = False

    def release(self) -> None:
        self.released = True
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class FakeEditor:
    """Minimal host editor.

    Elements are plain ``object()`` sentinels compared by identity, ranges
    are ``(start, end)`` tuples of integer offsets.
    """

    def __init__(self) -> None:
        self.command_enabled = True
        self.link_element: Optional[object] = None
        self.block: object = object()
        self.link_value: Optional[str] = None
        self.range: Tuple[int, int] = (3, 8)
        self.start_at_end = False
        self.non_content_start = 1
        self.markers: Dict[str, Tuple[Any, bool]] = {}
        self.listeners: List[Callable[[], None]] = []
        self.subscriptions: List[FakeSubscription] = []
        self.applied: List[Tuple[Any, str]] = []
        self.removed: List[Any] = []
        self.calls: List[tuple] = []
        self.focus_count = 0

    # Test helpers
    def place_in_link(self, value: str) -> object:
        self.link_element = object()
        self.link_value = value
        return self.link_element

    def place_in_text(self) -> None:
        self.link_element = None
        self.link_value = None

    def tick(self) -> None:
        for listener in list(self.listeners):
            listener()

    # DocumentEditor protocol
    def get_selection(self) -> SelectionSnapshot:
        return SelectionSnapshot(self.link_element, self.block)

    def get_selection_range(self):
        return self.range

    def get_link_value(self) -> Optional[str]:
        return self.link_value

    def is_command_enabled(self) -> bool:
        return self.command_enabled

    def is_range_start_at_end(self, range_) -> bool:
        return self.start_at_end

    def last_non_content_position(self, range_):
        return self.non_content_start

    def create_range(self, start, end):
        return (start, end)

    def range_end(self, range_):
        return range_[1]

    def apply_link_attribute(self, range_, value: str) -> None:
        self.calls.append(("apply_link_attribute", range_, value))
        self.applied.append((range_, value))
        self.link_value = value

    def remove_link_attribute(self, range_) -> None:
        self.calls.append(("remove_link_attribute", range_))
        self.removed.append(range_)
        self.link_value = None

    def has_marker(self, name: str) -> bool:
        return name in self.markers

    def insert_marker(self, name: str, range_, transient: bool = True) -> None:
        self.calls.append(("insert_marker", name, range_, transient))
        self.markers[name] = (range_, transient)

    def update_marker(self, name: str, range_) -> None:
        self.calls.append(("update_marker", name, range_))
        self.markers[name] = (range_, self.markers[name][1])

    def remove_marker(self, name: str) -> None:
        self.calls.append(("remove_marker", name))
        del self.markers[name]

    def on_update(self, listener: Callable[[], None]) -> FakeSubscription:
        self.listeners.append(listener)
        sub = FakeSubscription(self.listeners, listener)
        self.subscriptions.append(sub)
        return sub

    def focus(self) -> None:
        self.focus_count += 1


class FakeSurface:
    """Records what the controller pushes into the editing surface."""

    def __init__(self) -> None:
        self.visible = False
        self.kind = ""
        self.value_input = ""
        self.list_markup = ""
        self.checked: Optional[str] = None
        self.value_input_visible = False
        self.list_visible = False
        self.unlink_visible = False
        self.show_count = 0
        self.hide_count = 0

    def show(self) -> None:
        self.visible = True
        self.show_count += 1

    def hide(self) -> None:
        self.visible = False
        self.hide_count += 1

    def get_kind(self) -> str:
        return self.kind

    def set_kind(self, kind: str) -> None:
        self.kind = kind

    def get_value_input(self) -> str:
        return self.value_input

    def set_value_input(self, value: str) -> None:
        self.value_input = value

    def set_list_markup(self, markup: str) -> None:
        self.list_markup = markup
        self.checked = None

    def get_checked_value(self) -> Optional[str]:
        return self.checked

    def set_value_input_visible(self, visible: bool) -> None:
        self.value_input_visible = visible

    def set_list_visible(self, visible: bool) -> None:
        self.list_visible = visible

    def set_unlink_visible(self, visible: bool) -> None:
        self.unlink_visible = visible


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def editor():
    return FakeEditor()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def toc_payload():
    """TOC in the document service's payload shape."""
    return {
        "chapters": [
            {
                "id": "intro",
                "chapter_level": "h1",
                "chapter_numtree": "1",
                "chapter_title": "Introduction",
                "chapters": [
                    {"id": "scope", "chapter_level": "h2", "chapter_numtree": "1.1", "chapter_title": "Scope", "chapters": []},
                    {"id": "terms", "chapter_level": "h2", "chapter_numtree": "1.2", "chapter_title": "Terms"},
                ],
            },
            {"id": "methods", "chapter_level": "h1", "chapter_numtree": "2", "chapter_title": "Methods", "chapters": []},
        ]
    }


@pytest.fixture
def abbreviation_payload():
    return [
        {"abbr": "42", "description": "Answer"},
        {"abbr": "WHO", "description": "World Health Organization"},
    ]


@pytest.fixture
def reference_payload():
    return [
        {"ReferenceUniqueId": "REF_1", "Title": "On Links", "JournalName": "J. Hypertext", "Doi": "10.1/abc"},
        {"ReferenceUniqueId": "REF_2", "Title": "Anchors", "JournalName": "Web Q.", "Doi": "10.1/def"},
    ]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep ConfigManager away from the real user config directory."""
    monkeypatch.setenv("LINK_TOOLKIT_CONFIG_DIR", str(tmp_path / "user_config"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()
