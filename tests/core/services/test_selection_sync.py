import pytest

from link_toolkit.core.models import LinkKind, VisibilityState
from link_toolkit.core.services.selection_sync import (
    VISUAL_SELECTION_MARKER_NAME,
    SelectionSyncStateMachine,
)


@pytest.fixture
def machine(editor):
    return SelectionSyncStateMachine(editor)


def test_starts_hidden(machine):
    assert machine.state is VisibilityState.HIDDEN
    assert not machine.is_subscribed
    assert not machine.has_fake_selection


def test_open_requires_enabled_command(machine, editor):
    editor.command_enabled = False

    assert machine.open() is False
    assert machine.state is VisibilityState.HIDDEN
    assert editor.markers == {}
    assert editor.listeners == []


def test_open_over_text_marks_exact_range(machine, editor):
    assert machine.open() is True

    assert machine.state is VisibilityState.VISIBLE
    assert machine.is_subscribed
    assert editor.markers[VISUAL_SELECTION_MARKER_NAME] == ((3, 8), True)


def test_open_at_container_end_extends_back_over_boundary(machine, editor):
    editor.start_at_end = True
    editor.non_content_start = 1

    machine.open()

    assert editor.markers[VISUAL_SELECTION_MARKER_NAME] == ((1, 8), True)


def test_reopen_updates_existing_marker(machine, editor):
    machine.open()
    editor.range = (4, 4)

    assert machine.open() is True

    assert ("update_marker", VISUAL_SELECTION_MARKER_NAME, (4, 4)) in editor.calls
    assert len(editor.listeners) == 1


def test_open_over_link_installs_no_marker(machine, editor):
    editor.place_in_link("abbr_1")

    machine.open()

    assert machine.is_visible
    assert editor.markers == {}
    assert not machine.has_fake_selection


def test_selection_moving_to_other_block_hides(machine, editor):
    machine.open()

    editor.block = object()
    editor.tick()

    assert machine.state is VisibilityState.HIDDEN
    assert editor.markers == {}
    assert editor.subscriptions[0].released
    assert editor.listeners == []


def test_tick_in_same_block_keeps_surface(machine, editor):
    machine.open()

    editor.range = (3, 9)
    editor.tick()
    editor.tick()

    assert machine.is_visible


def test_leaving_link_hides(machine, editor):
    editor.place_in_link("https://x.test")
    machine.open()

    editor.place_in_text()
    editor.tick()

    assert machine.state is VisibilityState.HIDDEN


def test_expanding_within_same_link_keeps_surface(machine, editor):
    editor.place_in_link("REF_1")
    machine.open()

    # Selection grows inside the same link; block identity changes too
    editor.range = (0, 12)
    editor.block = object()
    editor.tick()

    assert machine.is_visible


def test_ticks_after_close_are_ignored(machine, editor):
    machine.open()
    handler = editor.listeners[0]
    machine.close()

    editor.block = object()
    handler()

    assert machine.state is VisibilityState.HIDDEN


def test_close_without_marker_is_safe(machine, editor):
    assert machine.close() is False

    machine.open()
    del editor.markers[VISUAL_SELECTION_MARKER_NAME]
    assert machine.close() is True
    assert ("remove_marker", VISUAL_SELECTION_MARKER_NAME) not in editor.calls


def test_commit_encodes_applies_and_hides(machine, editor):
    machine.open()

    stored = machine.commit(LinkKind.ABBREVIATION, "WHO")

    assert stored == "abbr_WHO"
    assert editor.applied == [((3, 8), "abbr_WHO")]
    # Marker gone before the attribute is written
    names = [c[0] for c in editor.calls]
    assert names.index("remove_marker") < names.index("apply_link_attribute")
    assert machine.state is VisibilityState.HIDDEN


def test_commit_while_hidden_leaves_document_alone(machine, editor):
    assert machine.commit(LinkKind.INTERNAL, "scope") is None

    assert editor.applied == []
    assert machine.state is VisibilityState.HIDDEN

    machine.open()
    machine.close()
    assert machine.commit(LinkKind.INTERNAL, "scope") is None
    assert editor.applied == []


def test_unlink_removes_attribute_even_without_link(machine, editor):
    machine.unlink()
    machine.unlink()

    assert editor.removed == [(3, 8), (3, 8)]
    assert machine.state is VisibilityState.HIDDEN


def test_listeners_observe_transitions(machine, editor):
    seen = []

    def broken(old, new):
        raise RuntimeError("boom")

    machine.add_listener(broken)
    machine.add_listener(lambda old, new: seen.append((old, new)))

    machine.open()
    machine.close()

    assert seen == [
        (VisibilityState.HIDDEN, VisibilityState.VISIBLE),
        (VisibilityState.VISIBLE, VisibilityState.HIDDEN),
    ]


def test_custom_marker_name(editor):
    machine = SelectionSyncStateMachine(editor, marker_name="pending-link")

    machine.open()

    assert "pending-link" in editor.markers
