"""Tests for the thread inactivity tracker."""

import pytest
from ticketbot.services.thread_inactivity import ThreadInactivityTracker


@pytest.fixture
def tracker(clock):
    return ThreadInactivityTracker(
        threshold_seconds=60, max_age_seconds=2 * 60 * 60, clock=clock
    )


def _poll(tracker):
    """Collect due threads and mark them asked, like the background poll."""
    due = tracker.due_for_prompt()
    for entry in due:
        tracker.mark_asked(entry.thread_id)
    return [entry.thread_id for entry in due]


@pytest.mark.unit
def test_silent_thread_is_due_exactly_once(tracker, clock):
    tracker.track("t1", owner_id="owner")

    clock.advance(59)
    assert _poll(tracker) == []

    clock.advance(2)
    assert _poll(tracker) == ["t1"]
    assert _poll(tracker) == []

    clock.advance(15)
    assert _poll(tracker) == []


@pytest.mark.unit
def test_creator_reply_stops_tracking(tracker, clock):
    tracker.track("t1", owner_id="owner")
    clock.advance(30)
    tracker.on_message("t1", author_id="owner", is_staff=False)

    clock.advance(60)
    assert _poll(tracker) == []
    assert "t1" not in tracker


@pytest.mark.unit
def test_other_user_does_not_stop_tracking_when_owner_known(tracker, clock):
    tracker.track("t1", owner_id="owner")
    tracker.on_message("t1", author_id="someone-else", is_staff=False)

    clock.advance(61)
    assert _poll(tracker) == ["t1"]


@pytest.mark.unit
def test_any_user_stops_tracking_when_owner_unknown(tracker):
    tracker.track("t1")
    tracker.on_message("t1", author_id="anyone", is_staff=False)
    assert "t1" not in tracker


@pytest.mark.unit
def test_staff_message_stops_tracking(tracker):
    tracker.track("t1", owner_id="owner")
    tracker.on_message("t1", author_id="staff", is_staff=True)
    assert "t1" not in tracker


@pytest.mark.unit
def test_message_in_untracked_thread_is_ignored(tracker):
    tracker.on_message("unknown", author_id="x", is_staff=False)
    assert len(tracker) == 0


@pytest.mark.unit
def test_threads_past_ceiling_are_dropped(tracker, clock):
    tracker.track("t1", owner_id="owner")
    clock.advance(2 * 60 * 60 + 1)

    assert tracker.due_for_prompt() == []
    assert "t1" not in tracker


@pytest.mark.unit
def test_sweep_removes_old_entries(tracker, clock):
    tracker.track("old", owner_id="a")
    clock.advance(60 * 60)
    tracker.track("fresh", owner_id="b")
    clock.advance(60 * 60 + 1)

    assert tracker.sweep_expired() == 1
    assert "fresh" in tracker
