"""Tests for orphaned-session detection and resolution."""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from tally.schemas.recovery import Disposition
from tally.services.recovery import RecoveryReconciler, parse_disposition


class ScriptedPrompt:
    def __init__(self, answer):
        self.answer = answer
        self.notices = []

    def __call__(self, notice):
        self.notices.append(notice)
        return self.answer


@pytest.fixture
def orphan(make_session):
    return make_session(start_time=datetime(2024, 1, 14, 9, 0, 0), project="Legacy")


def test_no_orphan_is_a_no_op(store, clock, make_session):
    make_session(start_time=datetime(2024, 1, 15, 8, 0))
    prompt = ScriptedPrompt("d")

    assert RecoveryReconciler(store, clock, prompt).check() is None
    assert prompt.notices == []
    assert store.find_active_session() is not None


def test_notice_carries_elapsed_and_metadata(store, clock, orphan):
    prompt = ScriptedPrompt("keep")

    RecoveryReconciler(store, clock, prompt).check()

    notice = prompt.notices[0]
    assert notice.session.project == "Legacy"
    assert notice.elapsed_seconds == 24 * 3600


@pytest.mark.parametrize("answer", ["k", "keep", " KEEP "])
def test_keep_leaves_orphan_untouched(store, clock, orphan, answer):
    outcome = RecoveryReconciler(store, clock, ScriptedPrompt(answer)).check()

    assert outcome.disposition is Disposition.KEEP
    assert outcome.recognized
    session = store.get(orphan.id)
    assert session.status == "running"
    assert session.end_time is None


def test_kept_orphan_is_offered_again(store, clock, orphan):
    reconciler = RecoveryReconciler(store, clock, ScriptedPrompt("k"))
    reconciler.check()
    assert reconciler.check() is not None


@pytest.mark.parametrize("answer", ["d", "discard"])
def test_discard_deletes_orphan(store, clock, orphan, answer):
    outcome = RecoveryReconciler(store, clock, ScriptedPrompt(answer)).check()

    assert outcome.disposition is Disposition.DISCARD
    assert outcome.session.id == orphan.id
    assert store.get(orphan.id) is None
    assert store.find_active_session() is None


@pytest.mark.parametrize("answer", ["c", "close", "s", "stop"])
def test_close_running_orphan_at_end_of_day(store, clock, orphan, answer):
    outcome = RecoveryReconciler(store, clock, ScriptedPrompt(answer)).check()

    assert outcome.disposition is Disposition.CLOSE
    session = store.get(orphan.id)
    assert session.status == "completed"
    assert session.end_time == datetime(2024, 1, 14, 23, 59, 59)
    assert session.total_seconds == 14 * 3600 + 59 * 60 + 59
    assert outcome.total_seconds == session.total_seconds


def test_close_paused_orphan_ignores_open_pause(store, clock, make_session):
    orphan = make_session(
        start_time=datetime(2024, 1, 14, 20, 0, 0),
        status="paused",
        paused_seconds=600,
        pause_time=datetime(2024, 1, 14, 21, 0, 0),
    )

    RecoveryReconciler(store, clock, ScriptedPrompt("c")).check()

    session = store.get(orphan.id)
    assert session.total_seconds == (4 * 3600 - 1) - 600
    assert session.pause_time is None
    assert session.status == "completed"


def test_close_never_goes_negative(store, clock, make_session):
    orphan = make_session(start_time=datetime(2024, 1, 14, 23, 59, 0), paused_seconds=5000)

    RecoveryReconciler(store, clock, ScriptedPrompt("close")).check()

    assert store.get(orphan.id).total_seconds == 0


@pytest.mark.parametrize("answer", ["", "maybe", "x"])
def test_unrecognised_answer_keeps_orphan(store, clock, orphan, answer):
    outcome = RecoveryReconciler(store, clock, ScriptedPrompt(answer)).check()

    assert outcome.disposition is Disposition.KEEP
    assert not outcome.recognized
    assert store.get(orphan.id).status == "running"


def test_parse_disposition():
    assert parse_disposition(None) is None
    assert parse_disposition("Discard") is Disposition.DISCARD


def test_store_failure_propagates(clock):
    store = MagicMock()
    store.find_orphan_session.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    prompt = ScriptedPrompt("d")

    with pytest.raises(OperationalError):
        RecoveryReconciler(store, clock, prompt).check()
    assert prompt.notices == []
