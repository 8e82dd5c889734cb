"""Tests for nihush.core.session – timed game session."""

from __future__ import annotations

import random
from typing import List

import pytest

from nihush.core.answer_buffer import strip_separators
from nihush.core.personalities import Personality
from nihush.core.round import OutcomeKind, RoundOutcome
from nihush.core.session import (
    COMPLETED_MESSAGE,
    TIMEOUT_MESSAGE,
    EventKind,
    GameSession,
    SessionEvent,
)
from nihush.core.settings import GameSettings


def _answer(session: GameSession) -> str:
    return strip_separators(session.current_round.personality.name)


@pytest.fixture()
def events() -> List[SessionEvent]:
    return []


@pytest.fixture()
def session(scheduler, events) -> GameSession:
    s = GameSession(scheduler, rng=random.Random(7))
    s.subscribe(events.append)
    return s


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------

class TestStart:
    def test_initial_values(self, session: GameSession, pool):
        session.start(pool)
        assert session.score == 0
        assert session.remaining_seconds == 120
        assert session.level_index == 0
        assert session.active
        assert session.running
        assert session.current_round is not None
        assert session.current_round.ladder.current_clue_index() == 0

    def test_queue_is_shuffled_copy(self, session: GameSession, pool):
        original = list(pool)
        session.start(pool)
        assert pool == original
        assert sorted(p.name for p in session.queue) == sorted(p.name for p in pool)

    def test_shuffle_uses_rng(self, scheduler, pool):
        a = GameSession(scheduler, rng=random.Random(3))
        b = GameSession(scheduler, rng=random.Random(3))
        a.start(pool)
        b.start(pool)
        assert a.queue == b.queue

    def test_one_timer(self, session: GameSession, scheduler, pool):
        session.start(pool)
        assert len(scheduler.active_timers(repeating=True)) == 1

    def test_restart_cancels_old_timer(self, session: GameSession, scheduler, pool):
        session.start(pool)
        first = scheduler.active_timers(repeating=True)[0]
        session.start(pool)
        assert first.cancelled
        assert len(scheduler.active_timers(repeating=True)) == 1
        scheduler.advance(1000)
        assert session.remaining_seconds == 119

    def test_events(self, session: GameSession, events, pool):
        session.start(pool)
        assert [e.kind for e in events] == [EventKind.STARTED, EventKind.ROUND_LOADED]
        snap = events[-1].snapshot
        assert snap.clue_text == session.current_round.personality.clues[0]
        assert snap.clue_points == 10
        assert snap.total_levels == 3

    def test_empty_pool_ends_immediately(self, session: GameSession, scheduler):
        session.start([])
        assert not session.running
        assert session.result.completed_all is True
        assert scheduler.active_timers() == []


# ---------------------------------------------------------------------------
# timer
# ---------------------------------------------------------------------------

class TestTimer:
    def test_tick_decrements(self, session: GameSession, scheduler, pool):
        session.start(pool)
        scheduler.advance(3000)
        assert session.remaining_seconds == 117

    def test_timeout_ends_session(self, session: GameSession, pool):
        session.start(pool)
        for _ in range(120):
            session.tick()
        assert not session.running
        assert not session.active
        assert session.result.completed_all is False
        assert session.result.message == TIMEOUT_MESSAGE
        assert session.score == 0

    def test_timeout_keeps_score(self, session: GameSession, pool):
        session.start(pool)
        session.set_letters(_answer(session))
        score = session.score
        for _ in range(120):
            session.tick()
        assert session.result.score == score == 10

    def test_timer_cancelled_once(self, session: GameSession, scheduler, pool):
        session.start(pool)
        timer = scheduler.active_timers(repeating=True)[0]
        scheduler.advance(120_000)
        assert timer.cancel_calls == 1
        session.end(completed_all=False)
        assert timer.cancel_calls == 1

    def test_ticks_after_end_ignored(self, session: GameSession, pool):
        session.start(pool)
        session.end(completed_all=False)
        session.tick()
        assert session.remaining_seconds == 120

    def test_timeout_abandons_open_round(self, session: GameSession, pool):
        session.start(pool)
        session.set_letters(_answer(session)[:2])
        for _ in range(120):
            session.tick()
        assert session.set_letters(_answer(session)) is None
        assert session.score == 0


# ---------------------------------------------------------------------------
# round outcomes
# ---------------------------------------------------------------------------

class TestRoundOutcomes:
    def test_solve_adds_points_and_freezes_input(self, session: GameSession, scheduler, pool):
        session.start(pool)
        outcome = session.set_letters(_answer(session))
        assert outcome == RoundOutcome.solved(10)
        assert session.score == 10
        assert session.level_index == 1
        assert not session.active
        assert session.type_character("א") is None
        assert session.request_next_clue() is False

    def test_next_round_after_solved_delay(self, session: GameSession, scheduler, pool):
        session.start(pool)
        first = session.current_round
        session.set_letters(_answer(session))
        scheduler.advance(999)
        assert session.current_round is first
        scheduler.advance(1)
        assert session.current_round is not first
        assert session.active
        assert session.current_round.ladder.current_clue_index() == 0

    def test_next_round_after_give_up_delay(self, session: GameSession, scheduler, pool):
        session.start(pool)
        first = session.current_round
        for _ in range(3):
            session.request_next_clue()
        assert session.give_up() == RoundOutcome.gave_up()
        assert session.score == 0
        scheduler.advance(1000)
        assert session.current_round is first
        scheduler.advance(1000)
        assert session.current_round is not first

    def test_solve_at_later_stage(self, session: GameSession, pool):
        session.start(pool)
        session.request_next_clue()
        session.request_next_clue()
        assert session.set_letters(_answer(session)) == RoundOutcome.solved(5)
        assert session.score == 5

    def test_exhausting_queue_completes(self, session: GameSession, scheduler, pool):
        session.start(pool)
        session.set_letters(_answer(session))
        scheduler.advance(1000)
        for _ in range(3):
            session.request_next_clue()
        session.give_up()
        scheduler.advance(2000)
        session.set_letters(_answer(session))
        assert not session.running
        assert session.result.completed_all is True
        assert session.result.message == COMPLETED_MESSAGE
        assert session.score == 20
        assert session.remaining_seconds > 0

    def test_incorrect_is_feedback_only(self, session: GameSession, events, pool):
        session.start(pool)
        letters = len(_answer(session))
        outcome = session.set_letters("א" * letters)
        assert outcome.kind is OutcomeKind.INCORRECT
        assert session.active
        assert session.level_index == 0
        assert events[-1].kind is EventKind.INCORRECT

    def test_events_for_solve(self, session: GameSession, events, pool):
        session.start(pool)
        session.set_letters(_answer(session))
        kinds = [e.kind for e in events]
        assert kinds[-1] is EventKind.ROUND_SOLVED
        assert events[-1].outcome == RoundOutcome.solved(10)
        assert events[-1].snapshot.score == 10


# ---------------------------------------------------------------------------
# pending transitions
# ---------------------------------------------------------------------------

class TestPendingTransitions:
    def test_timeout_during_delay(self, session: GameSession, scheduler, pool):
        session.start(pool)
        for _ in range(119):
            session.tick()
        session.set_letters(_answer(session))
        scheduler.advance(1000)
        assert not session.running
        assert session.result.completed_all is False
        assert not session.active
        assert session.level_index == 1

    def test_stale_callback_after_restart(self, session: GameSession, scheduler, pool):
        session.start(pool)
        session.set_letters(_answer(session))
        stale = [t for t in scheduler.timers if not t.repeating][-1]
        session.start(pool)
        fresh_round = session.current_round
        assert stale.cancelled
        # fire it anyway; the generation check must drop it
        stale.callback()
        assert session.current_round is fresh_round
        assert session.level_index == 0

    def test_stale_callback_after_end(self, session: GameSession, scheduler, pool):
        session.start(pool)
        session.set_letters(_answer(session))
        pending = [t for t in scheduler.timers if not t.repeating][-1]
        session.end(completed_all=False)
        pending.callback()
        assert not session.running
        assert not session.active


# ---------------------------------------------------------------------------
# end and single personality scenario
# ---------------------------------------------------------------------------

class TestEnd:
    def test_end_is_idempotent(self, session: GameSession, events, pool):
        session.start(pool)
        session.end(completed_all=False)
        session.end(completed_all=True)
        ended = [e for e in events if e.kind is EventKind.ENDED]
        assert len(ended) == 1
        assert ended[0].result.completed_all is False

    def test_eligibility(self, session: GameSession, pool):
        session.start(pool)
        session.end(completed_all=False)
        assert session.result.eligible_for_leaderboard is False

    def test_single_personality_solved_first_clue(self, scheduler, ben_gurion: Personality):
        session = GameSession(scheduler)
        session.start([ben_gurion])
        outcome = session.set_letters("דודבןגוריון")
        assert outcome == RoundOutcome.solved(10)
        assert session.score == 10
        assert session.result.completed_all is True
        assert session.result.eligible_for_leaderboard is True
        assert scheduler.active_timers() == []

    def test_single_personality_give_up(self, scheduler, ben_gurion: Personality):
        session = GameSession(scheduler)
        session.start([ben_gurion])
        for _ in range(3):
            session.request_next_clue()
        session.give_up()
        assert session.score == 0
        assert session.result.completed_all is True

    def test_custom_settings(self, scheduler, ben_gurion: Personality):
        settings = GameSettings(duration_seconds=5, clue_points=(4, 3, 2, 1))
        session = GameSession(scheduler, settings=settings)
        session.start([ben_gurion])
        session.request_next_clue()
        session.set_letters("דודבןגוריון")
        assert session.score == 3

    def test_listener_errors_do_not_break_session(self, scheduler, pool):
        session = GameSession(scheduler)

        def _boom(event: SessionEvent) -> None:
            raise RuntimeError("render failed")

        session.subscribe(_boom)
        session.start(pool)
        assert session.active

    def test_unsubscribe(self, scheduler, pool):
        session = GameSession(scheduler)
        seen: List[SessionEvent] = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()
        session.start(pool)
        assert seen == []
