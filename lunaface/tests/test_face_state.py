"""Tests for the face state machine."""

from __future__ import annotations

import pytest

from lunaface.core.face_state import (
    BLINK_BASE_S,
    BLINK_DURATION_S,
    BLINK_JITTER_S,
    DROOL_FIRST_MAX_S,
    DROOL_FIRST_MIN_S,
    DROOL_NEXT_MAX_S,
    DROOL_NEXT_MIN_S,
    SLEEPY_BLINK_BASE_S,
    SLEEPY_BLINK_DURATION_S,
    SLEEPY_BLINK_JITTER_S,
    FaceStateMachine,
)
from lunaface.core.states import FaceState


@pytest.fixture
def sm(clock, rng) -> FaceStateMachine:
    return FaceStateMachine(clock=clock, rng=rng)


class TestTransitions:
    def test_starts_idle_with_blink_scheduled(self, sm, clock):
        assert sm.state == FaceState.IDLE
        delay = sm.blink.next_at - clock()
        assert BLINK_BASE_S <= delay <= BLINK_BASE_S + BLINK_JITTER_S

    def test_any_state_reachable_from_any_state(self, sm):
        for a in FaceState:
            for b in FaceState:
                sm.set_state(a)
                sm.set_state(b)
                assert sm.state == b

    def test_string_labels_accepted(self, sm):
        sm.set_state("happy")
        assert sm.state == FaceState.HAPPY

    def test_unknown_label_ignored(self, sm):
        sm.set_state(FaceState.HAPPY)
        sm.set_state("banana")
        assert sm.state == FaceState.HAPPY

    def test_listeners_see_prev_and_new(self, sm):
        seen = []
        sm.subscribe(lambda prev, new: seen.append((prev, new)))
        sm.set_state(FaceState.SPEAKING)
        assert seen == [(FaceState.IDLE, FaceState.SPEAKING)]
        assert sm.prev_state == FaceState.IDLE


class TestAutoRevert:
    def test_blink_returns_to_idle(self, sm, clock):
        sm.set_state(FaceState.BLINK)
        clock.advance(0.200)
        sm.update()
        assert sm.state == FaceState.IDLE

    def test_blink_not_reverted_early(self, sm, clock):
        sm.set_state(FaceState.BLINK)
        clock.advance(0.100)
        sm.update()
        assert sm.state == FaceState.BLINK

    @pytest.mark.parametrize(
        ("state", "dwell"),
        [(FaceState.SURPRISED, 1.4), (FaceState.LOL, 2.0), (FaceState.ANGRY, 2.2)],
    )
    def test_transient_moods_revert_after_dwell(self, sm, clock, state, dwell):
        sm.set_state(state)
        clock.advance(dwell - 0.01)
        sm.update()
        assert sm.state == state
        clock.advance(0.02)
        sm.update()
        assert sm.state == FaceState.IDLE
        assert not sm.revert_pending

    @pytest.mark.parametrize(
        "state",
        [FaceState.IDLE, FaceState.HAPPY, FaceState.SLEEPY, FaceState.SLEEPING, FaceState.SPEAKING],
    )
    def test_sticky_states_never_revert(self, sm, clock, state):
        sm.set_state(state)
        assert not sm.revert_pending
        clock.advance(30.0)
        sm.update()
        assert sm.state == state

    def test_new_mood_cancels_stale_revert(self, sm, clock):
        sm.set_state(FaceState.SURPRISED)
        clock.advance(1.0)
        sm.update()
        sm.set_state(FaceState.ANGRY)

        # Past the surprised deadline: angry must hold.
        clock.advance(0.5)
        sm.update()
        assert sm.state == FaceState.ANGRY

        # Angry's own dwell is measured from its entry.
        clock.advance(1.6)
        sm.update()
        assert sm.state == FaceState.ANGRY
        clock.advance(0.2)
        sm.update()
        assert sm.state == FaceState.IDLE

    def test_sticky_state_cancels_pending_revert(self, sm, clock):
        sm.set_state(FaceState.LOL)
        sm.set_state(FaceState.HAPPY)
        clock.advance(5.0)
        sm.update()
        assert sm.state == FaceState.HAPPY

    def test_only_one_revert_pending(self, sm, clock):
        sm.set_state(FaceState.SURPRISED)
        first = sm.revert_at
        clock.advance(0.5)
        sm.set_state(FaceState.LOL)
        assert sm.revert_pending
        assert sm.revert_at == pytest.approx(first + 0.5 + 0.6)


class TestBlink:
    def test_triangular_envelope(self, sm, clock):
        sm.set_state(FaceState.BLINK)
        assert sm.blink.duration == BLINK_DURATION_S
        assert sm.blink_amount() == pytest.approx(0.0)
        clock.advance(0.030)
        assert sm.blink_amount() == pytest.approx(0.5)
        clock.advance(0.030)
        assert sm.blink_amount() == pytest.approx(1.0)
        clock.advance(0.030)
        assert sm.blink_amount() == pytest.approx(0.5)

    def test_blink_ends_and_reschedules(self, sm, clock):
        sm.set_state(FaceState.BLINK)
        clock.advance(0.130)
        assert sm.blink_amount() == 0.0
        assert not sm.blink.active
        delay = sm.blink.next_at - clock()
        assert BLINK_BASE_S <= delay <= BLINK_BASE_S + BLINK_JITTER_S

    def test_blink_from_sleepy_is_slower(self, sm):
        sm.set_state(FaceState.SLEEPY)
        sm.set_state(FaceState.BLINK)
        assert sm.blink.duration == SLEEPY_BLINK_DURATION_S

    def test_sleepy_schedule_is_longer(self, sm, clock):
        sm.set_state(FaceState.SLEEPY)
        delay = sm.blink.next_at - clock()
        assert SLEEPY_BLINK_BASE_S <= delay <= SLEEPY_BLINK_BASE_S + SLEEPY_BLINK_JITTER_S

    def test_no_blink_is_zero(self, sm):
        assert sm.blink_amount() == 0.0

    def test_sleeping_is_always_closed(self, sm, clock):
        sm.set_state(FaceState.SLEEPING)
        assert sm.blink_amount() == 1.0
        sm.blink.active = True
        sm.blink.start = clock()
        for _ in range(10):
            clock.advance(0.05)
            assert sm.blink_amount() == 1.0

    def test_sleeping_cancels_active_blink(self, sm):
        sm.start_blink()
        sm.set_state(FaceState.SLEEPING)
        assert not sm.blink.active

    @pytest.mark.parametrize(
        "state",
        [FaceState.IDLE, FaceState.SLEEPY, FaceState.SPEAKING, FaceState.HAPPY],
    )
    def test_spontaneous_blink_states(self, sm, clock, state):
        sm.set_state(state)
        assert not sm.spontaneous_blink_due()
        clock.advance(10.0)
        assert sm.spontaneous_blink_due()
        sm.start_blink()
        assert not sm.spontaneous_blink_due()

    @pytest.mark.parametrize(
        "state",
        [FaceState.SLEEPING, FaceState.SURPRISED, FaceState.ANGRY, FaceState.LOL, FaceState.BLINK],
    )
    def test_no_spontaneous_blink_elsewhere(self, sm, clock, state):
        sm.set_state(state)
        clock.advance(10.0)
        assert not sm.spontaneous_blink_due()


class TestSleep:
    def test_entering_sleep_resets_timers(self, sm, clock):
        sm.set_state(FaceState.SLEEPING)
        sm.advance_sleep(0.5)
        assert sm.sleep.breath_phase == pytest.approx(0.5)

        sm.set_state(FaceState.IDLE)
        sm.set_state(FaceState.SLEEPING)
        assert sm.sleep.breath_phase == 0.0
        assert sm.sleep.drool is None
        delay = sm.sleep.drool_next_at - clock()
        assert DROOL_FIRST_MIN_S <= delay <= DROOL_FIRST_MAX_S

    def test_advance_is_noop_when_awake(self, sm):
        assert sm.advance_sleep(1.0) == 0.0
        assert sm.sleep.breath_phase == 0.0

    def test_breath_pulse_in_unit_range(self, sm, clock):
        sm.set_state(FaceState.SLEEPING)
        for _ in range(200):
            clock.advance(0.05)
            assert 0.0 <= sm.advance_sleep(0.05) <= 1.0

    def test_drool_lifecycle(self, sm, clock):
        sm.set_state(FaceState.SLEEPING)
        spawned = None
        despawned_at = None
        for _ in range(400):
            clock.advance(0.05)
            sm.advance_sleep(0.05)
            d = sm.sleep.drool
            if d is not None and spawned is None:
                spawned = d
                assert d.alpha <= 1.0
            if d is not None:
                assert 0.0 <= d.alpha <= 1.0
                assert d.radius <= d.max_radius
            if spawned is not None and d is None:
                despawned_at = clock()
                break

        assert spawned is not None
        assert spawned.fading
        assert despawned_at is not None
        delay = sm.sleep.drool_next_at - despawned_at
        assert DROOL_NEXT_MIN_S <= delay <= DROOL_NEXT_MAX_S

    def test_waking_clears_drool(self, sm, clock):
        sm.set_state(FaceState.SLEEPING)
        clock.advance(DROOL_FIRST_MAX_S + 0.1)
        sm.advance_sleep(0.05)
        assert sm.sleep.drool is not None
        sm.set_state(FaceState.BLINK)
        assert sm.sleep.drool is None


def test_snapshot_fields(sm):
    sm.set_state(FaceState.SURPRISED)
    snap = sm.snapshot()
    assert snap["state"] == "surprised"
    assert snap["revert_in_s"] == pytest.approx(1.4)
    assert snap["drool"] is None
