import math

import pytest

from caret.settings import AnimationSettings, MOVEMENT_EPSILON
from caret.tracker import CaretPositionTracker


@pytest.fixture
def tracker():
    return CaretPositionTracker(AnimationSettings(adaptive_speed=False, smoothness=0.15))


def test_first_sight_is_settled(tracker):
    info = tracker.sync("a", (40.0, 60.0))
    pos = tracker.get("a")
    assert not info.moving
    assert (pos.current_x, pos.current_y, pos.target_x, pos.target_y) == (40.0, 60.0, 40.0, 60.0)


def test_sync_moves_target_only(tracker):
    tracker.sync("a", (100.0, 0.0))
    info = tracker.sync("a", (200.0, 0.0))
    pos = tracker.get("a")
    assert info.moving and not info.teleported
    assert pos.current_x == 100.0
    assert pos.target_x == 200.0


def test_teleport_snaps_immediately(tracker):
    tracker.sync("a", (0.0, 0.0))
    info = tracker.sync("a", (2000.0, 0.0))
    pos = tracker.get("a")
    assert info.teleported and not info.moving
    assert (pos.current_x, pos.target_x) == (2000.0, 2000.0)
    assert not tracker.advance()


def test_vertical_teleport_snaps_too(tracker):
    tracker.sync("a", (0.0, 0.0))
    assert tracker.sync("a", (0.0, -1500.0)).teleported
    assert tracker.get("a").current_y == -1500.0


def test_teleport_distance_is_configurable():
    tracker = CaretPositionTracker(AnimationSettings(teleport_distance=50.0))
    tracker.sync("a", (0.0, 0.0))
    assert tracker.sync("a", (60.0, 0.0)).teleported


def test_one_tick_covers_the_smoothness_fraction(tracker):
    tracker.sync("a", (100.0, 0.0))
    tracker.sync("a", (200.0, 0.0))
    assert tracker.advance()
    assert tracker.get("a").current_x == pytest.approx(115.0)


def test_converges_without_overshoot(tracker):
    tracker.sync("a", (0.0, 0.0))
    tracker.sync("a", (500.0, -300.0))

    ticks = 0
    while tracker.advance():
        pos = tracker.get("a")
        assert pos.current_x <= 500.0
        assert pos.current_y >= -300.0
        ticks += 1
        assert ticks < 1000

    pos = tracker.get("a")
    assert abs(pos.current_x - 500.0) <= MOVEMENT_EPSILON
    assert abs(pos.current_y + 300.0) <= MOVEMENT_EPSILON
    # (1 - 0.15)^n * 500 < 0.01 needs about 67 ticks
    assert 60 < ticks < 80


def test_settled_ticks_change_nothing(tracker):
    tracker.sync("a", (10.0, 10.0))
    tracker.sync("a", (10.005, 10.0))
    before = tracker.get("a").current_x
    assert not tracker.advance()
    assert not tracker.advance()
    assert tracker.get("a").current_x == before
    assert not tracker.sync("a", (10.005, 10.0)).moving


def test_adaptive_speed_picks_factor_by_distance():
    settings = AnimationSettings(adaptive_speed=True, smoothness=0.1, catchup_speed=0.5, max_catchup_speed=0.8)
    tracker = CaretPositionTracker(settings)
    for caret_id, distance in (("near", 5.0), ("mid", 15.0), ("far", 30.0)):
        tracker.sync(caret_id, (0.0, 0.0))
        tracker.sync(caret_id, (distance, 0.0))

    tracker.advance(char_width=10)

    assert tracker.get("near").current_x == pytest.approx(0.5)
    assert tracker.get("mid").current_x == pytest.approx(7.5)
    assert tracker.get("far").current_x == pytest.approx(24.0)


def test_prune_removes_only_dead_carets(tracker):
    for i, caret_id in enumerate("abc"):
        tracker.sync(caret_id, (i * 10.0, 0.0))
    tracker.sync("a", (50.0, 0.0))
    kept_a = tracker.get("a")

    removed = tracker.prune(["a", "c"])

    assert removed == ["b"]
    assert "b" not in tracker and len(tracker) == 2
    assert tracker.get("a") is kept_a
    assert (kept_a.current_x, kept_a.target_x) == (0.0, 50.0)


def test_reset_all_settles_everything(tracker):
    tracker.sync("a", (0.0, 0.0))
    tracker.sync("a", (100.0, 0.0))
    tracker.reset_all({"a": (300.0, 20.0), "z": (1.0, 2.0)})
    assert not tracker.any_moving()
    assert tracker.get("a").current_x == 300.0
    assert "z" in tracker


def test_nan_observation_keeps_last_good_state(tracker):
    tracker.sync("a", (10.0, 10.0))
    tracker.sync("a", (float("nan"), 10.0))
    pos = tracker.get("a")
    assert (pos.current_x, pos.target_x) == (10.0, 10.0)


def test_caret_first_seen_at_nan_recovers(tracker):
    tracker.sync("a", (float("nan"), 0.0))
    assert not tracker.get("a").is_finite()
    assert not tracker.advance()

    tracker.sync("a", (42.0, 8.0))
    pos = tracker.get("a")
    assert pos.is_finite()
    assert (pos.current_x, pos.current_y) == (42.0, 8.0)
    assert not math.isnan(pos.target_x)
