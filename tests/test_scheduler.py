import pytest

from caret.blink import BlinkClock
from caret.diagnostics import RateLimitedLog
from caret.scheduler import AnimationScheduler, PeriodicTick, TimerQueue
from caret.settings import BlinkStyle
from caret.tracker import CaretPositionTracker
from conftest import FakeSurface


def make_scheduler(surface, settings, timers, probe, now=0):
    tracker = CaretPositionTracker(settings)
    scheduler = AnimationScheduler(surface, settings, tracker, BlinkClock(now), timers, probe)
    return scheduler, tracker


def test_periodic_tick_fires_on_period_and_skips_missed_ticks():
    timers = TimerQueue()
    fired = []
    tick = PeriodicTick(timers, 10, fired.append)
    tick.start(0)

    timers.run_due(5)
    timers.run_due(10)
    timers.run_due(20)
    timers.run_due(100) # Way late: one callback, not eight
    timers.run_due(105)
    timers.run_due(110)

    assert fired == [10, 20, 100, 110]


def test_cancelled_tick_leaves_the_queue():
    timers = TimerQueue()
    fired = []
    tick = PeriodicTick(timers, 10, fired.append)
    tick.start(0)
    tick.cancel()
    timers.run_due(50)
    assert fired == []
    assert len(timers) == 0


def test_position_tick_advances_and_requests_repaint(settings, timers, probe):
    surface = FakeSurface()
    scheduler, tracker = make_scheduler(surface, settings, timers, probe)
    tracker.sync("a", (100.0, 0.0))
    tracker.sync("a", (200.0, 0.0))

    scheduler.ensure_started(0)
    timers.run_due(10)

    assert tracker.get("a").current_x == pytest.approx(115.0)
    assert surface.repaints == 1


def test_settled_tick_requests_nothing(settings, timers, probe):
    surface = FakeSurface()
    scheduler, tracker = make_scheduler(surface, settings, timers, probe)
    tracker.sync("a", (100.0, 0.0))

    scheduler.ensure_started(0)
    for now in range(10, 200, 10):
        timers.run_due(now)

    assert surface.repaints == 0


def test_solid_style_needs_no_blink_tick(settings, timers, probe):
    scheduler, _ = make_scheduler(FakeSurface(), settings, timers, probe)
    scheduler.ensure_started(0)
    assert scheduler.position_tick.active
    assert scheduler.blink_tick is None


def test_blink_tick_repaints_only_while_idle(settings, timers, probe):
    settings.blink_style = BlinkStyle.SMOOTH
    surface = FakeSurface()
    scheduler, _ = make_scheduler(surface, settings, timers, probe, now=0)
    scheduler.ensure_started(0)

    for now in range(10, 101, 10): # Inside the 100ms resume delay
        timers.run_due(now)
    assert surface.repaints == 0

    timers.run_due(110)
    timers.run_due(120)
    assert surface.repaints == 2


def test_blink_tick_stops_when_style_turns_solid_and_comes_back(settings, timers, probe):
    settings.blink_style = BlinkStyle.BLINK
    scheduler, _ = make_scheduler(FakeSurface(), settings, timers, probe)
    scheduler.ensure_started(0)

    settings.blink_style = BlinkStyle.SOLID
    timers.run_due(10)
    assert scheduler.blink_tick is None

    settings.blink_style = BlinkStyle.PHASE
    scheduler.ensure_started(20)
    assert scheduler.blink_tick.active


def test_disposed_surface_cancels_both_ticks_for_good(settings, timers, probe):
    settings.blink_style = BlinkStyle.BLINK
    surface = FakeSurface()
    scheduler, tracker = make_scheduler(surface, settings, timers, probe)
    tracker.sync("a", (0.0, 0.0))
    tracker.sync("a", (50.0, 0.0))
    scheduler.ensure_started(0)

    surface.disposed = True
    timers.run_due(10)

    assert scheduler.cancelled
    assert not scheduler.position_tick.active
    assert not scheduler.blink_tick.active
    assert len(timers) == 0
    assert tracker.get("a").current_x == 0.0

    scheduler.ensure_started(20)
    assert len(timers) == 0


def test_adaptive_speed_measures_char_width_once(settings, timers, probe):
    settings.update(adaptive_speed=True, smoothness=0.1, catchup_speed=0.5, max_catchup_speed=0.8)
    surface = FakeSurface(char_width=10)
    scheduler, tracker = make_scheduler(surface, settings, timers, probe)
    tracker.sync("a", (0.0, 0.0))
    tracker.sync("a", (100.0, 0.0))

    scheduler.ensure_started(0)
    for now in (10, 20, 30):
        timers.run_due(now)

    assert surface.measured == ["m"]
    assert tracker.get("a").current_x == pytest.approx(80.0 + 20.0 * 0.5 + 10.0 * 0.1)


def test_failing_tick_is_logged_and_keeps_running(settings, timers, probe):
    class Broken(FakeSurface):
        def request_repaint(self):
            raise RuntimeError("host hiccup")

    logged = []

    class Log:
        def failure(self, key, exc):
            logged.append((key, str(exc)))

    surface = Broken()
    tracker = CaretPositionTracker(settings)
    scheduler = AnimationScheduler(surface, settings, tracker, BlinkClock(0), timers, probe, log=Log())
    tracker.sync("a", (0.0, 0.0))
    tracker.sync("a", (100.0, 0.0))
    scheduler.ensure_started(0)

    timers.run_due(10)
    timers.run_due(20)

    assert logged == [("position tick", "host hiccup")] * 2
    assert scheduler.position_tick.active


def test_rate_limited_log_collapses_repeats():
    class Recorder:
        def __init__(self):
            self.calls = []

        def warning(self, msg, *args, **kwargs):
            self.calls.append(msg % args)

    now = [0.0]
    recorder = Recorder()
    log = RateLimitedLog(recorder, interval=5.0, clock=lambda: now[0])
    error = ValueError("boom")

    assert log.failure("paint", error)
    for _ in range(10):
        now[0] += 0.1
        assert not log.failure("paint", error)
    assert log.suppressed("paint") == 10

    now[0] = 6.0
    assert log.failure("paint", error)
    assert len(recorder.calls) == 2
    assert "10 similar" in recorder.calls[1]


def test_position_tick_leaves_unfocused_carets_alone(settings, timers, probe):
    surface = FakeSurface()
    surface.focused = False
    scheduler, tracker = make_scheduler(surface, settings, timers, probe)
    tracker.sync("a", (100.0, 0.0))
    tracker.sync("a", (200.0, 0.0))

    scheduler.ensure_started(0)
    for now in (10, 20, 30):
        timers.run_due(now)

    assert tracker.get("a").current_x == 100.0
    assert surface.repaints == 0
    assert scheduler.position_tick.active

    surface.focused = True
    timers.run_due(40)
    assert tracker.get("a").current_x == pytest.approx(115.0)
    assert surface.repaints == 1
