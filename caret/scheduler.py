import logging

from caret.diagnostics import diagnostics
from caret.settings import BlinkStyle, FALLBACK_CHAR

logger = logging.getLogger(__name__)


class TimerQueue:
    """
    Periodic callbacks run from the UI loop.

    The main loop calls run_due() once per iteration, right next to the event
    pump, so callbacks never overlap with painting.
    """

    def __init__(self):
        self._ticks = []

    def add(self, tick):
        if tick not in self._ticks:
            self._ticks.append(tick)

    def run_due(self, now):
        for tick in list(self._ticks):
            if tick.active and now >= tick.next_due:
                tick.fire(now)
        self._ticks = [tick for tick in self._ticks if tick.active]

    def __len__(self):
        return len(self._ticks)


class PeriodicTick:
    def __init__(self, queue, period_ms, callback):
        self.queue = queue
        self.period_ms = max(1, int(period_ms))
        self.callback = callback
        self.next_due = 0
        self.active = False

    def start(self, now):
        self.next_due = now + self.period_ms
        self.active = True
        self.queue.add(self)

    def cancel(self):
        self.active = False

    def fire(self, now):
        self.next_due += self.period_ms
        if self.next_due <= now: # Fell behind, don't replay missed ticks
            self.next_due = now + self.period_ms
        self.callback(now)


class AnimationScheduler:
    """
    Drives the position tick and the blink tick for one editor surface.

    Both ticks are started lazily by ensure_started() and stop themselves once
    the surface reports it is disposed. A cancelled scheduler never restarts;
    the engine builds a new one for the next surface.
    """

    def __init__(self, surface, settings, tracker, blink_clock, timers, refresh_probe, log=diagnostics):
        self.surface = surface
        self.settings = settings
        self.tracker = tracker
        self.blink_clock = blink_clock
        self.timers = timers
        self.refresh_probe = refresh_probe
        self.log = log

        self.position_tick = None
        self.blink_tick = None
        self.cancelled = False
        self._char_width = None # Width of FALLBACK_CHAR, measured once

    def ensure_started(self, now):
        if self.cancelled:
            return

        if self.position_tick is None:
            self.position_tick = PeriodicTick(self.timers, self.refresh_probe.period_ms(), self._on_position_tick)
            self.position_tick.start(now)
            logger.debug("Position tick started every %d ms", self.position_tick.period_ms)

        if self.blink_tick is None and self.settings.blink_style != BlinkStyle.SOLID:
            self.blink_tick = PeriodicTick(self.timers, self.refresh_probe.period_ms(), self._on_blink_tick)
            self.blink_tick.start(now)

    def cancel(self):
        if self.cancelled:
            return
        self.cancelled = True
        if self.position_tick is not None:
            self.position_tick.cancel()
        if self.blink_tick is not None:
            self.blink_tick.cancel()
        logger.debug("Scheduler for %r cancelled", self.surface)

    def _surface_gone(self) -> bool:
        if self.surface.is_disposed():
            self.cancel()
            return True
        return False

    def char_width(self):
        if self._char_width is None:
            self._char_width = self.surface.char_width(FALLBACK_CHAR)
        return self._char_width

    def _on_position_tick(self, now):
        if self._surface_gone():
            return
        if not self.settings.enabled:
            return
        try:
            # Nothing is painted without focus, carets hold still until it returns
            if not self.surface.has_focus():
                return
            char_width = self.char_width() if self.settings.adaptive_speed else 0
            # All carets are advanced before the repaint request goes out
            if self.tracker.advance(char_width):
                self.surface.request_repaint()
        except Exception as e:
            self.log.failure("position tick", e)

    def _on_blink_tick(self, now):
        if self._surface_gone():
            return
        if self.settings.blink_style == BlinkStyle.SOLID:
            # Nothing to sample, ensure_started() brings it back if the style changes
            self.blink_tick.cancel()
            self.blink_tick = None
            return
        try:
            # Paint is a no-op without focus, no point asking for it
            if self.surface.has_focus() and self.blink_clock.is_idle(now, self.settings.resume_blink_delay):
                self.surface.request_repaint()
        except Exception as e:
            self.log.failure("blink tick", e)
