import logging

import pygame as pg

from caret.blink import BlinkClock
from caret.painter import CaretPainter
from caret.refresh_rate import RefreshRateProbe
from caret.registry import CaretLifecycleRegistry
from caret.scheduler import AnimationScheduler
from caret.tracker import CaretPositionTracker

logger = logging.getLogger(__name__)


class SmoothCaretRenderer:
    """
    Paint entry point of the smooth caret.

    The host calls paint(surface, ctx) whenever it redraws. The surface gives
    caret positions, metrics, focus and liveness; ctx is where rectangles get
    filled (see rendering.renderer.GLDrawingContext).

    Everything runs on the UI thread: paint() here, the ticks from the
    TimerQueue the main loop pumps.
    """

    def __init__(self, settings, timers, clock=pg.time.get_ticks, refresh_probe=None):
        self.settings = settings
        self.timers = timers
        self.clock = clock
        self.refresh_probe = refresh_probe or RefreshRateProbe()

        self.tracker = CaretPositionTracker(settings)
        self.registry = CaretLifecycleRegistry(self.tracker)
        self.blink_clock = BlinkClock(clock())
        self.painter = CaretPainter(settings)
        self.scheduler = None

    def paint(self, surface, ctx):
        if not self.settings.enabled:
            return
        if not surface.has_focus():
            return

        now = self.clock()
        points = surface.caret_points()

        observation = self.registry.observe(surface, points)
        if observation.switched:
            self._switch_to(surface, now)

        self.scheduler.ensure_started(now)

        if observation.moving:
            self.blink_clock.mark_moved(now)

        blink = self.blink_clock.sample(self.settings, now)
        carets = [(caret_id, self.tracker.get(caret_id)) for caret_id in points]
        self.painter.draw(ctx, surface, carets, blink)

    def _switch_to(self, surface, now):
        self.blink_clock.restart(now)
        self.painter.reset()
        if self.scheduler is not None:
            self.scheduler.cancel()
        self.scheduler = AnimationScheduler(surface, self.settings, self.tracker, self.blink_clock,
                                            self.timers, self.refresh_probe)

    def is_animating(self) -> bool:
        return self.tracker.any_moving()

    def dispose(self):
        if self.scheduler is not None:
            self.scheduler.cancel()
            self.scheduler = None
        self.registry.forget_surface()
