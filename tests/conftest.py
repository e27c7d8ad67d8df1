from contextlib import contextmanager

import pytest

from caret.scheduler import TimerQueue
from caret.settings import AnimationSettings, BlinkStyle


class FakeSurface:
    """Stands in for an editor view: fixed-width glyphs, 20px lines."""

    def __init__(self, points=None, char_width=10, line_height=20):
        self.points = dict(points or {})
        self.glyph_width = char_width
        self._line_height = line_height
        self.next_chars = {}
        self.shapes = {}
        self.focused = True
        self.disposed = False
        self.repaints = 0
        self.measured = []

    def caret_points(self):
        return dict(self.points)

    def line_height(self):
        return self._line_height

    def foreground_color(self):
        return (200, 200, 200)

    def char_width(self, char):
        self.measured.append(char)
        return self.glyph_width * (2 if char == "W" else 1)

    def char_after(self, caret_id):
        return self.next_chars.get(caret_id)

    def caret_shape(self, caret_id):
        return self.shapes.get(caret_id)

    def request_repaint(self):
        self.repaints += 1

    def is_disposed(self):
        return self.disposed

    def has_focus(self):
        return self.focused


class RecordingContext:
    def __init__(self):
        self.color = None
        self.alpha = 1.0
        self.rects = []      # (x, y, w, h, alpha)
        self.composites = [] # opacities entered

    def set_color(self, color):
        self.color = color

    def fill_rect(self, x, y, width, height):
        self.rects.append((x, y, width, height, self.alpha))

    @contextmanager
    def composite(self, opacity):
        previous = self.alpha
        self.composites.append(opacity)
        self.alpha = opacity
        try:
            yield self
        finally:
            self.alpha = previous


class FakeClock:
    def __init__(self, now=1000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


class FixedProbe:
    def __init__(self, rate=100):
        self._rate = rate

    def rate(self):
        return self._rate

    def period_ms(self):
        return 1000 // self._rate


@pytest.fixture
def settings():
    return AnimationSettings(blink_style=BlinkStyle.SOLID, adaptive_speed=False, smoothness=0.15)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def probe():
    return FixedProbe(100) # 10 ms ticks


@pytest.fixture
def ctx():
    return RecordingContext()
