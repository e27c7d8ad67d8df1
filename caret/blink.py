import math
from collections import namedtuple

from caret.settings import BlinkStyle

BlinkValue = namedtuple("BlinkValue", ["opacity", "scale"])

STEADY = BlinkValue(1.0, 1.0)
HIDDEN_OPACITY = 0.01


def evaluate(style: BlinkStyle, t: float) -> BlinkValue:
    """
    Maps a position within the blink cycle (0 <= t < 1) to (opacity, vertical scale).
    Pure, no state.
    """
    if style == BlinkStyle.BLINK:
        return STEADY if t < 0.5 else BlinkValue(0.0, 1.0)

    if style == BlinkStyle.SMOOTH:
        if t < 0.3:
            return STEADY
        if t < 0.7:
            return BlinkValue(_clamp(1.0 - (t - 0.3) * 2.5), 1.0) # Fade out
        return BlinkValue(_clamp((t - 0.7) * 3.333), 1.0)        # Fade back in

    if style == BlinkStyle.PHASE:
        if 0.15 <= t < 0.85:
            dip = math.sin(math.pi * (t - 0.15) / 0.7)
            return BlinkValue(_clamp(1.0 - dip * 0.8), 1.0)
        return STEADY

    if style == BlinkStyle.EXPAND:
        if 0.2 <= t < 0.8:
            pulse = math.sin(math.pi * (t - 0.2) / 0.6)
            return BlinkValue(1.0, _clamp(1.0 - pulse * 0.5))
        return STEADY

    return STEADY # SOLID


def is_hidden(value: BlinkValue) -> bool:
    return value.opacity <= HIDDEN_OPACITY


def time_in_cycle(now, cycle_start, resume_delay, interval) -> float:
    elapsed = now - cycle_start - resume_delay
    if elapsed < 0:
        return 0.0
    return (elapsed % interval) / interval


def _clamp(value):
    return max(0.0, min(value, 1.0))


class BlinkClock:
    """
    Wall-clock bookkeeping for blinking, all times in milliseconds.

    Any movement restarts the cycle, and blinking stays off until the caret
    has been still for longer than the resume delay.
    """

    def __init__(self, now=0):
        self.cycle_start = now
        self.last_move = now

    def restart(self, now):
        self.cycle_start = now
        self.last_move = now

    def mark_moved(self, now):
        self.last_move = now
        self.cycle_start = now

    def is_idle(self, now, resume_delay) -> bool:
        return now - self.last_move > resume_delay

    def sample(self, settings, now) -> BlinkValue:
        if settings.blink_style == BlinkStyle.SOLID:
            return STEADY
        if not self.is_idle(now, settings.resume_blink_delay):
            return STEADY

        t = time_in_cycle(now, self.cycle_start, settings.resume_blink_delay, settings.blink_interval)
        return evaluate(settings.blink_style, t)
