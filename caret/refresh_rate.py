import logging

import pygame as pg

logger = logging.getLogger(__name__)

MIN_REFRESH_RATE = 30
MAX_REFRESH_RATE = 240
DEFAULT_REFRESH_RATE = 60


def detect_desktop_refresh_rate():
    """Asks pygame for the main display's refresh rate. Returns 0 when unknown."""
    get_rates = getattr(pg.display, "get_desktop_refresh_rates", None)
    if get_rates is None: # Older pygame builds don't expose this
        return 0
    try:
        rates = get_rates()
    except pg.error as e:
        logger.debug("Could not query refresh rate: %s", e)
        return 0
    return rates[0] if rates else 0


class RefreshRateProbe:
    """Detects the refresh rate on first use and keeps it until reset()."""

    def __init__(self, detect=detect_desktop_refresh_rate):
        self._detect = detect
        self._cached_rate = None

    def rate(self) -> int:
        if self._cached_rate is not None:
            return self._cached_rate

        detected = self._detect() or 0
        rate = int(detected) if detected > 0 else DEFAULT_REFRESH_RATE
        rate = max(MIN_REFRESH_RATE, min(rate, MAX_REFRESH_RATE))
        logger.info("Caret animation running at %d Hz (detected %s)", rate, detected or "nothing")

        self._cached_rate = rate
        return rate

    def period_ms(self) -> int:
        return 1000 // self.rate()

    def reset(self):
        self._cached_rate = None
