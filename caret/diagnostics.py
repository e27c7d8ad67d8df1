import logging
import time

logger = logging.getLogger(__name__)


class RateLimitedLog:
    """
    Logs repeated failures from the same site without flooding.

    The first failure of a key is logged with its traceback. After that the
    key is logged at most once per interval, with a count of what was skipped.
    """

    def __init__(self, log=logger, interval=5.0, clock=time.monotonic):
        self.log = log
        self.interval = interval
        self.clock = clock
        self._sites = {} # Key: site name, Value: [last_logged_at, suppressed_count]

    def failure(self, key, exc):
        now = self.clock()
        site = self._sites.get(key)

        if site is None:
            self._sites[key] = [now, 0]
            self.log.warning("%s failed: %s", key, exc, exc_info=exc)
            return True

        if now - site[0] < self.interval:
            site[1] += 1
            return False

        self.log.warning("%s failed again: %s (%d similar failure(s) suppressed)", key, exc, site[1])
        site[0] = now
        site[1] = 0
        return True

    def suppressed(self, key) -> int:
        site = self._sites.get(key)
        return site[1] if site else 0


# Shared by the tick and listener boundaries
diagnostics = RateLimitedLog()
