import logging
import weakref
from collections import namedtuple

logger = logging.getLogger(__name__)

Observation = namedtuple("Observation", ["switched", "moving"])


class CaretLifecycleRegistry:
    """
    Keeps the tracker in step with the host's live caret set.

    Entries are created lazily on first sight and pruned as soon as a caret
    disappears. Seeing a different surface than last time resets everything.
    """

    def __init__(self, tracker):
        self.tracker = tracker
        self._surface_ref = None

    def _is_new_surface(self, surface) -> bool:
        last = self._surface_ref() if self._surface_ref is not None else None
        return last is not surface

    def observe(self, surface, points) -> Observation:
        """points: {caret_id: (x, y)} for every live caret, in content pixels."""
        if self._is_new_surface(surface):
            self._surface_ref = weakref.ref(surface)
            self.tracker.reset_all(points)
            logger.debug("Switched to surface %r, %d caret(s) reset", surface, len(points))
            return Observation(True, False)

        moving = False
        for caret_id, point in points.items():
            if self.tracker.sync(caret_id, point).moving:
                moving = True

        stale = self.tracker.prune(points.keys())
        if stale:
            logger.debug("Pruned %d caret(s)", len(stale))
        return Observation(False, moving)

    def forget_surface(self):
        self._surface_ref = None
