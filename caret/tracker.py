import math
from collections import namedtuple

from caret.settings import MOVEMENT_EPSILON

MovementInfo = namedtuple("MovementInfo", ["moving", "teleported"])


class CaretPosition:
    __slots__ = ("current_x", "current_y", "target_x", "target_y")

    def __init__(self, x, y):
        # Seeded settled so a new caret doesn't fly in from the origin
        self.current_x = self.target_x = float(x)
        self.current_y = self.target_y = float(y)

    def snap(self, x, y):
        self.current_x = self.target_x = float(x)
        self.current_y = self.target_y = float(y)

    def is_moving(self, epsilon=MOVEMENT_EPSILON) -> bool:
        return (abs(self.target_x - self.current_x) > epsilon or
                abs(self.target_y - self.current_y) > epsilon)

    def is_finite(self) -> bool:
        return math.isfinite(self.current_x) and math.isfinite(self.current_y)

    def __repr__(self):
        return (f"CaretPosition(current=({self.current_x:.2f}, {self.current_y:.2f}), "
                f"target=({self.target_x:.2f}, {self.target_y:.2f}))")


def _finite_point(point):
    return math.isfinite(point[0]) and math.isfinite(point[1])


class CaretPositionTracker:
    """
    Current vs. target screen position of every live caret.

    sync() only moves targets; current positions are advanced by advance(),
    which the position tick calls once per frame.
    """

    def __init__(self, settings):
        self.settings = settings
        self.positions = {} # Key: caret id, Value: CaretPosition

    def sync(self, caret_id, point) -> MovementInfo:
        x, y = point
        pos = self.positions.get(caret_id)
        if pos is None:
            self.positions[caret_id] = CaretPosition(x, y)
            return MovementInfo(False, False)

        if not _finite_point(point):
            # Keep whatever we had, the host will hand us a usable point again
            return MovementInfo(pos.is_moving(), False)

        if not (pos.is_finite() and math.isfinite(pos.target_x) and math.isfinite(pos.target_y)):
            pos.snap(x, y)
            return MovementInfo(False, True)

        limit = self.settings.teleport_distance
        if abs(x - pos.target_x) > limit or abs(y - pos.target_y) > limit:
            pos.snap(x, y) # Page jumps, goto-line... not worth animating
            return MovementInfo(False, True)

        pos.target_x = float(x)
        pos.target_y = float(y)
        return MovementInfo(pos.is_moving(), False)

    def _speed_factor(self, dx, char_width):
        settings = self.settings
        if not settings.adaptive_speed:
            return settings.smoothness
        if abs(dx) > char_width * 2:
            return settings.max_catchup_speed
        if abs(dx) > char_width:
            return settings.catchup_speed
        return settings.smoothness

    def advance(self, char_width=0) -> bool:
        """Moves every caret one step towards its target. Returns True if any moved."""
        moved = False
        for pos in self.positions.values():
            dx = pos.target_x - pos.current_x
            dy = pos.target_y - pos.current_y
            if not (abs(dx) > MOVEMENT_EPSILON or abs(dy) > MOVEMENT_EPSILON):
                continue # Settled (or NaN, which compares False)

            factor = max(0.0, min(self._speed_factor(dx, char_width), 1.0))
            if factor == 0.0:
                continue
            pos.current_x += dx * factor
            pos.current_y += dy * factor
            moved = True
        return moved

    def prune(self, live_ids):
        live_ids = set(live_ids)
        stale = [caret_id for caret_id in self.positions if caret_id not in live_ids]
        for caret_id in stale:
            del self.positions[caret_id]
        return stale

    def reset_all(self, points):
        """Drops all state and re-seeds every caret settled at its point."""
        self.positions = {caret_id: CaretPosition(x, y) for caret_id, (x, y) in points.items()}

    def get(self, caret_id):
        return self.positions.get(caret_id)

    def any_moving(self) -> bool:
        return any(pos.is_moving() for pos in self.positions.values())

    def __len__(self):
        return len(self.positions)

    def __contains__(self, caret_id):
        return caret_id in self.positions
