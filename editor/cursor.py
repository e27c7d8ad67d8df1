from collections import namedtuple

# Stable handle for a caret: serial never repeats within a generation,
# and the generation moves on every time the caret set is collapsed.
CaretId = namedtuple("CaretId", ["serial", "generation"])


class Caret:
    def __init__(self, caret_id, line=0, col=0):
        self.id = caret_id
        self.line = line
        self.col = col

    @property
    def pos(self):
        return self.line, self.col

    def move_right(self, buffer_obj, mode_is_normal=False):
        line_len = len(buffer_obj.get_line(self.line) or "")
        if mode_is_normal:
            # 'l' stops on the last character and never wraps
            if self.col < max(0, line_len - 1):
                self.col += 1
        elif self.col < line_len:
            self.col += 1
        elif self.line < buffer_obj.get_line_count() - 1:
            self.line += 1
            self.col = 0

    def move_left(self, buffer_obj, mode_is_normal=False):
        if self.col > 0:
            self.col -= 1
        elif not mode_is_normal and self.line > 0: # 'h' doesn't wrap either
            self.line -= 1
            self.col = len(buffer_obj.get_line(self.line) or "")

    def move_up(self, buffer_obj, count=1):
        self.line = max(0, self.line - count)
        self._clamp_col(buffer_obj)

    def move_down(self, buffer_obj, count=1):
        self.line = min(buffer_obj.get_line_count() - 1, self.line + count)
        self._clamp_col(buffer_obj)

    def move_to_line_start(self):
        self.col = 0

    def move_to_line_end(self, buffer_obj, mode_is_normal=False):
        line_len = len(buffer_obj.get_line(self.line) or "")
        self.col = max(0, line_len - 1) if mode_is_normal else line_len

    def set_pos(self, line, col, buffer_obj):
        self.line = max(0, min(line, buffer_obj.get_line_count() - 1))
        self.col = col
        self._clamp_col(buffer_obj)

    def _clamp_col(self, buffer_obj):
        line_len = len(buffer_obj.get_line(self.line) or "")
        self.col = max(0, min(self.col, line_len))

    def __repr__(self):
        return f"Caret({self.id.serial}.{self.id.generation} @ {self.line}:{self.col})"


class CaretModel:
    """All live carets of one editor. The first caret is the primary one."""

    def __init__(self):
        self.generation = 0
        self._next_serial = 0
        self.carets = [self._new_caret(0, 0)]

    def _new_caret(self, line, col):
        caret = Caret(CaretId(self._next_serial, self.generation), line, col)
        self._next_serial += 1
        return caret

    @property
    def primary(self):
        return self.carets[0]

    def all_carets(self):
        return list(self.carets)

    def __len__(self):
        return len(self.carets)

    def get(self, caret_id):
        for caret in self.carets:
            if caret.id == caret_id:
                return caret
        return None

    def add_caret(self, line, col, buffer_obj):
        caret = self._new_caret(line, col)
        caret.set_pos(line, col, buffer_obj)
        if any(other.pos == caret.pos for other in self.carets):
            return None # Already a caret there
        self.carets.append(caret)
        return caret

    def add_caret_below(self, buffer_obj):
        lowest = max(self.carets, key=lambda c: c.line)
        if lowest.line >= buffer_obj.get_line_count() - 1:
            return None
        return self.add_caret(lowest.line + 1, lowest.col, buffer_obj)

    def add_caret_above(self, buffer_obj):
        highest = min(self.carets, key=lambda c: c.line)
        if highest.line <= 0:
            return None
        return self.add_caret(highest.line - 1, highest.col, buffer_obj)

    def collapse(self):
        """Keeps only the primary caret; every other id becomes stale."""
        if len(self.carets) == 1:
            return
        self.generation += 1
        primary = self.carets[0]
        self.carets = [Caret(CaretId(primary.id.serial, self.generation), primary.line, primary.col)]

    def merge_overlapping(self):
        """Drops carets that ended up on the same spot, keeping the older one."""
        seen = set()
        kept = []
        for caret in self.carets:
            if caret.pos in seen:
                continue
            seen.add(caret.pos)
            kept.append(caret)
        removed = len(self.carets) - len(kept)
        self.carets = kept
        return removed

    def for_each(self, action):
        for caret in self.carets:
            action(caret)
        self.merge_overlapping()
