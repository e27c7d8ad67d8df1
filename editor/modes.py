import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)

class EditorMode(Enum):
    NORMAL = auto()
    INSERT = auto()

class EditorState:
    def __init__(self):
        self.mode = EditorMode.NORMAL
        self.viewport_start_line = 0
        self.pending_keys = "" # For two-key commands like 'gg'

    def switch_to_mode(self, new_mode: EditorMode):
        if self.mode == new_mode:
            return
        logger.debug("Switching from %s to %s mode", self.mode.name, new_mode.name)
        self.pending_keys = ""
        self.mode = new_mode

    def scroll_to_line(self, line, visible_lines, line_count):
        """Moves the viewport the least amount needed to show `line`."""
        if line < self.viewport_start_line:
            self.viewport_start_line = line
        elif line >= self.viewport_start_line + visible_lines:
            self.viewport_start_line = line - visible_lines + 1

        max_start_line = max(0, line_count - visible_lines)
        self.viewport_start_line = max(0, min(self.viewport_start_line, max_start_line))
