import logging

from caret.diagnostics import diagnostics

logger = logging.getLogger(__name__)

class Buffer:
    def __init__(self, initial_content=None):
        self.lines = [""]
        self.dirty = False
        self._listeners = []

        if initial_content:
            self.lines = initial_content.splitlines() or [""]

    def get_line(self, line_num):
        if 0 <= line_num < len(self.lines):
            return self.lines[line_num]
        return None

    def get_line_count(self):
        return len(self.lines)

    def char_at(self, line_num, col):
        """Character at (line_num, col), None past the end of the line or buffer."""
        line = self.get_line(line_num)
        if line is None or not (0 <= col < len(line)):
            return None
        return line[col]

    def get_content_as_string(self):
        return "\n".join(self.lines)

    def add_listener(self, callback):
        """callback(first_changed_line) runs after every modification."""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _changed(self, line_num):
        self.dirty = True
        for listener in list(self._listeners):
            # One broken listener must not take the editor down with it
            try:
                listener(line_num)
            except Exception as e:
                diagnostics.failure("buffer listener", e)

    def insert_char(self, line_num, col, char):
        if 0 <= line_num < len(self.lines):
            line = self.lines[line_num]
            self.lines[line_num] = line[:col] + char + line[col:]
            self._changed(line_num)

    def delete_char(self, line_num, col):
        """Deletes the character before (line_num, col), returns true if deleted anything"""
        if not (0 <= line_num < len(self.lines)):
            return False
        line = self.lines[line_num]
        if col > 0 and len(line) > 0:
            self.lines[line_num] = line[:col-1] + line[col:]
            self._changed(line_num)
            return True
        if col == 0 and line_num > 0: # Backspace at start of line joins with the previous one
            self.lines[line_num-1] += self.lines.pop(line_num)
            self._changed(line_num - 1)
            return True
        return False

    def delete_char_at_cursor(self, line_num, col):
        """Deletes the character at (line_num, col), joining the next line when at EOL."""
        if not (0 <= line_num < len(self.lines)):
            return False
        line = self.lines[line_num]
        if 0 <= col < len(line):
            self.lines[line_num] = line[:col] + line[col+1:]
            self._changed(line_num)
            return True
        if col == len(line) and line_num + 1 < len(self.lines):
            self.lines[line_num] += self.lines.pop(line_num + 1)
            self._changed(line_num)
            return True
        return False

    def split_line(self, line_num, col):
        if 0 <= line_num < len(self.lines):
            line = self.lines[line_num]
            self.lines.insert(line_num + 1, line[col:])
            self.lines[line_num] = line[:col]
            self._changed(line_num)
