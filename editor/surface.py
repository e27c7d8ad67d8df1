import logging

from caret.settings import CaretShape
from editor.modes import EditorMode

logger = logging.getLogger(__name__)


class EditorSurface:
    """
    One editor view as the caret engine sees it.

    Wraps the buffer, the carets and the renderer, and answers the engine's
    questions in content pixels. Repaints are requested, not performed:
    the main loop redraws when consume_repaint() says so.
    """

    def __init__(self, buffer_obj, caret_model, editor_state, renderer, name="main", settings=None):
        self.buffer = buffer_obj
        self.carets = caret_model
        self.state = editor_state
        self.renderer = renderer
        self.name = name
        self.settings = settings

        self.focused = True
        self.showing = True
        self._disposed = False
        self._repaint_requested = True # First frame

        self.buffer.add_listener(self._on_buffer_changed)

    # --- Engine-facing ---

    def caret_points(self):
        # Content coordinates: line 0 is at the top whatever the viewport shows
        points = {}
        for caret in self.carets.all_carets():
            line_text = self.buffer.get_line(caret.line) or ""
            x = self.renderer.col_to_x(line_text, caret.col)
            y = self.renderer.line_to_y(caret.line, 0)
            points[caret.id] = (float(x), float(y))
        return points

    def line_height(self):
        return self.renderer.line_height

    def foreground_color(self):
        return self.renderer.foreground_color

    def char_width(self, char):
        return self.renderer.text_renderer.get_char_width(char)

    def char_after(self, caret_id):
        caret = self.carets.get(caret_id)
        if caret is None:
            return None
        return self.buffer.char_at(caret.line, caret.col)

    def caret_shape(self, caret_id):
        # Vim habit: a bar in NORMAL turns into a block, any other shape stays as configured
        if self.state.mode != EditorMode.NORMAL:
            return None
        if self.settings is not None and self.settings.caret_shape != CaretShape.BAR:
            return self.settings.caret_shape
        return CaretShape.BLOCK

    def request_repaint(self):
        self._repaint_requested = True

    def is_disposed(self):
        return self._disposed

    def has_focus(self):
        return self.focused and not self._disposed

    # --- Host-facing ---

    def scroll_offset_y(self):
        """Pixels of content scrolled above the top of the view."""
        return self.state.viewport_start_line * self.renderer.line_height

    def consume_repaint(self):
        requested = self._repaint_requested
        self._repaint_requested = False
        return requested

    def set_focus(self, focused):
        if focused != self.focused:
            self.focused = focused
            self.request_repaint()

    def caret_moved(self):
        if self.showing and not self._disposed:
            self.request_repaint()

    def _on_buffer_changed(self, line_num):
        self.renderer.invalidate_from(line_num)
        self.request_repaint()

    def dispose(self):
        if self._disposed:
            return
        self._disposed = True
        self.buffer.remove_listener(self._on_buffer_changed)
        logger.info("Editor surface %r disposed", self.name)

    def __repr__(self):
        return f"EditorSurface({self.name!r})"
