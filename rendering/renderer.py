from contextlib import contextmanager

from OpenGL.GL import *

from .text_renderer import TextRenderer


class GLDrawingContext:
    """
    What the caret painter draws through: a colour, filled rectangles and a
    scoped alpha compositing mode.
    """

    def __init__(self):
        self.color = (255, 255, 255)
        self.alpha = 1.0

    def set_color(self, color):
        self.color = tuple(color[:3])

    def fill_rect(self, x, y, width, height):
        r, g, b = self.color
        glColor4ub(r, g, b, int(round(255 * self.alpha)))
        glDisable(GL_TEXTURE_2D)
        glBegin(GL_QUADS)
        glVertex2f(x, y)                   # Top-left
        glVertex2f(x + width, y)           # Top-right
        glVertex2f(x + width, y + height)  # Bottom-right
        glVertex2f(x, y + height)          # Bottom-left
        glEnd()

    @contextmanager
    def composite(self, opacity):
        """Source-over blending at `opacity`; the previous GL blend state comes back on exit."""
        previous_alpha = self.alpha
        glPushAttrib(GL_COLOR_BUFFER_BIT | GL_CURRENT_BIT | GL_ENABLE_BIT)
        try:
            glEnable(GL_BLEND)
            glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)
            self.alpha = max(0.0, min(opacity, 1.0))
            yield self
        finally:
            self.alpha = previous_alpha
            glPopAttrib()


class EditorRenderer:
    def __init__(self, font_path, font_size):
        self.text_renderer = TextRenderer(font_path, font_size)
        self.line_height = self.text_renderer.line_height
        self.padding_x = 5
        self.padding_y = 5
        self.visible_lines_in_viewport = 1
        # Key: line_index, Value: (texture_id, text_width, texture_height, text_content_str)
        self.line_texture_cache = {}
        self.foreground_color = self.text_renderer.color
        self.native_cursor_width = 2

    def calculate_visible_lines(self, screen_height):
        usable = screen_height - 2 * self.padding_y
        self.visible_lines_in_viewport = max(1, usable // self.line_height)
        return self.visible_lines_in_viewport

    def line_to_y(self, line_num, viewport_start_line):
        return self.padding_y + (line_num - viewport_start_line) * self.line_height

    def col_to_x(self, line_text, col):
        return self.padding_x + self.text_renderer.get_string_width(line_text[:col])

    def render_buffer(self, buffer_obj, editor_state):
        first = editor_state.viewport_start_line
        last = min(buffer_obj.get_line_count(), first + self.visible_lines_in_viewport)

        for i in range(first, last):
            line_text = buffer_obj.get_line(i)
            cached = self.line_texture_cache.get(i)
            if cached is None or cached[3] != line_text:
                if cached:
                    self.text_renderer.cleanup_texture(cached[0])
                texture_id, width, height = self.text_renderer.render_text_to_texture(line_text)
                cached = (texture_id, width, height, line_text)
                self.line_texture_cache[i] = cached

            texture_id, width, height, _ = cached
            self.text_renderer.draw_text(texture_id, self.padding_x, self.line_to_y(i, first), width, height)

        # Lines past the end of the buffer
        stale = [k for k in self.line_texture_cache if k >= buffer_obj.get_line_count()]
        for k in stale:
            self.invalidate_line_cache(k)

    def render_native_carets(self, points):
        """The editor's own instant caret, for when the smooth one is off."""
        ctx = GLDrawingContext()
        ctx.set_color(self.foreground_color)
        for x, y in points:
            ctx.fill_rect(x, y, self.native_cursor_width, self.line_height)

    def invalidate_line_cache(self, line_num):
        entry = self.line_texture_cache.pop(line_num, None)
        if entry:
            self.text_renderer.cleanup_texture(entry[0])

    def invalidate_from(self, line_num):
        """Line numbers shift after joins and splits; drop everything from line_num on."""
        for k in [k for k in self.line_texture_cache if k >= line_num]:
            self.invalidate_line_cache(k)

    def cleanup(self):
        for k in list(self.line_texture_cache):
            self.invalidate_line_cache(k)
