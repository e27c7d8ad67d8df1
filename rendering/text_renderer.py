import logging

import pygame as pg
from OpenGL.GL import *
from pygame import freetype

logger = logging.getLogger(__name__)

if not freetype.get_init():
    freetype.init()

# Printable ASCII, used to find the tallest glyph of the font
_MEASURE_GLYPHS = "".join(chr(c) for c in range(33, 127))

class TextRenderer:
    def __init__(self, font_path, font_size, color=(212, 212, 212)):
        try:
            self.font = freetype.Font(font_path, font_size)
        except (OSError, pg.error) as e:
            logger.warning("Could not load font %s (%s), falling back to system monospace", font_path, e)
            self.font = freetype.SysFont("monospace", font_size)

        self.font_size = font_size
        self.color = color
        self.ascender = self.font.get_sized_ascender()
        self.descender = self.font.get_sized_descender()
        self.line_height = self._tallest_glyph_height()
        if self.line_height <= 0:
            self.line_height = font_size

        self._char_widths = {}

    def _tallest_glyph_height(self) -> int:
        # Each metric is (min_x, max_x, min_y, max_y, advance_x, advance_y), None for missing glyphs
        metrics = [m for m in self.font.get_metrics(_MEASURE_GLYPHS) if m]
        if not metrics:
            return 0
        max_y = max(m[3] for m in metrics)
        return max_y + abs(self.descender)

    def render_text_to_texture(self, text_string: str, color=None):
        """
        Renders a string onto a surface one line tall, baseline aligned, and
        uploads it as a texture. Returns (texture_id, text_width, texture_height).
        """
        width = self.get_string_width(text_string)
        if not text_string.strip():
            return None, width, self.line_height

        surface = pg.Surface((max(1, width), self.line_height), pg.SRCALPHA)
        surface.fill((0, 0, 0, 0))
        try:
            self.font.origin = True
            self.font.render_to(surface, (0, self.ascender), text_string, fgcolor=color or self.color)
        except pg.error as e:
            logger.error("Could not render %r: %s", text_string[:20], e)
            return None, width, self.line_height
        finally:
            self.font.origin = False

        texture_data = pg.image.tostring(surface, "RGBA", True)
        tex_id = glGenTextures(1)
        glBindTexture(GL_TEXTURE_2D, tex_id)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_NEAREST)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_NEAREST)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_CLAMP_TO_EDGE)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_CLAMP_TO_EDGE)
        glTexImage2D(GL_TEXTURE_2D, 0, GL_RGBA, surface.get_width(), self.line_height, 0,
                     GL_RGBA, GL_UNSIGNED_BYTE, texture_data)
        glBindTexture(GL_TEXTURE_2D, 0)

        return tex_id, width, self.line_height

    def draw_text(self, texture_id, x, y, width, height):
        if texture_id is None:
            return

        glEnable(GL_TEXTURE_2D)
        glBindTexture(GL_TEXTURE_2D, texture_id)
        glColor4ub(255, 255, 255, 255)
        glBegin(GL_QUADS)
        # Surface rows were flipped on upload, so t=1 is the top edge
        glTexCoord2f(0, 0); glVertex2f(x, y + height)
        glTexCoord2f(1, 0); glVertex2f(x + width, y + height)
        glTexCoord2f(1, 1); glVertex2f(x + width, y)
        glTexCoord2f(0, 1); glVertex2f(x, y)
        glEnd()
        glBindTexture(GL_TEXTURE_2D, 0)
        glDisable(GL_TEXTURE_2D)

    def get_char_width(self, char) -> int:
        """Advance width of a single character, cached per character."""
        if not char or len(char) != 1:
            return 0
        width = self._char_widths.get(char)
        if width is None:
            width = self.get_string_width(char)
            self._char_widths[char] = width
        return width

    def get_string_width(self, text_string: str) -> int:
        if not text_string:
            return 0
        metrics = self.font.get_metrics(text_string)
        advance = sum(m[4] for m in metrics if m)
        if advance == 0:
            # No renderable glyphs (e.g. only spaces on some fonts)
            return self.font.get_rect(text_string).width
        return int(round(advance))

    def cleanup_texture(self, texture_id):
        if texture_id is not None:
            glDeleteTextures(1, [texture_id])
