from collections import namedtuple

from caret.blink import is_hidden
from caret.settings import CaretShape, FALLBACK_CHAR, UNDERSCORE_HEIGHT

CaretRect = namedtuple("CaretRect", ["x", "y", "width", "height"])


def caret_rect(shape, position, blink, line_height, caret_width, margin, glyph_width=0):
    """
    Rectangle to fill for one caret, or None when the position is unusable
    (NaN/inf coming out of the host's metrics).
    """
    if position is None or not position.is_finite():
        return None

    x = int(round(position.current_x))
    y = int(round(position.current_y))
    caret_height = line_height - margin * 2
    scaled_height = int(caret_height * blink.scale)

    if blink.scale < 1.0:
        y_offset = margin + (caret_height - scaled_height) // 2 # Keep it vertically centred
    else:
        y_offset = margin

    if shape == CaretShape.BLOCK:
        return CaretRect(x, y + y_offset, glyph_width, scaled_height)

    if shape == CaretShape.UNDERSCORE:
        underscore_height = int(UNDERSCORE_HEIGHT * blink.scale)
        bottom = y + margin + caret_height - UNDERSCORE_HEIGHT
        if blink.scale < 1.0:
            bottom += (UNDERSCORE_HEIGHT - underscore_height) // 2
        # Never vanish completely, even at the bottom of the expand pulse
        return CaretRect(x, bottom, glyph_width, max(1, underscore_height))

    return CaretRect(x, y + y_offset, caret_width, scaled_height) # BAR


class CaretPainter:
    def __init__(self, settings):
        self.settings = settings
        # Key: character after the caret, Value: its rendered width
        self._glyph_widths = {}

    def reset(self):
        self._glyph_widths.clear()

    def glyph_width(self, surface, caret_id):
        """Width of the character right after the caret, measured once per character."""
        char = surface.char_after(caret_id) or FALLBACK_CHAR
        width = self._glyph_widths.get(char)
        if width is None:
            width = surface.char_width(char)
            if width <= 0: # Zero-width or unmeasurable glyphs
                width = surface.char_width(FALLBACK_CHAR)
            self._glyph_widths[char] = width
        return width

    def draw(self, ctx, surface, carets, blink):
        """
        carets: iterable of (caret_id, CaretPosition).
        Returns the number of carets actually drawn.
        """
        if is_hidden(blink):
            return 0

        settings = self.settings
        ctx.set_color(settings.caret_color or surface.foreground_color())
        line_height = surface.line_height()
        drawn = 0

        for caret_id, position in carets:
            shape = surface.caret_shape(caret_id) or settings.caret_shape
            glyph_width = 0
            if shape != CaretShape.BAR:
                glyph_width = self.glyph_width(surface, caret_id)

            rect = caret_rect(shape, position, blink, line_height,
                              settings.caret_width, settings.caret_height_margins, glyph_width)
            if rect is None or rect.height <= 0:
                continue

            if blink.opacity < 1.0:
                with ctx.composite(blink.opacity):
                    ctx.fill_rect(*rect)
            else:
                ctx.fill_rect(*rect)
            drawn += 1
        return drawn
