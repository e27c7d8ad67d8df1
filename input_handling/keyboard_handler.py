import logging

import pygame as pg

from caret.settings import BlinkStyle, CaretShape, SettingsError
from editor.modes import EditorMode

logger = logging.getLogger(__name__)

BLINK_STYLE_CYCLE = list(BlinkStyle)
CARET_SHAPE_CYCLE = list(CaretShape)

class KeyboardHandler:
    def __init__(self, surface, settings):
        self.surface = surface
        self.buffer = surface.buffer
        self.state = surface.state
        self.carets = surface.carets
        self.renderer = surface.renderer
        self.settings = settings

    def handle_keydown(self, event):
        """
        Processes a Pygame KEYDOWN event based on the current editor mode.
        Returns True if anything (text, carets, settings) changed.
        """
        if self._handle_settings_keys(event):
            return True

        mods = pg.key.get_mods()
        if mods & pg.KMOD_CTRL and mods & pg.KMOD_ALT and event.key in (pg.K_UP, pg.K_DOWN):
            if event.key == pg.K_DOWN:
                added = self.carets.add_caret_below(self.buffer)
            else:
                added = self.carets.add_caret_above(self.buffer)
            action_taken = added is not None
        elif event.key in (pg.K_PAGEUP, pg.K_PAGEDOWN):
            page_size = max(1, self.renderer.visible_lines_in_viewport - 1)
            action_taken = self._scroll_viewport(-page_size if event.key == pg.K_PAGEUP else page_size)
        elif self.state.mode == EditorMode.NORMAL:
            action_taken = self._handle_normal_mode(event)
        else:
            action_taken = self._handle_insert_mode(event)

        if action_taken:
            self._keep_primary_in_view()
            self.surface.caret_moved()
        return action_taken

    def _handle_settings_keys(self, event):
        """F2 toggles the smooth caret, F3 cycles blink styles, F4 cycles shapes."""
        changes = None
        if event.key == pg.K_F2:
            changes = {"enabled": not self.settings.enabled}
        elif event.key == pg.K_F3:
            i = BLINK_STYLE_CYCLE.index(self.settings.blink_style)
            changes = {"blink_style": BLINK_STYLE_CYCLE[(i + 1) % len(BLINK_STYLE_CYCLE)]}
        elif event.key == pg.K_F4:
            i = CARET_SHAPE_CYCLE.index(self.settings.caret_shape)
            changes = {"caret_shape": CARET_SHAPE_CYCLE[(i + 1) % len(CARET_SHAPE_CYCLE)]}
        if changes is None:
            return False

        try:
            self.settings.update(**changes)
        except SettingsError as e:
            logger.warning("Rejected setting change %s: %s", changes, e)
            return False
        logger.info("Caret settings changed: %s", changes)
        self.surface.request_repaint()
        return True

    def _handle_normal_mode(self, event):
        buf = self.buffer
        pending = self.state.pending_keys
        self.state.pending_keys = ""

        if event.key == pg.K_ESCAPE:
            self.carets.collapse()
        elif event.key == pg.K_i:
            self.state.switch_to_mode(EditorMode.INSERT)
        elif event.key == pg.K_a:
            self.carets.for_each(lambda c: c.move_right(buf))
            self.state.switch_to_mode(EditorMode.INSERT)
        elif event.key == pg.K_o:
            self.carets.collapse()
            caret = self.carets.primary
            buf.split_line(caret.line, len(buf.get_line(caret.line) or ""))
            caret.set_pos(caret.line + 1, 0, buf)
            self.state.switch_to_mode(EditorMode.INSERT)
        elif event.key == pg.K_x:
            self._for_each_bottom_up(self._delete_under)
        elif event.key in (pg.K_h, pg.K_LEFT):
            self.carets.for_each(lambda c: c.move_left(buf, mode_is_normal=True))
        elif event.key in (pg.K_l, pg.K_RIGHT):
            self.carets.for_each(lambda c: c.move_right(buf, mode_is_normal=True))
        elif event.key in (pg.K_k, pg.K_UP):
            self.carets.for_each(lambda c: c.move_up(buf))
        elif event.key in (pg.K_j, pg.K_DOWN):
            self.carets.for_each(lambda c: c.move_down(buf))
        elif event.key == pg.K_0:
            self.carets.for_each(lambda c: c.move_to_line_start())
        elif event.key == pg.K_4 and pg.key.get_mods() & pg.KMOD_SHIFT: # '$'
            self.carets.for_each(lambda c: c.move_to_line_end(buf, mode_is_normal=True))
        elif event.key == pg.K_g and pg.key.get_mods() & pg.KMOD_SHIFT: # 'G'
            self.carets.collapse()
            self.carets.primary.set_pos(buf.get_line_count() - 1, 0, buf)
        elif event.key == pg.K_g:
            if pending != "g":
                self.state.pending_keys = "g"
                return False
            self.carets.collapse()
            self.carets.primary.set_pos(0, 0, buf)
        else:
            return False
        return True

    def _handle_insert_mode(self, event):
        buf = self.buffer

        if event.key == pg.K_ESCAPE:
            self.state.switch_to_mode(EditorMode.NORMAL)
            self.carets.for_each(lambda c: c.move_left(buf, mode_is_normal=True))
        elif event.key == pg.K_RETURN:
            self._for_each_bottom_up(self._split_at)
        elif event.key == pg.K_BACKSPACE:
            self._for_each_bottom_up(self._backspace_at)
        elif event.key == pg.K_DELETE:
            self._for_each_bottom_up(self._delete_forward)
        elif event.key == pg.K_LEFT:
            self.carets.for_each(lambda c: c.move_left(buf))
        elif event.key == pg.K_RIGHT:
            self.carets.for_each(lambda c: c.move_right(buf))
        elif event.key == pg.K_UP:
            self.carets.for_each(lambda c: c.move_up(buf))
        elif event.key == pg.K_DOWN:
            self.carets.for_each(lambda c: c.move_down(buf))
        elif event.unicode and (event.unicode.isprintable() or event.unicode == '\t'):
            text = "    " if event.unicode == '\t' else event.unicode # Tabs become 4 spaces
            self.carets.for_each(lambda c: self._insert_at(c, text))
        else:
            return False
        return True

    def _insert_at(self, caret, text):
        # Carets further right on the same line shift along with the text
        for other in self.carets.all_carets():
            if other is not caret and other.line == caret.line and other.col >= caret.col:
                other.col += len(text)
        self.buffer.insert_char(caret.line, caret.col, text)
        caret.col += len(text)

    def _others(self, caret):
        return [other for other in self.carets.all_carets() if other is not caret]

    def _shift_after_delete(self, caret):
        # Carets right of a removed character move back with the text
        for other in self._others(caret):
            if other.line == caret.line and other.col > caret.col:
                other.col -= 1

    def _shift_after_join(self, joined_line, prev_len):
        """`joined_line` was appended to the line above it, which was `prev_len` long."""
        for other in self.carets.all_carets():
            if other.line == joined_line:
                other.line -= 1
                other.col += prev_len
            elif other.line > joined_line:
                other.line -= 1

    def _delete_under(self, caret):
        # 'x' never joins lines
        if self.buffer.char_at(caret.line, caret.col) is None:
            return
        self.buffer.delete_char_at_cursor(caret.line, caret.col)
        self._shift_after_delete(caret)
        line_len = len(self.buffer.get_line(caret.line))
        for c in self.carets.all_carets():
            if c.line == caret.line and c.col >= line_len:
                c.move_to_line_end(self.buffer, mode_is_normal=True)

    def _delete_forward(self, caret):
        line_len = len(self.buffer.get_line(caret.line) or "")
        joins = caret.col >= line_len
        if not self.buffer.delete_char_at_cursor(caret.line, caret.col):
            return
        if joins:
            self._shift_after_join(caret.line + 1, line_len)
        else:
            self._shift_after_delete(caret)

    def _split_at(self, caret):
        line, col = caret.pos
        self.buffer.split_line(line, col)
        for other in self._others(caret):
            if other.line > line:
                other.line += 1
            elif other.line == line and other.col >= col:
                other.line += 1
                other.col -= col
        caret.line += 1
        caret.col = 0

    def _backspace_at(self, caret):
        if caret.col == 0 and caret.line == 0:
            return
        if caret.col == 0:
            prev_len = len(self.buffer.get_line(caret.line - 1) or "")
            if self.buffer.delete_char(caret.line, caret.col):
                self._shift_after_join(caret.line, prev_len)
            return
        if self.buffer.delete_char(caret.line, caret.col):
            for other in self._others(caret):
                if other.line == caret.line and other.col >= caret.col:
                    other.col -= 1
            caret.col -= 1

    def _for_each_bottom_up(self, action):
        """
        Edits run from the bottom-right up; every edit also shifts the
        carets it displaces, wherever they are.
        """
        for caret in sorted(self.carets.all_carets(), key=lambda c: c.pos, reverse=True):
            action(caret)
        self.carets.merge_overlapping()

    def _scroll_viewport(self, num_lines_to_scroll):
        """
        Scrolls by whole pages and moves the primary caret along. Positive
        values move the view down. Pages taller than the teleport distance
        make the caret jump instead of gliding.
        """
        visible = self.renderer.visible_lines_in_viewport
        max_start_line = max(0, self.buffer.get_line_count() - visible)
        new_start = self.state.viewport_start_line + num_lines_to_scroll
        self.state.viewport_start_line = max(0, min(new_start, max_start_line))

        self.carets.collapse()
        caret = self.carets.primary
        if num_lines_to_scroll < 0:
            caret.set_pos(self.state.viewport_start_line, caret.col, self.buffer)
        else:
            caret.set_pos(self.state.viewport_start_line + visible - 1, caret.col, self.buffer)
        return True

    def _keep_primary_in_view(self):
        self.state.scroll_to_line(self.carets.primary.line,
                                  self.renderer.visible_lines_in_viewport,
                                  self.buffer.get_line_count())
