import logging

import pygame as pg
from pygame.locals import *
from OpenGL.GL import *

from caret.engine import SmoothCaretRenderer
from caret.scheduler import TimerQueue
from caret.settings import AnimationSettings
from editor.buffer import Buffer
from editor.cursor import CaretModel
from editor.modes import EditorState
from editor.surface import EditorSurface
from input_handling.keyboard_handler import KeyboardHandler
from rendering.renderer import EditorRenderer, GLDrawingContext

logger = logging.getLogger(__name__)

SCREEN_WIDTH = 800
SCREEN_HEIGHT = 800
FPS = 240 # Upper bound for the loop, the caret ticks pick their own cadence

FONT_PATH = "assets/fonts/Consolas.ttf"
FONT_SIZE = 24

WELCOME_TEXT = """Smooth caret demo

NORMAL mode: h j k l, 0, $, gg, G, x, i, a, o
INSERT mode: type away, Esc to leave
Ctrl+Alt+Up/Down adds a caret, Esc in NORMAL drops the extra ones
G and gg on this long text jump straight there, short moves glide
PageUp/PageDown glide too unless the window is tall enough for a page to
span more than 1000 px

F2  toggle the smooth caret
F3  cycle blink style
F4  cycle caret shape (a bar shows as a block in NORMAL mode)
"""

FILLER_LINES = 200 # Enough lines for G to be a teleport

def demo_text():
    filler = "\n".join(f"{i:4d}  filler line to scroll through" for i in range(1, FILLER_LINES + 1))
    return WELCOME_TEXT + "\n" + filler + "\n"

def init_opengl():
    """Initialize basic OpenGL settings."""
    glViewport(0, 0, SCREEN_WIDTH, SCREEN_HEIGHT)
    glClearColor(0.1, 0.1, 0.1, 1.0)
    glMatrixMode(GL_PROJECTION)
    glLoadIdentity()
    glOrtho(0, SCREEN_WIDTH, SCREEN_HEIGHT, 0, -1, 1)
    glMatrixMode(GL_MODELVIEW)
    glLoadIdentity()
    glEnable(GL_BLEND)
    glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)
    glDisable(GL_DEPTH_TEST)

def draw_frame(surface, renderer, caret_renderer, settings, gl_context):
    glClear(GL_COLOR_BUFFER_BIT)
    renderer.render_buffer(surface.buffer, surface.state)

    # Caret points are in content coordinates, shift them into the view
    glPushMatrix()
    glTranslatef(0, -surface.scroll_offset_y(), 0)
    try:
        if not settings.enabled or not settings.replace_default_caret:
            if surface.has_focus():
                renderer.render_native_carets(surface.caret_points().values())
        caret_renderer.paint(surface, gl_context)
    finally:
        glPopMatrix()

    pg.display.flip()

def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    pg.init()
    pg.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), DOUBLEBUF | OPENGL)
    pg.display.set_caption("Smooth Caret Editor")
    pg.key.set_repeat(300, 30)
    clock = pg.time.Clock()

    init_opengl()

    settings = AnimationSettings()
    timers = TimerQueue()

    renderer = EditorRenderer(FONT_PATH, FONT_SIZE)
    renderer.calculate_visible_lines(SCREEN_HEIGHT)
    surface = EditorSurface(Buffer(demo_text()), CaretModel(), EditorState(), renderer, settings=settings)
    keyboard_handler = KeyboardHandler(surface, settings)

    caret_renderer = SmoothCaretRenderer(settings, timers, clock=pg.time.get_ticks)
    gl_context = GLDrawingContext()

    running = True
    while running:
        clock.tick(FPS)

        for event in pg.event.get():
            if event.type == pg.QUIT:
                running = False
            elif event.type == pg.WINDOWFOCUSGAINED:
                surface.set_focus(True)
            elif event.type == pg.WINDOWFOCUSLOST:
                surface.set_focus(False)
            elif event.type in (pg.WINDOWEXPOSED, pg.VIDEOEXPOSE):
                surface.request_repaint()
            elif event.type == pg.KEYDOWN:
                keyboard_handler.handle_keydown(event)

        # Ticks run on this thread, between event handling and drawing
        timers.run_due(pg.time.get_ticks())

        if surface.consume_repaint():
            draw_frame(surface, renderer, caret_renderer, settings, gl_context)

    surface.dispose()
    # One more pump so the ticks notice the surface is gone and stop
    timers.run_due(pg.time.get_ticks() + 1000)
    caret_renderer.dispose()
    renderer.cleanup()
    pg.quit()

if __name__ == '__main__':
    main()
