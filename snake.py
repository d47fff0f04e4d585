#!/usr/bin/env python3
"""
Snake -- Wraparound terminal snake with curses.
Features:
- Snake starts at the top-left corner heading right
- Arrow keys steer, Ctrl+C quits
- Snake wraps around the screen edges instead of dying
- Apple placement derived from the game clock
- Snake grows by one segment per apple, no length limit
- Fixed 16 ms frame tick, snake moves every 5th tick
"""

import argparse
import curses
import logging
import sys
import time

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TICK_MS = 16                  # game clock step per frame
FRAME_DELAY = TICK_MS / 1000  # ~60 FPS
MOVE_EVERY = 5                # snake moves when tick % MOVE_EVERY == 0
APPLE_SEED = 320              # clock value used for the first apple

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

KEY_CTRL_C = 3                # what Ctrl+C reads as in raw mode
NO_KEY = -1

# Directions: (dx, dy)
UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)

QUIT = "quit"

KEY_MAP = {
    curses.KEY_UP: UP,
    curses.KEY_DOWN: DOWN,
    curses.KEY_LEFT: LEFT,
    curses.KEY_RIGHT: RIGHT,
}

HEAD_GLYPHS = {
    UP: "^",
    DOWN: ",",
    RIGHT: ">",
    LEFT: "<",
}
BODY_GLYPH = "-"
APPLE_GLYPH = "@"


class TerminalError(Exception):
    """The terminal cannot host the game."""


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

def translate_key(key):
    """Map a curses key code to a direction, QUIT, or None (ignored)."""
    if key == KEY_CTRL_C:
        return QUIT
    return KEY_MAP.get(key)


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

def wrap_step(value, delta, limit):
    """Move one coordinate by delta, wrapping at 0 and at limit.

    Stepping back from 0 lands on limit itself, and only a coordinate that
    has already reached limit wraps forward to 0. A coordinate can
    therefore sit on limit for one move.
    """
    if value == 0 and delta < 0:
        return limit
    if value >= limit and delta > 0:
        return 0
    return value + delta


def place_apple(seed, width, height):
    """Deterministic apple position for a clock value."""
    return (seed % width, seed % height)


def head_glyph(direction):
    return HEAD_GLYPHS[direction]


class GameState:
    """Snake body, heading, apple and clock for one game.

    The board is the terminal size captured at startup; segments are
    (x, y) tuples with the head first. A new game starts moving RIGHT:
    directions are single-axis, so there is no diagonal opening move.
    """

    def __init__(self, width, height, direction=RIGHT):
        if width < 1 or height < 1:
            raise TerminalError(f"terminal too small: {width}x{height}")
        self.width = width
        self.height = height
        self.snake = [(0, 0)]
        self.direction = direction
        self.apple = place_apple(APPLE_SEED, width, height)
        self.tick = 0

    @property
    def head(self):
        return self.snake[0]

    def set_direction(self, direction):
        if direction not in HEAD_GLYPHS:
            raise ValueError(f"not a direction: {direction!r}")
        if direction != self.direction:
            logger.debug("Direction %s -> %s", self.direction, direction)
        self.direction = direction

    def step_point(self, point, dx, dy):
        x, y = point
        return (wrap_step(x, dx, self.width), wrap_step(y, dy, self.height))

    def advance(self, tick):
        """Apply one simulation step for the given clock value.

        Returns True when the head landed on the apple this step.
        """
        if tick % MOVE_EVERY != 0:
            return False

        dx, dy = self.direction
        new_head = self.step_point(self.head, dx, dy)
        # Every body segment takes the old position of the one ahead of it
        self.snake = [new_head] + self.snake[:-1]

        if new_head != self.apple:
            return False

        self.apple = place_apple(tick, self.width, self.height)
        tail = self.step_point(self.snake[-1], -dx, -dy)
        self.snake.append(tail)
        logger.info("Apple eaten at %s, length %d, next apple %s",
                    new_head, len(self.snake), self.apple)
        return True


# ---------------------------------------------------------------------------
# Terminal surface
# ---------------------------------------------------------------------------

class TerminalSurface:
    """Raw, non-blocking drawing surface on top of a curses window.

    Terminal restore on exit is left to curses.wrapper().
    """

    def __init__(self, stdscr):
        self.stdscr = stdscr
        curses.raw()
        curses.curs_set(0)
        stdscr.keypad(True)
        stdscr.nodelay(True)
        stdscr.timeout(0)
        max_y, max_x = stdscr.getmaxyx()
        self.width = max_x
        self.height = max_y

    def size(self):
        return (self.width, self.height)

    def poll(self):
        """Next pending key code, or NO_KEY when the queue is empty."""
        return self.stdscr.getch()

    def clear(self):
        self.stdscr.erase()

    def draw(self, x, y, glyph):
        # Clip against the live window: the board keeps its startup size
        # while a resize shrinks stdscr, and wrapped coordinates may sit
        # one past the last row or column
        max_y, max_x = self.stdscr.getmaxyx()
        if x >= max_x or y >= max_y:
            return
        if x == max_x - 1 and y == max_y - 1:
            # addstr raises in the bottom-right cell since the cursor
            # cannot advance past it
            self.stdscr.insstr(y, x, glyph)
        else:
            self.stdscr.addstr(y, x, glyph)

    def flush(self):
        self.stdscr.refresh()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render(surface, state):
    """Queue the snake and apple for the current frame."""
    for i, (x, y) in enumerate(state.snake):
        if i == 0:
            surface.draw(x, y, head_glyph(state.direction))
        else:
            surface.draw(x, y, BODY_GLYPH)

    ax, ay = state.apple
    surface.draw(ax, ay, APPLE_GLYPH)


# ---------------------------------------------------------------------------
# Main game
# ---------------------------------------------------------------------------

def drain_input(surface):
    """Read every queued key. Returns (last direction or None, quit flag)."""
    direction = None
    should_quit = False
    while True:
        key = surface.poll()
        if key == NO_KEY:
            break
        action = translate_key(key)
        if action == QUIT:
            should_quit = True
        elif action is not None:
            direction = action
    return direction, should_quit


def run_game(surface, state, sleep=time.sleep, clock=time.time):
    """Run frames until Ctrl+C. Returns the number of frames drawn."""
    frames = 0
    while True:
        frame_start = clock()

        direction, should_quit = drain_input(surface)
        if direction is not None:
            state.set_direction(direction)

        surface.clear()
        state.advance(state.tick)
        render(surface, state)
        surface.flush()
        frames += 1

        if should_quit:
            logger.info("Quit after %d frames, snake length %d",
                        frames, len(state.snake))
            return frames

        elapsed = clock() - frame_start
        sleep(max(0, FRAME_DELAY - elapsed))
        state.tick += TICK_MS


def main(stdscr):
    """Main game loop -- called by curses.wrapper()."""
    surface = TerminalSurface(stdscr)
    width, height = surface.size()
    logger.info("Starting on a %dx%d terminal", width, height)
    state = GameState(width, height)
    return run_game(surface, state)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="snake",
        description="Wraparound snake in the terminal. Arrow keys steer, "
                    "Ctrl+C quits.")
    parser.add_argument("--log-file", default=None,
                        help="write log records to this file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="log level used with --log-file (default: INFO)")
    return parser.parse_args(argv)


def configure_logging(log_file, level):
    """Log to a file, or nowhere: the screen belongs to curses.

    Returns the handler that was installed on the root logger.
    """
    root = logging.getLogger()
    if log_file is None:
        handler = logging.NullHandler()
    else:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.setLevel(level)
    root.addHandler(handler)
    return handler


def cli(argv=None):
    """Console entry point. Returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)
    try:
        curses.wrapper(main)
    except (curses.error, OSError, TerminalError) as e:
        # curses.wrapper has already restored the terminal here
        logger.exception("Fatal terminal error")
        print(f"snake: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())
