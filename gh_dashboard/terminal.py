"""Keyboard input from the controlling terminal."""

import asyncio
import logging
import os
import sys
import termios
import tty
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from enum import StrEnum
from typing import TextIO

log = logging.getLogger(__name__)


class Key(StrEnum):
    """Names of the non-printable keys the dashboard reacts to."""

    ENTER = "enter"
    ESCAPE = "escape"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


ESCAPE_SEQUENCES = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
}


def decode_keys(data: str) -> Sequence[str]:
    """Split a chunk of terminal input into key names.

    Arrow keys arrive as escape sequences; a lone escape character is the
    Escape key. Unknown sequences are dropped. Printable characters are
    returned as-is.
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        char = data[i]
        if char == "\x1b" and i + 1 < len(data) and data[i + 1] in "[O":
            end = i + 2
            # CSI sequences end with a byte in the range @ to ~
            while end < len(data) and not "@" <= data[end] <= "~":
                end += 1
            sequence = data[i : end + 1]
            if (key := ESCAPE_SEQUENCES.get(sequence)) is not None:
                keys.append(key)
            else:
                log.debug("Ignoring escape sequence %r", sequence)
            i = end + 1
            continue

        if char == "\x1b":
            keys.append(Key.ESCAPE)
        elif char in "\r\n":
            keys.append(Key.ENTER)
        else:
            keys.append(char)
        i += 1
    return keys


@contextmanager
def keyboard_input(
    stream: TextIO = sys.stdin,
) -> Generator[asyncio.Queue[str], None, None]:
    """Put the terminal in cbreak mode and feed key presses into a queue.

    Must be entered while an event loop is running. The terminal settings are
    restored on exit.
    """
    loop = asyncio.get_running_loop()
    fd = stream.fileno()
    keys: asyncio.Queue[str] = asyncio.Queue()

    def on_readable() -> None:
        data = os.read(fd, 1024).decode("utf-8", errors="replace")
        for key in decode_keys(data):
            keys.put_nowait(key)

    saved_state = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    loop.add_reader(fd, on_readable)
    try:
        yield keys
    finally:
        loop.remove_reader(fd)
        termios.tcsetattr(fd, termios.TCSADRAIN, saved_state)
