from dataclasses import dataclass
from typing import List, Optional, Union

from tickerboard.constants import (
    KEY_REFRESH, KEY_ADD, KEY_REMOVE, KEY_QUIT,
    KEY_ESCAPE, KEY_ENTER, KEY_BACKSPACE, KEY_INTERRUPT,
)


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class AddRequested:
    text: str

    @property
    def names(self) -> List[str]:
        return self.text.split()


@dataclass(frozen=True)
class RemoveRequested:
    text: str

    @property
    def names(self) -> List[str]:
        return self.text.split()


@dataclass(frozen=True)
class Quit:
    pass


Event = Union[Refresh, AddRequested, RemoveRequested, Quit]

PROMPT_ADD = "Add"
PROMPT_REMOVE = "Remove"


class InputHandler:
    """Turns raw keystrokes into events, editing a one-line prompt when open.

    Thread-safety: ``feed`` is called from the key listener thread only;
    the renderer reads ``prompt`` and ``buffer``, which are plain string
    attributes replaced whole.
    """

    def __init__(self):
        self.prompt: Optional[str] = None
        self.buffer = ""

    @property
    def prompting(self) -> bool:
        return self.prompt is not None

    def feed(self, ch: str) -> Optional[Event]:
        if ch == KEY_INTERRUPT:
            return Quit()
        if self.prompting:
            return self._feed_prompt(ch)
        if ch in KEY_REFRESH:
            return Refresh()
        if ch in KEY_ADD:
            self._open(PROMPT_ADD)
        elif ch in KEY_REMOVE:
            self._open(PROMPT_REMOVE)
        elif ch in KEY_QUIT or ch == KEY_ESCAPE:
            return Quit()
        return None

    def _open(self, prompt: str):
        self.buffer = ""
        self.prompt = prompt

    def _close(self):
        self.prompt = None
        self.buffer = ""

    def _feed_prompt(self, ch: str) -> Optional[Event]:
        if ch == KEY_ESCAPE:
            self._close()
        elif ch in KEY_ENTER:
            text, prompt = self.buffer, self.prompt
            self._close()
            if prompt == PROMPT_ADD:
                return AddRequested(text)
            return RemoveRequested(text)
        elif ch in KEY_BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif ch.isprintable():
            self.buffer += ch
        return None
