import logging
import os
import queue
import select
import sys
import time
from datetime import datetime
from typing import List, Optional, Tuple

from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tickerboard.constants import QUOTE_COLUMNS, HEADER_STYLE, PLACEHOLDER, KEY_ESCAPE
from tickerboard.events import InputHandler, Quit
from tickerboard.formatting import change_style, fmt_cell, fmt_age
from tickerboard.state import DashboardView, Snapshot

logger = logging.getLogger(__name__)

Row = Tuple[List[str], Optional[str]]


def build_rows(snapshot: Snapshot) -> List[Row]:
    """One (cells, style) row per quote, in snapshot order."""
    rows = []
    for q in snapshot.quotes:
        cells = [q.symbol, q.price_str, q.change_str, q.change_pct_str,
                 q.day_high_str, q.day_low_str, q.day_open_str]
        rows.append((cells, change_style(q.change)))
    return rows


def build_quote_table(view: DashboardView) -> Table:
    table = Table(expand=True, box=None, padding=(0, 1), header_style=HEADER_STYLE)
    for label, min_width in QUOTE_COLUMNS:
        table.add_column(label, justify="right", min_width=min_width, no_wrap=True)

    rows = build_rows(view.snapshot)
    if not rows:
        table.add_row(*[Text(PLACEHOLDER, style="dim")] * len(QUOTE_COLUMNS))
    for cells, style in rows:
        table.add_row(*[fmt_cell(c) for c in cells], style=style)
    return table


def _status_text(view: DashboardView, now: float) -> Text:
    left = Text()
    if view.refreshing:
        left.append("refreshing… ", style="dim cyan")
    if view.last_error:
        left.append(f"⚠ {view.last_error}", style="bold yellow")
        left.append("  ")
    if view.last_warning:
        left.append(f"⚠ {view.last_warning}", style="bold yellow")
    if not left.plain:
        updated = view.snapshot.updated_at
        if updated is None:
            left.append(f"{len(view.symbols)} symbols, waiting for quotes", style="grey46")
        else:
            left.append(f"{len(view.symbols)} symbols, updated {fmt_age(now - updated)} ago",
                        style="grey46")
    return left


def make_header(view: DashboardView, now: Optional[float] = None) -> Panel:
    now = time.time() if now is None else now
    clock = datetime.fromtimestamp(now).strftime("%H:%M:%S")

    right = Text(f"{clock}  [u] Refresh  [a] Add  [r] Remove  [q] Quit", style="dim")

    header_table = Table(expand=True, box=None, show_header=False, padding=0)
    header_table.add_column("left")
    header_table.add_column("right", justify="right")
    header_table.add_row(_status_text(view, now), right)

    return Panel(header_table, title="[bold grey70]TICKERBOARD[/bold grey70]", border_style="grey70")


def make_prompt(prompt: str, buffer: str) -> Panel:
    line = Text()
    line.append(f"{prompt}: ", style="bold")
    line.append(buffer)
    line.append("█", style="blink")
    return Panel(line, subtitle="[grey46]Enter to confirm, Esc to cancel[/grey46]",
                 subtitle_align="right", border_style="grey70")


def build_layout(view: DashboardView, handler: Optional[InputHandler] = None) -> Layout:
    layout = Layout()

    # Panel border = 2 rows (top+bottom), plus the header row
    quote_rows = max(len(view.snapshot.quotes), 1) + 1
    parts = [
        Layout(name="header", size=3),
        Layout(name="quotes", size=quote_rows + 2),
    ]
    # The key listener edits the handler concurrently; read it once
    prompt = handler.prompt if handler is not None else None
    buffer = handler.buffer if handler is not None else ""
    if prompt is not None:
        parts.append(Layout(name="prompt", size=3))
    parts.append(Layout(name="fill"))
    layout.split_column(*parts)

    layout["header"].update(make_header(view))
    layout["quotes"].update(Panel(build_quote_table(view), title="[bold grey70]QUOTES[/bold grey70]",
                                  border_style="grey70"))
    if prompt is not None:
        layout["prompt"].update(make_prompt(prompt, buffer))
    layout["fill"].update(Text(""))
    return layout


def _dispatch_keys(data: bytes, handler: InputHandler, events: "queue.Queue"):
    text = data.decode("utf-8", "ignore")
    # A lone ESC is a key press; ESC followed by more bytes is an arrow/function key
    if text.startswith(KEY_ESCAPE) and len(text) > 1:
        return
    for ch in text:
        event = handler.feed(ch)
        if event is not None:
            events.put(event)


def key_listener(handler: InputHandler, events: "queue.Queue", stop):
    """Background thread that turns keystrokes into events on ``events``."""
    try:
        import tty
        import termios

        fd = sys.stdin.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            while not stop.is_set():
                ready, _, _ = select.select([fd], [], [], 0.25)
                if not ready:
                    continue
                data = os.read(fd, 32)
                if not data:
                    events.put(Quit())
                    break
                _dispatch_keys(data, handler, events)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
    except Exception as e:
        # No usable TTY: the dashboard still runs, Ctrl+C quits
        logger.warning("Key listener disabled: %s", e)
        stop.wait()
