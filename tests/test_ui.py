import queue

from rich.console import Console

from tickerboard.events import InputHandler, Quit, Refresh
from tickerboard.state import DashboardView, Quote, Snapshot
from tickerboard.ui import (
    _dispatch_keys, build_layout, build_quote_table, build_rows, make_header,
)


def render(renderable, width=120) -> str:
    console = Console(record=True, width=width, color_system=None)
    console.print(renderable)
    return console.export_text()


def default_snapshot() -> Snapshot:
    return Snapshot((
        Quote("ORCL", price=120.5, change=1.25, change_pct=1.05,
              day_high=121.0, day_low=118.75, day_open=119.25),
        Quote("AAPL", price=190.0, change=-2.5, change_pct=-1.3,
              day_high=193.0, day_low=189.1, day_open=192.5),
        Quote("IBM", price=150.0, change=0.0, change_pct=0.0,
              day_high=151.0, day_low=149.0, day_open=150.0),
    ), updated_at=1000.0)


class TestBuildRows:

    def test_default_watchlist_rows_in_order_with_sign_styles(self):
        rows = build_rows(default_snapshot())
        assert [cells[0] for cells, _ in rows] == ["ORCL", "AAPL", "IBM"]
        assert [style for _, style in rows] == ["green", "red", None]

    def test_cells_use_formatted_strings(self):
        cells, _ = build_rows(default_snapshot())[1]
        assert cells == ["AAPL", "$190.00", "-$2.50", "-1.30%", "$193.00", "$189.10", "$192.50"]

    def test_empty_snapshot_has_no_rows(self):
        assert build_rows(Snapshot()) == []


class TestQuoteTable:

    def test_header_and_right_alignment(self):
        table = build_quote_table(DashboardView(snapshot=default_snapshot()))
        assert [c.header for c in table.columns] == [
            "Symbol", "Current", "Change", "Change%", "High", "Low", "Open"]
        assert all(c.justify == "right" for c in table.columns)
        assert "bold" in table.header_style
        assert table.row_count == 3
        assert [r.style for r in table.rows] == ["green", "red", None]

    def test_empty_snapshot_shows_placeholder_row(self):
        table = build_quote_table(DashboardView())
        assert table.row_count == 1
        assert "—" in render(table)

    def test_renders_values(self):
        text = render(build_quote_table(DashboardView(snapshot=default_snapshot())))
        assert "-$2.50" in text
        assert "1.05%" in text


class TestHeader:

    def test_shows_error_and_warning(self):
        view = DashboardView(last_error="Yahoo: timed out", last_warning="Cannot save x")
        text = render(make_header(view, now=1000.0))
        assert "Yahoo: timed out" in text
        assert "Cannot save x" in text

    def test_shows_update_age(self):
        view = DashboardView(symbols=("ORCL", "AAPL", "IBM"), snapshot=default_snapshot())
        text = render(make_header(view, now=1007.0))
        assert "3 symbols, updated 7s ago" in text

    def test_waiting_before_first_quotes(self):
        text = render(make_header(DashboardView(symbols=("AAPL",)), now=1.0))
        assert "waiting for quotes" in text


class TestLayout:

    def test_prompt_panel_only_while_prompting(self):
        handler = InputHandler()
        view = DashboardView(snapshot=default_snapshot())
        assert "Add:" not in render(build_layout(view, handler))

        handler.feed("a")
        for ch in "TSLA":
            handler.feed(ch)
        assert "Add: TSLA" in render(build_layout(view, handler))

    def test_prompt_closed_mid_render_uses_first_read(self):
        class ClosingHandler:
            """Prompt closes (Enter pressed) right after the renderer first looks."""
            def __init__(self):
                self.reads = 0
                self.buffer = "TSLA"

            @property
            def prompt(self):
                self.reads += 1
                return "Add" if self.reads == 1 else None

        handler = ClosingHandler()
        out = render(build_layout(DashboardView(snapshot=default_snapshot()), handler))
        assert "Add: TSLA" in out
        assert "None:" not in out
        assert handler.reads == 1


class TestDispatchKeys:

    def test_plain_keys_become_events(self):
        events = queue.Queue()
        _dispatch_keys(b"uq", InputHandler(), events)
        assert events.get_nowait() == Refresh()
        assert events.get_nowait() == Quit()

    def test_escape_sequences_are_ignored(self):
        events = queue.Queue()
        _dispatch_keys(b"\x1b[A", InputHandler(), events)
        assert events.empty()

    def test_lone_escape_quits(self):
        events = queue.Queue()
        _dispatch_keys(b"\x1b", InputHandler(), events)
        assert events.get_nowait() == Quit()
