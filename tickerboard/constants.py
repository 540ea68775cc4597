import os

# Project root: parent of the tickerboard/ package directory
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.ini")
WATCHLIST_PATH = os.path.join(PROJECT_ROOT, "watchlist.txt")
ENV_PATH = os.path.join(PROJECT_ROOT, ".env")
LOG_PATH = os.path.join(PROJECT_ROOT, "logs", "tickerboard.log")

DEFAULT_SYMBOLS = ["ORCL", "AAPL", "IBM"]

DEFAULT_REFRESH = 5
TICK_SECONDS = 1.0
REDRAW_SECONDS = 0.5

DEFAULT_PROVIDER = "yahoo"
PROVIDERS = ("yahoo", "massive")

WATCHLIST_SECTION = "symbols"

# Column definitions for the quote table: (header_label, min_width)
# Every column is right-aligned.
QUOTE_COLUMNS = [
    ("Symbol", 8),
    ("Current", 15),
    ("Change", 10),
    ("Change%", 9),
    ("High", 10),
    ("Low", 10),
    ("Open", 10),
]

POSITIVE_STYLE = "green"
NEGATIVE_STYLE = "red"
HEADER_STYLE = "bold white on pale_violet_red1"

PLACEHOLDER = "—"

# Key bindings
KEY_REFRESH = ("u", "U")
KEY_ADD = ("a", "A")
KEY_REMOVE = ("r", "R")
KEY_QUIT = ("q", "Q")
KEY_ESCAPE = "\x1b"
KEY_ENTER = ("\n", "\r")
KEY_BACKSPACE = ("\x7f", "\x08")
KEY_INTERRUPT = "\x03"
