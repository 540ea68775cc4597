from typing import Optional

from rich.text import Text

from tickerboard.constants import PLACEHOLDER, POSITIVE_STYLE, NEGATIVE_STYLE


def format_cash(val: float) -> str:
    """Dollar amount with two decimals; the sign goes before the '$'."""
    if val < 0:
        return f"-${-val:.2f}"
    return f"${abs(val):.2f}"  # abs() folds -0.0


def format_percentage(val: float) -> str:
    return f"{val:.2f}%"


def fmt_cash_or_dash(val: Optional[float]) -> str:
    if val is None:
        return PLACEHOLDER
    return format_cash(val)


def fmt_pct_or_dash(val: Optional[float]) -> str:
    if val is None:
        return PLACEHOLDER
    return format_percentage(val)


def change_style(change: Optional[float]) -> Optional[str]:
    """Row style for a change value: green up, red down, none when flat or unknown."""
    if change is None or change == 0:
        return None
    return POSITIVE_STYLE if change > 0 else NEGATIVE_STYLE


def fmt_cell(val: str, style: Optional[str] = None) -> Text:
    if val == PLACEHOLDER:
        return Text(val, style="dim")
    return Text(val, style=style or "")


def fmt_age(seconds: float) -> str:
    """Short age for 'updated ... ago', e.g. '4s', '2m', '1h'."""
    seconds = max(int(seconds), 0)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    return f"{seconds // 3600}h"
