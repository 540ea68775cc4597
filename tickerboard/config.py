import configparser
import os
import re
import tempfile
from dataclasses import dataclass
from typing import Iterable, List, Optional

from tickerboard.constants import (
    CONFIG_PATH, WATCHLIST_PATH, LOG_PATH, ENV_PATH,
    DEFAULT_REFRESH, DEFAULT_PROVIDER, PROVIDERS, WATCHLIST_SECTION,
)
from tickerboard.errors import ConfigError, WatchlistError
from tickerboard.state import is_valid_symbol, normalize_symbol


def parse_interval(value: str, default: int) -> int:
    """Convert interval string like '5s', '1m', '1h' (or bare seconds) to seconds."""
    value = value.strip().lower()
    if value.isdigit() and int(value) > 0:
        return int(value)
    m = re.match(r"^(\d+)\s*(s|m|h)$", value)
    if not m or int(m.group(1)) == 0:
        print(f"[warning] Invalid interval '{value}', using {default}s")
        return default
    num, unit = int(m.group(1)), m.group(2)
    multipliers = {"s": 1, "m": 60, "h": 3600}
    return num * multipliers[unit]


@dataclass
class Config:
    refresh_interval: int = DEFAULT_REFRESH
    provider: str = DEFAULT_PROVIDER
    watchlist_path: str = WATCHLIST_PATH
    log_file: str = LOG_PATH
    log_level: str = "INFO"


def parse_config(path: str = CONFIG_PATH) -> Config:
    """Read config.ini and return a Config object."""
    cfg_obj = Config()
    if not os.path.exists(path):
        print("[notice] config.ini not found, using defaults")
        return cfg_obj

    cfg = configparser.RawConfigParser()
    try:
        cfg.read(path)
    except configparser.Error as e:
        raise ConfigError(f"{path}: {e}") from e
    sect = cfg["dashboard"] if "dashboard" in cfg else {}

    cfg_obj.refresh_interval = parse_interval(sect.get("refresh_interval", f"{DEFAULT_REFRESH}s"),
                                              DEFAULT_REFRESH)

    provider = sect.get("provider", DEFAULT_PROVIDER).strip().lower()
    if provider not in PROVIDERS:
        raise ConfigError(f"Unknown provider '{provider}' (expected one of: {', '.join(PROVIDERS)})")
    cfg_obj.provider = provider

    # Relative paths are resolved against the directory holding config.ini
    base = os.path.dirname(os.path.abspath(path))
    if sect.get("watchlist"):
        cfg_obj.watchlist_path = os.path.join(base, os.path.expanduser(sect["watchlist"].strip()))
    if sect.get("log_file"):
        cfg_obj.log_file = os.path.join(base, os.path.expanduser(sect["log_file"].strip()))
    if sect.get("log_level"):
        cfg_obj.log_level = sect["log_level"].strip().upper()

    return cfg_obj


def load_env(path: str = ENV_PATH):
    """Load KEY=value lines from a .env file without overriding the environment."""
    if not os.path.exists(path):
        return
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, val = line.partition("=")
                os.environ.setdefault(key.strip(), val.strip())


class WatchlistStore:
    """Durable watchlist kept in a sectioned text file.

    The file holds one recognised section, ``[symbols]``, with one symbol
    per line. Blank lines and ``#`` comments are ignored.
    """

    def __init__(self, path: str = WATCHLIST_PATH):
        self.path = path

    def load(self) -> Optional[List[str]]:
        """Return the stored symbols, or None when no file exists.

        Raises WatchlistError if the file is malformed or unreadable.
        """
        if not os.path.exists(self.path):
            return None

        symbols: List[str] = []
        in_section = False
        try:
            with open(self.path, "r") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if line.startswith("[") and line.endswith("]"):
                        section = line[1:-1].strip().lower()
                        if section != WATCHLIST_SECTION:
                            raise WatchlistError(f"{self.path}:{lineno}: unknown section [{section}]")
                        in_section = True
                        continue
                    if not in_section:
                        raise WatchlistError(
                            f"{self.path}:{lineno}: '{line}' outside [{WATCHLIST_SECTION}] section")
                    if not is_valid_symbol(normalize_symbol(line)):
                        raise WatchlistError(f"{self.path}:{lineno}: invalid symbol '{line}'")
                    symbols.append(line)
        except OSError as e:
            raise WatchlistError(f"{self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise WatchlistError(f"{self.path}: not a text file") from e
        return symbols

    def save(self, symbols: Iterable[str]):
        """Write the symbols, replacing the file in one step.

        Raises WatchlistError if the file cannot be written.
        """
        lines = ["# tickerboard watchlist", f"[{WATCHLIST_SECTION}]"]
        lines.extend(symbols)
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".watchlist-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w") as f:
                f.write("\n".join(lines) + "\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise WatchlistError(f"Cannot save {self.path}: {e.strerror or e}") from e
