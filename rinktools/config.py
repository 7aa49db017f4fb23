"""User configuration, themes and cached downloads of live data."""

from __future__ import annotations

import json
import os
import re
import tempfile
import time
import tomllib
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum, auto
from fractions import Fraction
from pathlib import Path
from typing import Any

import platformdirs

from .style import NamedColor, Style, parse_style

_APP = "rink"
_USER_AGENT = "rinktools-cli"


class ConfigError(Exception):
    """The configuration could not be read or is invalid."""


class FetchError(Exception):
    """A cached or downloaded file could not be obtained."""


class FmtToken(Enum):
    """Kinds of output fragments that a theme can style."""

    PLAIN = auto()
    ERROR = auto()
    UNIT = auto()
    QUANTITY = auto()
    NUMBER = auto()
    USER_INPUT = auto()
    DOC_STRING = auto()
    POW = auto()
    PROP_NAME = auto()
    DATE_TIME = auto()
    LIST_BEGIN = auto()
    LIST_SEP = auto()


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"invalid type: {value!r}, expected a boolean")
    return value


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"invalid type: {value!r}, expected a string")
    return value


def _as_style(value: Any) -> Style:
    return parse_style(_as_str(value))


_DURATION_UNITS: dict[str, Fraction] = {}
for _names, _seconds in (
    (("nsec", "ns"), Fraction(1, 10**9)),
    (("usec", "us", "µs"), Fraction(1, 10**6)),
    (("msec", "ms"), Fraction(1, 10**3)),
    (("seconds", "second", "sec", "s"), Fraction(1)),
    (("minutes", "minute", "min", "m"), Fraction(60)),
    (("hours", "hour", "hr", "h"), Fraction(3600)),
    (("days", "day", "d"), Fraction(86400)),
    (("weeks", "week", "w"), Fraction(604800)),
    (("months", "month", "M"), Fraction(2630016)),
    (("years", "year", "y"), Fraction(31557600)),
):
    for _name in _names:
        _DURATION_UNITS[_name] = _seconds

_DURATION_ITEM = re.compile(r"\s*([0-9]+)\s*([^\s0-9]*)")


def parse_duration(text: Any) -> float:
    """Parse a duration such as ``2s`` or ``1h 30min`` into seconds."""
    text = _as_str(text)
    if not text.strip():
        raise ValueError("value was empty")
    total = Fraction(0)
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _DURATION_ITEM.match(stripped, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        if not unit:
            raise ValueError("time unit needed, for example 10sec or 10ms")
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown time unit {unit!r}")
        total += int(number) * _DURATION_UNITS[unit]
        pos = match.end()
    return float(total)


_BYTE_UNITS = {
    "": 1,
    "b": 1,
    "kb": 10**3,
    "kib": 2**10,
    "mb": 10**6,
    "mib": 2**20,
    "gb": 10**9,
    "gib": 2**30,
    "tb": 10**12,
    "tib": 2**40,
    "pb": 10**15,
    "pib": 2**50,
    "eb": 10**18,
    "eib": 2**60,
}
_BYTE_SIZE = re.compile(r"\s*([0-9]+(?:\.[0-9]+)?)\s*([A-Za-z]*)\s*")


def parse_byte_size(text: Any) -> int:
    """Parse a byte count given as an integer or as a string like ``20 MB``."""
    if isinstance(text, int) and not isinstance(text, bool):
        if text < 0:
            raise ValueError("byte size cannot be negative")
        return text
    text = _as_str(text)
    match = _BYTE_SIZE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid byte size {text!r}")
    number, unit = match.groups()
    multiplier = _BYTE_UNITS.get(unit.lower())
    if multiplier is None:
        raise ValueError(f"unknown byte unit {unit!r}")
    return int(Decimal(number) * multiplier)


def _parser(func: Callable[[Any], Any]) -> dict[str, Callable[[Any], Any]]:
    return {"parse": func}


def _style_field(default: Style | None = None) -> Any:
    return field(default=default or Style(), metadata=_parser(_as_style))


@dataclass(frozen=True)
class Theme:
    """Styles for each kind of output fragment."""

    plain: Style = _style_field()
    error: Style = _style_field()
    unit: Style = _style_field()
    quantity: Style = _style_field()
    number: Style = _style_field()
    user_input: Style = _style_field()
    doc_string: Style = _style_field()
    pow: Style = _style_field()
    prop_name: Style = _style_field()
    date_time: Style = _style_field()

    def get_style(self, token: FmtToken) -> Style:
        """The style for *token*; list markers use the plain style."""
        if token in (FmtToken.LIST_BEGIN, FmtToken.LIST_SEP):
            return self.plain
        return getattr(self, token.name.lower())


DEFAULT_THEME = Theme(
    error=Style(foreground=NamedColor.RED),
    unit=Style(foreground=NamedColor.CYAN),
    quantity=Style(foreground=NamedColor.CYAN, dimmed=True),
    user_input=Style(bold=True),
    doc_string=Style(italic=True),
    prop_name=Style(foreground=NamedColor.CYAN),
)


@dataclass(frozen=True)
class RinkSettings:
    """General interactive settings."""

    prompt: str = field(default="> ", metadata=_parser(_as_str))
    long_output: bool = field(default=False, metadata=_parser(_as_bool))


@dataclass(frozen=True)
class CurrencySettings:
    """Where live currency data comes from and how long it is kept."""

    enabled: bool = field(default=True, metadata=_parser(_as_bool))
    endpoint: str = field(
        default="https://rinkcalc.app/data/currency.json", metadata=_parser(_as_str)
    )
    cache_duration: float = field(default=3600.0, metadata=_parser(parse_duration))
    timeout: float = field(default=2.0, metadata=_parser(parse_duration))


@dataclass(frozen=True)
class ColorSettings:
    """Whether output is coloured, and with which theme."""

    enabled: bool = field(default=False, metadata=_parser(_as_bool))
    theme: str = field(default="default", metadata=_parser(_as_str))


@dataclass(frozen=True)
class LimitSettings:
    """Resource limits applied to each query when sandboxing is on."""

    enabled: bool = field(default=False, metadata=_parser(_as_bool))
    show_metrics: bool = field(default=False, metadata=_parser(_as_bool))
    memory: int = field(default=20 * 10**6, metadata=_parser(parse_byte_size))
    """Maximum memory per query, in bytes."""
    timeout: float = field(default=10.0, metadata=_parser(parse_duration))


def _section(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a table")
    known = {f.name: f for f in fields(cls)}
    values = {}
    for key, raw in data.items():
        spec = known.get(key)
        if spec is None:
            raise ConfigError(f"unknown field `{key}` in {where}")
        try:
            values[key] = spec.metadata["parse"](raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{where}.{key}: {exc}") from exc
    return cls(**values)


@dataclass
class Config:
    """The complete user configuration."""

    rink: RinkSettings = field(default_factory=RinkSettings)
    currency: CurrencySettings = field(default_factory=CurrencySettings)
    colors: ColorSettings = field(default_factory=ColorSettings)
    limits: LimitSettings = field(default_factory=LimitSettings)
    themes: dict[str, Theme] = field(default_factory=dict)
    default_theme: Theme = DEFAULT_THEME
    disabled_theme: Theme = field(default_factory=Theme)

    def get_theme(self) -> Theme:
        """The theme in effect: unstyled when colours are off."""
        if not self.colors.enabled:
            return self.disabled_theme
        return self.themes.get(self.colors.theme, self.default_theme)

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a config from parsed TOML; unknown keys are an error."""
        if not isinstance(data, dict):
            raise ConfigError("config: expected a table")
        sections: dict[str, type] = {
            "rink": RinkSettings,
            "currency": CurrencySettings,
            "colors": ColorSettings,
            "limits": LimitSettings,
            "default_theme": Theme,
            "disabled_theme": Theme,
        }
        values: dict[str, Any] = {}
        for key, raw in data.items():
            if key in sections:
                values[key] = _section(sections[key], raw, key)
            elif key == "themes":
                if not isinstance(raw, dict):
                    raise ConfigError("themes: expected a table")
                values[key] = {
                    name: _section(Theme, theme, f"themes.{name}")
                    for name, theme in raw.items()
                }
            else:
                raise ConfigError(f"unknown field `{key}` in config")
        return cls(**values)


def config_path(name: str) -> Path:
    """Path of *name* inside the user's configuration directory."""
    return platformdirs.user_config_path(_APP, appauthor=False, roaming=True) / name


def read_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Read the config file; a missing file gives the defaults."""
    target = Path(path) if path is not None else config_path("config.toml")
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Config()
    except OSError as exc:
        raise ConfigError("Failed to read config.toml") from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"While parsing config.toml: {exc}") from exc
    return Config.from_dict(data)


def read_from_search_path(filename: str, paths: Iterable[str | os.PathLike[str]]) -> str:
    """Contents of the first readable *filename* among *paths*."""
    paths = [Path(p) for p in paths]
    for directory in paths:
        try:
            return (directory / filename).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
    listing = "\n  ".join(str(p) for p in paths)
    raise FileNotFoundError(f"Could not find {filename} in search path. Paths:{listing}")


def read_if_current(path: str | os.PathLike[str], expiration: float) -> Path:
    """Return *path* if it was modified within *expiration* seconds."""
    target = Path(path)
    elapsed = time.time() - target.stat().st_mtime
    if elapsed < 0:
        raise FetchError("File modification time is in the future")
    if elapsed > expiration:
        raise FetchError("File is out of date")
    return target


def download_to_file(path: str | os.PathLike[str], url: str, timeout: float) -> Path:
    """Download *url* and atomically replace *path* with it."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise FetchError(
            f"Received status {exc.code} {exc.reason} while downloading {url}"
        ) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise FetchError(f"While downloading {url}") from exc

    # Keep the temporary file beside its destination so the rename stays on one filesystem.
    handle = tempfile.NamedTemporaryFile(
        dir=target.parent,
        prefix=f"{target.stem}.",
        suffix=target.suffix or "",
        delete=False,
    )
    try:
        with handle:
            handle.write(body)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, target)
    except OSError as exc:
        Path(handle.name).unlink(missing_ok=True)
        raise FetchError("Failed to write to cache dir") from exc
    return target


def cached(
    filename: str,
    url: str,
    expiration: float,
    timeout: float,
    cache_dir: str | os.PathLike[str] | None = None,
) -> Path:
    """A fresh cached copy of *url*, downloading it when missing or stale.

    If the download fails, a stale copy is used when there is one.
    """
    directory = (
        Path(cache_dir)
        if cache_dir is not None
        else platformdirs.user_cache_path(_APP, appauthor=False)
    )
    path = directory / filename
    try:
        return read_if_current(path, expiration)
    except (OSError, FetchError):
        pass
    try:
        return download_to_file(path, url, timeout)
    except FetchError as err:
        if path.is_file():
            print(f"Failed to refresh {filename}, using stale version: {err}")
            return path
        raise FetchError(f"Failed to fetch {filename}") from err


def load_live_currency(currency: CurrencySettings) -> Any:
    """Fetch (or reuse) the live currency definitions and parse them as JSON."""
    path = cached(
        "currency.json", currency.endpoint, currency.cache_duration, currency.timeout
    )
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON") from exc