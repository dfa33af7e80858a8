"""Reporter configuration, text colouring and progress bar styles."""

import datetime
import os
from dataclasses import dataclass

from streamreport.utils import is_terminal

__all__ = [
    "PROGRESS_STYLES",
    "Configuration",
    "ProgressStyle",
    "default_style",
]

# SGR codes for the style names accepted by Configuration.format
STYLES = {
    "blueBright": "94",
    "yellowBright": "93",
    "redBright": "91",
    "grey": "90",
    "green": "32",
    "cyan": "36",
    "bold": "1",
    "dim": "2",
}

# Terminals known to render the emoji bar styles out of the box
EMOJI_TERMINALS = {"iTerm.app", "Apple_Terminal"}


@dataclass(frozen=True)
class ProgressStyle:
    """Glyphs for the filled and unfilled part of a bar.

    size is the bar width on an 80 column terminal, in glyphs. Emoji take two
    cells each, hence the smaller size for those styles.
    """

    chars: tuple[str, str]
    size: int
    date: tuple[int, int] | None = None  # (day, month) the style is the default on


PROGRESS_STYLES = {
    "patrick": ProgressStyle(("🍀", "🌱"), 40, (17, 3)),
    "simba": ProgressStyle(("🌟", "✨"), 40, (19, 7)),
    "jack": ProgressStyle(("🎃", "🦇"), 40, (31, 10)),
    "hogsfather": ProgressStyle(("🎉", "🎄"), 40, (31, 12)),
    "default": ProgressStyle(("=", "-"), 80),
}


def default_style(today: datetime.date | None = None, term_program: str | None = None) -> str:
    """Pick the style name to use when none is configured.

    Seasonal styles are only considered on terminals that support emoji.
    """
    if term_program not in EMOJI_TERMINALS:
        return "default"
    today = today or datetime.date.today()
    for name, style in PROGRESS_STYLES.items():
        if style.date is None or style.date == (today.day, today.month):
            return name
    return "default"


@dataclass
class Configuration:
    """Settings consulted by the reporter while it runs.

    Build one with from_environment() to sniff the terminal once at startup,
    or construct it directly for full control (tests do this).
    """

    enable_timers: bool = True
    enable_progress_bars: bool = True
    enable_colors: bool = True
    progress_bar_style: str | None = None
    label_prefix: str = "SR"

    def __post_init__(self):
        if self.progress_bar_style is None:
            self.progress_bar_style = "default"
        if self.progress_bar_style not in PROGRESS_STYLES:
            raise ValueError(f"Invalid progress bar style: {self.progress_bar_style}")

    @classmethod
    def from_environment(cls, stream, environ=None, today: datetime.date | None = None, **overrides):
        """Derive a configuration from the terminal behind stream."""
        environ = os.environ if environ is None else environ
        tty = is_terminal(stream)
        colors = tty
        if environ.get("NO_COLOR"):
            colors = False
        elif environ.get("FORCE_COLOR"):
            colors = True
        settings = {
            "enable_progress_bars": tty,
            "enable_colors": colors,
            "progress_bar_style": default_style(today, environ.get("TERM_PROGRAM")),
        }
        settings.update(overrides)
        return cls(**settings)

    @property
    def style(self) -> ProgressStyle:
        return PROGRESS_STYLES[self.progress_bar_style]

    def format(self, text: str, style: str) -> str:
        """Colour text with a named style; no-op when colours are disabled."""
        if not self.enable_colors:
            return text
        code = STYLES.get(style)
        if code is None:
            raise ValueError(f"Unknown text style: {style}")
        return f"\x1b[{code}m{text}\x1b[0m"
