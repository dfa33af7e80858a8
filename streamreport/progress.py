"""Live progress rows kept below the regular log output."""

import asyncio
import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from streamreport.messages import MARKER, format_name
from streamreport.utils import terminal_columns

__all__ = [
    "FRAME_INTERVAL",
    "PROGRESS_FRAMES",
    "PROGRESS_INTERVAL",
    "ProgressDefinition",
    "ProgressDisplay",
    "RenderState",
]

PROGRESS_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
# Minimum time between spinner frames, in seconds
PROGRESS_INTERVAL = 0.08
# Redraw cadence while at least one row is live
FRAME_INTERVAL = 1 / 60


@dataclass
class ProgressDefinition:
    """Latest snapshot of one progress source."""

    progress: float = 0.0
    title: str | None = None


@dataclass
class RenderState:
    """What is currently drawn on the terminal."""

    active_rows: int = 0
    frame: int = 0
    frame_time: float = 0.0
    pending_timer: asyncio.TimerHandle | None = None


class ProgressDisplay:
    """Owns the output stream and keeps progress rows at the bottom of it.

    Every write goes through here so that the rows can be erased first and
    drawn again afterwards. After any write the cursor is on the line below the
    last progress row. Each write is a single string, so the terminal never
    shows a half erased block.

    While rows are drawn a timer redraws them about 60 times per second; the
    spinner only advances every PROGRESS_INTERVAL.
    """

    def __init__(
        self,
        stream,
        configuration,
        rows: Callable[[], Iterable[ProgressDefinition]] = tuple,
        enabled: bool = True,
    ):
        self.stream = stream
        self.configuration = configuration
        self.rows = rows
        self.enabled = enabled  # False for structured output
        self.state = RenderState()

    @property
    def active(self) -> bool:
        """True if rows may be drawn right now."""
        return self.enabled and self.configuration.enable_progress_bars

    def bar_width(self) -> int:
        style = self.configuration.style
        # Visible width of the row prefix, "➤ SR0000: ┌ "
        pad_left = len(f"{MARKER} {self.configuration.label_prefix}0000: ┌ ")
        max_width = min(terminal_columns(self.stream) - pad_left, 80)
        return max(0, style.size * max_width // 80)

    def _erase(self, extra: int = 0) -> str:
        count = self.state.active_rows + extra
        self.state.active_rows = 0
        if count <= 0:
            return ""
        return f"\x1b[{count}A\x1b[0J"

    def _advance_spinner(self) -> str:
        now = time.perf_counter()
        if now - self.state.frame_time > PROGRESS_INTERVAL:
            self.state.frame = (self.state.frame + 1) % len(PROGRESS_FRAMES)
            self.state.frame_time = now
        return PROGRESS_FRAMES[self.state.frame]

    def _render_row(self, definition: ProgressDefinition, spinner: str, width: int) -> str:
        ok_char, ko_char = self.configuration.style.chars
        progress = min(1.0, max(0.0, definition.progress))
        ok = math.floor(width * progress)
        marker = self.configuration.format(MARKER, "blueBright")
        name = format_name(None, self.configuration)
        return f"{marker} {name}: {spinner} {ok_char * ok}{ko_char * (width - ok)}\n"

    def _draw(self) -> str:
        self._cancel_timer()
        if not self.active:
            return ""
        rows = list(self.rows())
        if not rows:
            return ""

        spinner = self._advance_spinner()
        width = self.bar_width()
        buf = [self._render_row(row, spinner, width) for row in rows]
        self.state.active_rows = len(rows)
        self._arm_timer()
        return "".join(buf)

    def _cancel_timer(self):
        if self.state.pending_timer is not None:
            self.state.pending_timer.cancel()
            self.state.pending_timer = None

    def _arm_timer(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Nothing can animate without a loop; rows are redrawn on the next write
            return
        self.state.pending_timer = loop.call_later(FRAME_INTERVAL, self._tick)

    def _tick(self):
        self.state.pending_timer = None
        self.refresh()

    def _emit(self, text: str):
        if text:
            self.stream.write(text)
            self.stream.flush()

    def erase(self, extra: int = 0):
        """Remove the drawn rows plus extra lines above them."""
        self._emit(self._erase(extra))

    def draw(self):
        """Draw one row per live progress source."""
        self._emit(self._draw())

    def refresh(self):
        """Redraw the rows in place."""
        self._emit(self._erase() + self._draw())

    def write(self, lines: Iterable[str], replace: int = 0):
        """Write lines above the progress rows.

        replace erases that many already printed lines first, which only works
        while the display is active.
        """
        extra = replace if self.active else 0
        text = "".join(f"{line}\n" for line in lines)
        self._emit(self._erase(extra) + text + self._draw())
