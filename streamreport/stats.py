"""Run counters and the final summary line."""

import time
from dataclasses import dataclass, field

from streamreport.messages import Severity

__all__ = [
    "Counters",
    "format_timing",
]


def _trim(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_timing(ms: float) -> str:
    """Format a duration in milliseconds as seconds, or minutes past a minute."""
    if ms < 60 * 1000:
        return f"{_trim(ms / 1000)}s"
    return f"{_trim(ms / 60_000)}m"


@dataclass
class Counters:
    """Event counters for one report run."""

    cache_hits: int = 0
    cache_misses: int = 0
    warnings: int = 0
    errors: int = 0
    start_time: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    @property
    def severity(self) -> Severity:
        """Channel the summary goes to: errors beat warnings beat success."""
        if self.errors > 0:
            return Severity.ERROR
        if self.warnings > 0:
            return Severity.WARNING
        return Severity.INFO

    def status(self) -> str:
        return {
            Severity.ERROR: "Failed with errors",
            Severity.WARNING: "Done with warnings",
            Severity.INFO: "Done",
        }[self.severity]

    def fetch_status(self) -> str:
        hits, misses = self.cache_hits, self.cache_misses
        text = ""
        if hits > 1:
            text += f" - {hits} packages were already cached"
        elif hits == 1:
            text += " - one package was already cached"

        if hits > 0:
            if misses > 1:
                text += f", {misses} had to be fetched"
            elif misses == 1:
                text += ", one had to be fetched"
        else:
            if misses > 1:
                text += f" - {misses} packages had to be fetched"
            elif misses == 1:
                text += " - one package had to be fetched"
        return text

    def summary(self, enable_timers: bool = True, elapsed_ms: float | None = None) -> str:
        """Compose the one-line footer, e.g. 'Done in 1.5s - one package was already cached'."""
        if not enable_timers:
            return self.status()
        if elapsed_ms is None:
            elapsed_ms = self.elapsed_ms()
        return f"{self.status()} in {format_timing(elapsed_ms)}{self.fetch_status()}"
