"""Streaming reporter turning diagnostics and progress into terminal or JSON output."""

import contextlib
import json as jsonlib
import logging
import sys
import time
import traceback
from collections.abc import AsyncIterable, Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from streamreport.config import Configuration
from streamreport.errors import ReportError
from streamreport.forgettable import ForgettableBuffer
from streamreport.messages import (
    FORGETTABLE_NAMES,
    MARKER,
    MessageName,
    Severity,
    format_indent,
    format_name,
)
from streamreport.progress import ProgressDisplay
from streamreport.sources import ProgressHandle, ProgressMultiplexer
from streamreport.stats import Counters, format_timing

__all__ = ["ReportState", "StreamReport"]

T = TypeVar("T")

# Opaque identifier of a package, only ever counted
Locator = Any


class ReportState(Enum):
    CREATED = "created"
    ACTIVE = "active"
    FINALIZING = "finalizing"
    CLOSED = "closed"


class StreamReport:
    """Report events of a long running command to a stream.

    Human output keeps live progress rows at the bottom of the terminal and
    collapses forgettable notices into a sliding window. With json=True each
    event becomes one JSON record per line and nothing is ever redrawn.

    Counters, not exceptions, decide success: check exit_code() when done.
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        stdout=None,
        json: bool = False,
        include_footer: bool = True,
        include_logs: bool | None = None,
        include_infos: bool | None = None,
        include_warnings: bool | None = None,
    ):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.configuration = configuration or Configuration.from_environment(self.stdout)
        self.json = json
        self.include_footer = include_footer
        if include_logs is None:
            include_logs = not json
        self.include_infos = include_logs if include_infos is None else include_infos
        self.include_warnings = include_logs if include_warnings is None else include_warnings

        self.counters = Counters()
        self.indent = 0
        self.state = ReportState.CREATED

        self.multiplexer = ProgressMultiplexer(self._refresh_progress)
        self.display = ProgressDisplay(
            self.stdout,
            self.configuration,
            rows=self.multiplexer.rows,
            enabled=not json,
        )
        self.forgettable = ForgettableBuffer()

        self._reported_infos: set = set()
        self._reported_warnings: set = set()
        self._reported_errors: set = set()
        # Keyed by identity; exceptions need not be hashable
        self._reported_exceptions: dict[int, BaseException] = {}

    @classmethod
    async def start(cls, callback: Callable[["StreamReport"], Awaitable[None]], **options):
        """Run callback with a fresh report, then finalize it.

        An exception escaping callback is reported as one error rather than
        raised; the caller reads the outcome from exit_code().
        """
        report = cls(**options)
        try:
            await callback(report)
        except Exception as e:
            report.report_exception_once(e)
        finally:
            report.finalize()
        return report

    def has_errors(self) -> bool:
        return self.counters.errors > 0

    def exit_code(self) -> int:
        return 1 if self.has_errors() else 0

    def report_cache_hit(self, locator: Locator):
        self.counters.cache_hits += 1

    def report_cache_miss(self, locator: Locator):
        self.counters.cache_misses += 1

    @contextlib.contextmanager
    def timed(self, what: str):
        """Indent everything reported inside the block under a ┌ what header.

        An exception raised in the block is reported once and re-raised.
        """
        self.report_info(None, f"┌ {what}")
        before = time.perf_counter()
        self.indent += 1
        try:
            yield
        except Exception as e:
            self.report_exception_once(e)
            raise
        finally:
            elapsed = (time.perf_counter() - before) * 1000
            self.indent -= 1
            if self.configuration.enable_timers:
                self.report_info(None, f"└ Completed in {format_timing(elapsed)}")
            else:
                self.report_info(None, "└ Completed")

    def start_timer_sync(self, what: str, callback: Callable[[], T]) -> T:
        with self.timed(what):
            return callback()

    async def start_timer(self, what: str, callback: Callable[[], Awaitable[T]]) -> T:
        with self.timed(what):
            return await callback()

    def report_separator(self):
        if self.indent == 0:
            if self.json:
                # A blank line is not a record
                self.forgettable.reset()
            else:
                self._write_line("", reset=True)
        else:
            self.report_info(None, "")

    def report_info(self, name: MessageName | None, text: str):
        if not self.include_infos:
            return
        self._emit(Severity.INFO, name, text)

    def report_warning(self, name: MessageName | None, text: str):
        self.counters.warnings += 1
        if not self.include_warnings:
            return
        self._emit(Severity.WARNING, name, text)

    def report_error(self, name: MessageName | None, text: str):
        self.counters.errors += 1
        self._emit(Severity.ERROR, name, text)

    def report_info_once(self, name: MessageName | None, text: str, key=None):
        key = text if key is None else key
        if key not in self._reported_infos:
            self._reported_infos.add(key)
            self.report_info(name, text)

    def report_warning_once(self, name: MessageName | None, text: str, key=None):
        key = text if key is None else key
        if key not in self._reported_warnings:
            self._reported_warnings.add(key)
            self.report_warning(name, text)

    def report_error_once(self, name: MessageName | None, text: str, key=None):
        key = text if key is None else key
        if key not in self._reported_errors:
            self._reported_errors.add(key)
            self.report_error(name, text)

    def report_exception_once(self, error: BaseException):
        """Report error as a single error line, however often it is seen."""
        if id(error) in self._reported_exceptions:
            return
        self._reported_exceptions[id(error)] = error
        if isinstance(error, ReportError):
            self.report_error(error.code, error.message)
        else:
            text = "".join(traceback.format_exception(error)).rstrip()
            self.report_error(MessageName.EXCEPTION, text)

    def report_progress(self, source: AsyncIterable) -> ProgressHandle:
        """Show a live row for source until it is exhausted or stopped."""
        self._activate()
        return self.multiplexer.register(source)

    def report_json(self, data):
        if self.json:
            self._write_line(jsonlib.dumps(data), reset=True)

    def finalize(self):
        """Print the summary line and close the report. Never raises."""
        if self.state in (ReportState.FINALIZING, ReportState.CLOSED):
            return
        self.state = ReportState.FINALIZING
        try:
            if self.include_footer:
                message = self.counters.summary(self.configuration.enable_timers)
                self._emit(self.counters.severity, MessageName.UNNAMED, message, force=True)
        except (OSError, ValueError) as e:
            # ValueError: the stream was already closed
            logging.warning("Could not write the report summary: %s", e)
        finally:
            self.state = ReportState.CLOSED

    def _activate(self):
        if self.state is ReportState.CREATED:
            self.state = ReportState.ACTIVE

    def _format_line(self, severity: Severity, name: MessageName | None, text: str) -> str:
        marker = self.configuration.format(MARKER, severity.color)
        return f"{marker} {format_name(name, self.configuration)}: {format_indent(self.indent)}{text}"

    def _emit(self, severity: Severity, name: MessageName | None, text: str, force: bool = False):
        """Route one event to the JSON encoder or the terminal."""
        if self.json:
            record = {
                "type": severity.value,
                "name": None if name is None else int(name),
                "displayName": format_name(name, self.configuration, json=True),
                "indent": format_indent(self.indent),
                "data": text,
            }
            self._write_line(jsonlib.dumps(record), reset=True, force=force)
            return

        line = self._format_line(severity, name, text)
        if severity is Severity.INFO and name in FORGETTABLE_NAMES:
            self._write_forgettable(line)
        else:
            self._write_line(line, reset=True, force=force)

    def _write_forgettable(self, line: str):
        if not self._writable():
            return
        erase, lines = self.forgettable.push(line)
        if erase and self.display.active:
            self.display.write(lines, replace=erase)
        else:
            self.display.write([line])

    def _write_line(self, line: str, reset: bool = False, force: bool = False):
        if reset:
            self.forgettable.reset()
        if not self._writable(force):
            return
        self.display.write([line])

    def _writable(self, force: bool = False) -> bool:
        if self.state is ReportState.CLOSED or (self.state is ReportState.FINALIZING and not force):
            logging.warning("Dropping output written after the report was closed")
            return False
        self._activate()
        return True

    def _refresh_progress(self):
        # Sources may outlive finalize(); their rows keep updating until they end
        self.display.refresh()
