"""Consumption of concurrent progress sources."""

import asyncio
import itertools
import logging
from collections.abc import AsyncIterable, Callable, Mapping

from streamreport.progress import ProgressDefinition

__all__ = [
    "ProgressCounter",
    "ProgressHandle",
    "ProgressMultiplexer",
]


def _snapshot(value) -> tuple[float, str | None]:
    if isinstance(value, ProgressDefinition):
        return value.progress, value.title
    if isinstance(value, Mapping):
        return value["progress"], value.get("title")
    raise TypeError(f"Unsupported progress snapshot: {value!r}")


class ProgressHandle:
    """Registration of one progress source.

    task completes once the source is exhausted. stop() only detaches the
    reporter: the source keeps being drained but its values are ignored.
    """

    def __init__(self, multiplexer: "ProgressMultiplexer", token: int):
        self._multiplexer = multiplexer
        self.token = token
        self.stopped = False
        self.task: asyncio.Task | None = None

    def stop(self):
        if self.stopped:
            return
        self.stopped = True
        self._multiplexer._detach(self.token)


class ProgressMultiplexer:
    """Latest value of every registered progress source, in registration order.

    on_change is called whenever what the rows should show has changed.
    """

    def __init__(self, on_change: Callable[[], None]):
        self.on_change = on_change
        self.progress: dict[int, ProgressDefinition] = {}
        self._tokens = itertools.count()
        # Strong references to the consumption tasks, dropped once they finish
        self._tasks: set[asyncio.Task] = set()

    def __len__(self):
        return len(self.progress)

    def rows(self) -> list[ProgressDefinition]:
        return list(self.progress.values())

    def register(self, source: AsyncIterable) -> ProgressHandle:
        """Start following source. Must be called from a running event loop."""
        loop = asyncio.get_running_loop()
        handle = ProgressHandle(self, next(self._tokens))
        self.progress[handle.token] = ProgressDefinition()
        self.on_change()
        handle.task = loop.create_task(self._consume(source, handle))
        self._tasks.add(handle.task)
        handle.task.add_done_callback(self._tasks.discard)
        return handle

    async def _consume(self, source: AsyncIterable, handle: ProgressHandle):
        try:
            async for value in source:
                if handle.stopped:
                    continue
                progress, title = _snapshot(value)
                definition = self.progress[handle.token]
                if definition.progress == progress and definition.title == title:
                    continue
                definition.progress = progress
                definition.title = title
                self.on_change()
        except Exception as e:
            logging.exception("Progress source failed: %s", e)
        finally:
            handle.stop()

    def _detach(self, token: int):
        if self.progress.pop(token, None) is not None:
            self.on_change()


class ProgressCounter:
    """Progress source driven by explicit ticks, for loops over a known count.

    counter = ProgressCounter(len(items))
    report.report_progress(counter)
    for item in items:
        ...
        counter.tick()
    """

    def __init__(self, total: int):
        self.total = total
        self.current = 0
        self._changed = asyncio.Event()

    def set(self, n: int):
        self.current = n
        self._changed.set()

    def tick(self, n: int = 1):
        self.set(self.current + n)

    async def __aiter__(self):
        while self.current < self.total:
            await self._changed.wait()
            self._changed.clear()
            yield ProgressDefinition(min(1.0, self.current / self.total))
