"""Holds the latest coverage report and answers coverage queries.

Design:
- ``on_tests_finished`` is the only writer. It swaps the held Report (an
  immutable snapshot) with one reference assignment, then notifies
  "coverage updated" listeners on the calling thread.
- Queries copy the current reference into a local before doing any work,
  so a report replaced mid-query never affects the running query.
- Query work runs on a ThreadPoolExecutor; the awaiting caller suspends
  until it completes. There is no cancellation or timeout.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Protocol, TypeVar

from coverlens.config.models import ProviderConfig
from coverlens.core.errors import InvalidArgumentError
from coverlens.core.logging import clear_query_id, get_logger, set_query_id
from coverlens.coverage.lines import compute_file_coverage
from coverlens.coverage.models import CoverageNode, FileCoverage
from coverlens.coverage.tree import build_coverage_tree
from coverlens.report.models import Report

logger = get_logger(__name__)

_T = TypeVar("_T")

CoverageListener = Callable[[], None]


class ReportSource(Protocol):
    """Producer of coverage reports, e.g. a test runner.

    Calls every subscribed callback with the complete Report of each
    finished test run.
    """

    def subscribe(self, callback: Callable[[Report], None]) -> None: ...


class CoverageProvider:
    """Latest-report holder exposing file coverage and tree queries."""

    def __init__(
        self,
        source: ReportSource | None = None,
        *,
        config: ProviderConfig | None = None,
    ) -> None:
        self._config = config or ProviderConfig()
        self._report: Report | None = None
        self._listeners: list[CoverageListener] = []
        self._listeners_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

        if source is not None:
            source.subscribe(self.on_tests_finished)

    @property
    def report(self) -> Report | None:
        """The report currently held, or None before the first test run."""
        return self._report

    def on_tests_finished(self, report: Report) -> None:
        """Replace the held report and notify listeners."""
        self._report = report
        logger.info("coverage_report_replaced", modules=len(report.modules))

        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("coverage_listener_failed", listener=repr(listener))

    def subscribe(self, listener: CoverageListener) -> Callable[[], None]:
        """Register a "coverage updated" listener.

        Listeners receive no payload and should re-query. Returns a callable
        that removes the listener.
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    async def get_file_coverage(self, file_path: str) -> FileCoverage:
        """Line coverage of ``file_path`` in the current report.

        Returns an empty FileCoverage when there is no report or the file is
        not part of it.

        Raises:
            InvalidArgumentError: If ``file_path`` is None.
        """
        if file_path is None:
            raise InvalidArgumentError.missing("file_path")
        report = self._report
        return await self._run(compute_file_coverage, report, file_path)

    async def get_coverage_tree(self) -> CoverageNode | None:
        """Coverage tree of the current report, or None before the first run."""
        report = self._report
        return await self._run(build_coverage_tree, report)

    async def _run(self, func: Callable[..., _T], *args: object) -> _T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._get_executor(), _with_query_id, func, *args)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._config.max_workers,
                    thread_name_prefix=self._config.thread_name_prefix,
                )
            return self._executor

    def close(self) -> None:
        """Shut down the query executor, waiting for running queries."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> CoverageProvider:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _with_query_id(func: Callable[..., _T], *args: object) -> _T:
    """Run ``func`` on a worker thread with a fresh query correlation ID."""
    set_query_id()
    try:
        logger.debug("coverage_query_started", query=func.__name__)
        return func(*args)
    finally:
        clear_query_id()
