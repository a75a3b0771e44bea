"""Blocking request/response channel over the event-emitting package backend."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..backend import EventSink, ExitStatus, FinishedEvent, QueryEvent
from ..config import DEFAULT_QUERY_TIMEOUT, DEFAULT_QUEUE_SIZE
from ..errors import QueryBusyError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05
_USE_CHANNEL_TIMEOUT = object()


class QueryStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


_STATUS_BY_EXIT = {
    ExitStatus.SUCCESS: QueryStatus.SUCCESS,
    ExitStatus.FAILED: QueryStatus.FAILED,
    ExitStatus.CANCELLED: QueryStatus.CANCELLED,
}


@dataclass(slots=True)
class QueryResult:
    status: QueryStatus
    events: list[QueryEvent] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == QueryStatus.SUCCESS

    @property
    def completed(self) -> bool:
        """True when the backend delivered its finished event."""
        return self.status in {QueryStatus.SUCCESS, QueryStatus.FAILED}


QueryStarter = Callable[[EventSink], None]


class QueryChannel:
    """Issue one backend query at a time and wait for its finished event.

    The backend call runs on a single worker thread and pushes its events into
    a bounded queue; `request` drains that queue into the pending list until
    the finished event, the timeout or the cancellation token ends the wait.
    """

    def __init__(
        self,
        *,
        timeout: float | None = DEFAULT_QUERY_TIMEOUT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self.timeout = timeout
        self._queue: "queue.Queue[tuple[int, QueryEvent]]" = queue.Queue(
            maxsize=max(int(queue_size), 1)
        )
        self._lock = threading.Lock()
        self._generation = 0
        self._active = False
        self._executor: ThreadPoolExecutor | None = None
        self.pending: list[QueryEvent] = []

    @property
    def busy(self) -> bool:
        return self._active

    def request(
        self,
        start: QueryStarter,
        *,
        timeout: float | None | object = _USE_CHANNEL_TIMEOUT,
        cancel: threading.Event | None = None,
    ) -> QueryResult:
        """Run *start* with an event sink and block until it finishes."""

        with self._lock:
            if self._active:
                raise QueryBusyError("A package query is already in progress")
            self._active = True
            self._generation += 1
            generation = self._generation
        effective_timeout = self.timeout if timeout is _USE_CHANNEL_TIMEOUT else timeout
        self.pending = []
        self._discard_queued()
        try:
            future = self._submit(start, self._make_sink(generation))
            status = self._wait(generation, future, effective_timeout, cancel)
        finally:
            with self._lock:
                # anything still emitted for this request is dropped
                self._generation += 1
                self._active = False
            self._discard_queued()
        return QueryResult(status=status, events=list(self.pending))

    def close(self) -> None:
        executor = self._executor
        self._executor = None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _submit(self, start: QueryStarter, emit: EventSink) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="deskcache-query"
            )
        return self._executor.submit(start, emit)

    def _make_sink(self, generation: int) -> EventSink:
        def emit(event: QueryEvent) -> None:
            while self._generation == generation:
                try:
                    self._queue.put((generation, event), timeout=_POLL_INTERVAL)
                    return
                except queue.Full:
                    continue
            logger.debug("dropping late event %r", event)

        return emit

    def _wait(
        self,
        generation: int,
        future: Future,
        timeout: float | None,
        cancel: threading.Event | None,
    ) -> QueryStatus:
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if cancel is not None and cancel.is_set():
                logger.warning("package query cancelled")
                return QueryStatus.CANCELLED
            wait = _POLL_INTERVAL
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning("package query timed out after %.1fs", timeout)
                    return QueryStatus.TIMED_OUT
                wait = min(wait, remaining)
            try:
                item_generation, event = self._queue.get(timeout=wait)
            except queue.Empty:
                if future.done() and future.exception() is not None and self._queue.empty():
                    logger.warning("package query raised: %s", future.exception())
                    return QueryStatus.FAILED
                continue
            if item_generation != generation:
                continue
            if isinstance(event, FinishedEvent):
                return _STATUS_BY_EXIT.get(event.status, QueryStatus.FAILED)
            self.pending.append(event)

    def _discard_queued(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
