"""Background worker for project-tree scan jobs."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanRequest:
    """One queued scan job."""

    request_id: int
    job: Callable[[], object]


@dataclass(frozen=True)
class ScanResult:
    """Completed scan payload from the worker.

    ``error`` is set, and ``payload`` is ``None``, when the job raised.
    """

    request_id: int
    payload: object
    error: Exception | None = None


class ScanScheduler:
    """Single-threaded latest-request-wins scan scheduler.

    At most one job runs at a time. Requests arriving while a job runs replace
    each other in a single pending slot, so only the newest one runs next.
    With ``background=False`` jobs run inline inside ``schedule``.
    """

    def __init__(self, *, background: bool = True, thread_name: str = "projecttree-scan") -> None:
        self._background = background
        self._thread_name = thread_name
        self._lock = threading.Lock()
        self._pending: ScanRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._results: Queue[ScanResult] = Queue()

    @property
    def background(self) -> bool:
        return self._background

    def _run(self, request: ScanRequest) -> None:
        try:
            payload = request.job()
        except Exception as exc:
            logger.exception("scan request %d failed", request.request_id)
            self._results.put(ScanResult(request_id=request.request_id, payload=None, error=exc))
            return
        self._results.put(ScanResult(request_id=request.request_id, payload=payload))

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return
            self._run(request)

    def schedule(self, job: Callable[[], object]) -> int:
        """Queue or replace pending work and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            request = ScanRequest(request_id=request_id, job=job)
            if self._background:
                self._pending = request
                if self._running:
                    return request_id
                self._running = True

        if not self._background:
            self._run(request)
            return request_id

        worker = threading.Thread(target=self._worker, name=self._thread_name, daemon=True)
        worker.start()
        return request_id

    def drain_results(self) -> list[ScanResult]:
        """Drain all completed results."""
        out: list[ScanResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "ScanRequest",
    "ScanResult",
    "ScanScheduler",
]
