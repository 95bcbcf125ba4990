from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

R = TypeVar("R")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThreadStats:
    submitted: int = 0
    completed: int = 0
    failed: int = 0
    rejected: int = 0

    @property
    def in_flight(self) -> int:
        return max(0, self.submitted - (self.completed + self.failed))


class ThreadManager(Generic[R]):
    """
    Fixed-size worker pool for image decode/encode jobs.

    Pillow releases the GIL for most decode/resample/encode work, so threads
    run in parallel. `max_workers` bounds how many large images are held in
    memory at once; further jobs wait in the executor queue.

        pool = ThreadManager(name="thumbgen", max_workers=4)
        fut = pool.submit(render, spec)
        ...
        pool.shutdown()
    """

    def __init__(
        self,
        name: str = "worker",
        max_workers: Optional[int] = None,
        log_exceptions: bool = True,
    ) -> None:
        if max_workers is None:
            max_workers = max(1, min(8, os.cpu_count() or 2))
        if max_workers < 1:
            raise ValueError(f"{name}: max_workers must be >= 1, got {max_workers}")

        self._name = name
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._log_exceptions = log_exceptions
        self._counts = {"submitted": 0, "completed": 0, "failed": 0, "rejected": 0}
        self._closed = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def submit(self, fn: Callable[..., R], /, *args, **kwargs) -> Future[R]:
        """Queue `fn(*args, **kwargs)`. Raises RuntimeError once the pool is shut down."""
        with self._lock:
            if self._closed:
                self._counts["rejected"] += 1
                raise RuntimeError(f"{self._name}: submit() after shutdown")
            self._counts["submitted"] += 1
            fut: Future[R] = self._executor.submit(fn, *args, **kwargs)
        fut.add_done_callback(self._on_done)
        return fut

    def _on_done(self, fut: Future) -> None:
        exc = None if fut.cancelled() else fut.exception()
        failed = fut.cancelled() or exc is not None
        with self._lock:
            self._counts["failed" if failed else "completed"] += 1
        if exc is not None and self._log_exceptions:
            log.error("%s: job failed: %s", self._name, exc, exc_info=exc)

    def stats(self) -> ThreadStats:
        with self._lock:
            return ThreadStats(**self._counts)

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Stop accepting jobs. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self) -> "ThreadManager[R]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
