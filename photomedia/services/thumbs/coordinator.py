# photomedia/services/thumbs/coordinator.py
from __future__ import annotations

import threading
from concurrent.futures import Future, TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional

from photomedia.common.concurrency.thread_manager import ThreadManager
from photomedia.common.logging import get_logger
from photomedia.domain.entities.thumbnail import ThumbnailArtifact, ThumbnailSpec
from photomedia.domain.errors import GenerationFailed, GenerationTimeout, ThumbError
from photomedia.domain.policies.cache_key import derive_cache_key
from photomedia.domain.ports.thumbs import ResamplerPort, ThumbnailStorePort

logger = get_logger()


@dataclass
class GenerationTicket:
    """One in-flight generation and the callers waiting on it."""
    key: str
    future: Future = field(default_factory=Future)
    waiters: int = 0


class GenerationCoordinator:
    """
    Serves thumbnails from the store and deduplicates generation.

    Per cache key:
      cached      -> store hit, returned immediately (no ticket)
      idle        -> first caller creates a ticket and submits one job
      generating  -> later callers attach to the ticket's future
      done/failed -> ticket removed; every attached caller gets the same
                     artifact or exception. Failures are not remembered, the
                     next request starts over.

    `_lock` guards only the ticket map. Decode/encode runs on the bounded pool.
    """

    def __init__(
        self,
        store: ThumbnailStorePort,
        engine: ResamplerPort,
        *,
        workers: int = 4,
        timeout_sec: float = 30.0,
        pool: Optional[ThreadManager] = None,
        on_generate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.timeout_sec = float(timeout_sec)
        self._pool = pool or ThreadManager(name="thumbgen", max_workers=workers)
        self._on_generate = on_generate
        self._tickets: Dict[str, GenerationTicket] = {}
        self._lock = threading.Lock()
        self._counters = {"hits": 0, "generations": 0, "failures": 0}
        self._counters_lock = threading.Lock()

    # ---- public ----------------------------------------------------------

    def request(
        self,
        spec: ThumbnailSpec,
        source_path: Path,
        *,
        timeout: Optional[float] = None,
    ) -> ThumbnailArtifact:
        key = derive_cache_key(spec)

        art = self.store.get(key)
        if art is not None:
            self._bump("hits")
            return art

        with self._lock:
            ticket = self._tickets.get(key)
            owner = ticket is None
            if owner:
                ticket = GenerationTicket(key=key)
                self._tickets[key] = ticket
            ticket.waiters += 1

        if owner:
            try:
                self._pool.submit(self._generate, ticket, spec, Path(source_path))
            except RuntimeError as e:
                # pool shut down; fail everyone attached so far
                err = GenerationFailed(f"thumbs: cannot schedule {key}: {e}")
                err.__cause__ = e
                self._finish(ticket, error=err)

        return self._wait(ticket, self.timeout_sec if timeout is None else timeout)

    @property
    def generations(self) -> int:
        with self._counters_lock:
            return self._counters["generations"]

    def waiting(self, key: str) -> int:
        """Callers currently attached to the in-flight ticket for `key` (0 if none)."""
        with self._lock:
            t = self._tickets.get(key)
            return t.waiters if t else 0

    def stats(self) -> Dict[str, int]:
        with self._counters_lock:
            out = dict(self._counters)
        with self._lock:
            out["in_flight"] = len(self._tickets)
        return out

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    # ---- internals -------------------------------------------------------

    def _generate(self, ticket: GenerationTicket, spec: ThumbnailSpec, source_path: Path) -> None:
        try:
            art = self.store.get(ticket.key)
            if art is None:
                self._bump("generations")
                if self._on_generate is not None:
                    self._on_generate(ticket.key)
                img = self.engine.generate(spec, source_path)
                art = self.store.put(
                    ticket.key,
                    img.data,
                    source_hash=spec.file.content_hash,
                    width=img.width,
                    height=img.height,
                    format=img.format,
                )
                logger.debug("thumbs: generated %s (%dx%d %s)", ticket.key, img.width, img.height, img.format)
        except ThumbError as e:
            self._bump("failures")
            logger.warning("thumbs: generation failed for %s: %s", source_path, e)
            self._finish(ticket, error=e)
        except Exception as e:
            self._bump("failures")
            logger.exception("thumbs: unexpected error generating %s", source_path)
            err = GenerationFailed(f"thumbs: {type(e).__name__}: {e}")
            err.__cause__ = e
            self._finish(ticket, error=err)
        else:
            self._finish(ticket, result=art)

    def _finish(
        self,
        ticket: GenerationTicket,
        *,
        result: Optional[ThumbnailArtifact] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        with self._lock:
            if self._tickets.get(ticket.key) is ticket:
                del self._tickets[ticket.key]
        if error is not None:
            ticket.future.set_exception(error)
        else:
            ticket.future.set_result(result)

    def _wait(self, ticket: GenerationTicket, timeout: float) -> ThumbnailArtifact:
        try:
            return ticket.future.result(timeout=timeout)
        except FuturesTimeout:
            # only this caller gives up; the job keeps running for the others
            raise GenerationTimeout(
                f"thumbs: gave up on {ticket.key} after {timeout:.1f}s"
            ) from None
        finally:
            with self._lock:
                ticket.waiters -= 1

    def _bump(self, name: str) -> None:
        with self._counters_lock:
            self._counters[name] += 1
