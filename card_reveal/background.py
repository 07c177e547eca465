"""Dedicated asyncio loop thread for capture/upload work started from the CLI."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Callable, Coroutine


class BackgroundLoop:
    """Runs coroutines on a daemon thread so the input loop never blocks on them.

    Results are delivered through `concurrent.futures.Future` callbacks, which
    run on the loop thread.
    """

    def __init__(self, name: str = "card-reveal-async") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ready = threading.Event()
        self._pending: set[concurrent.futures.Future] = set()

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            self._ready.clear()
            self._thread = threading.Thread(target=self._thread_main, name=self._name, daemon=True)
            self._thread.start()
        self._ready.wait()

    @property
    def running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive() and self._loop is not None)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(
        self,
        coro: Coroutine[Any, Any, Any],
        on_done: Callable[[concurrent.futures.Future], None] | None = None,
    ) -> concurrent.futures.Future:
        with self._lock:
            loop = self._loop
            if loop is None or not (self._thread and self._thread.is_alive()):
                coro.close()
                raise RuntimeError("Background loop is not running; call start() first.")
            future = asyncio.run_coroutine_threadsafe(coro, loop)
            self._pending.add(future)
        future.add_done_callback(self._forget)
        if on_done is not None:
            future.add_done_callback(on_done)
        return future

    def stop(self, *, join_timeout_s: float = 5.0) -> None:
        """Wait up to `join_timeout_s` for pending work, then stop the loop."""
        with self._lock:
            loop = self._loop
            thread = self._thread
            pending = list(self._pending)
        if loop is None or thread is None:
            return
        if pending:
            _, not_done = concurrent.futures.wait(pending, timeout=join_timeout_s)
            for future in not_done:
                future.cancel()
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=max(0.0, float(join_timeout_s)))
        with self._lock:
            if self._thread is thread and not thread.is_alive():
                self._thread = None

    def _forget(self, future: concurrent.futures.Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        with self._lock:
            self._loop = loop
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            with self._lock:
                self._loop = None
            loop.run_until_complete(loop.shutdown_default_executor())
            loop.close()
