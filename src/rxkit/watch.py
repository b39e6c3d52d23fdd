"""watch() — run an external producer in a managed daemon thread.

Subject emissions auto-marshal to the scheduler thread once set_scheduler()
is installed, so watch() is purely about thread lifecycle. The producer gets
the WatchHandle and checks .is_disposed to exit early.
"""

from __future__ import annotations

import logging
from threading import Thread
from typing import Callable

from rxkit.disposable import BooleanDisposable

logger = logging.getLogger("rxkit.watch")


class WatchHandle(BooleanDisposable):
    """Disposable handle for a managed daemon thread."""

    __slots__ = ("_thread",)

    def __init__(self) -> None:
        super().__init__()
        self._thread: Thread | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


def watch(fn: Callable[[WatchHandle], None]) -> WatchHandle:
    """Run fn(handle) in a daemon thread. Returns the handle.

    Usage:
        prices = PublishSubject()

        def poll(handle):
            while not handle.is_disposed:
                prices.on_next(fetch_price())
                time.sleep(2)
            prices.on_completed()

        handle = watch(poll)
        ...
        handle.dispose()
    """
    handle = WatchHandle()

    def _run() -> None:
        try:
            fn(handle)
        except Exception:
            logger.exception("Watched producer %r failed", fn)
            raise

    handle._thread = Thread(target=_run, daemon=True, name=f"rxkit-watch-{getattr(fn, '__name__', 'fn')}")
    handle._thread.start()
    return handle
