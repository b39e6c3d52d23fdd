"""Observers — the receiving end of a subscription.

Observer is the three-capability interface. AnonymousObserver adapts bare
callbacks to it. AutoDetachObserver wraps whatever the subscriber supplied
and enforces the per-subscription grammar: nothing after a terminal event,
and the subscription releases itself once terminated.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from rxkit.disposable import Disposable, SingleAssignmentDisposable
from rxkit.event import Completed, Error, Event, Next

logger = logging.getLogger("rxkit.observer")

T = TypeVar("T")

OnNext = Callable[[T], None]
OnError = Callable[[BaseException], None]
OnCompleted = Callable[[], None]


class Observer(ABC, Generic[T]):
    """Receives on_next, then at most one on_error or on_completed."""

    __slots__ = ()

    @abstractmethod
    def on_next(self, value: T) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_error(self, error: BaseException) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_completed(self) -> None:
        raise NotImplementedError

    def on(self, event: Event[T]) -> None:
        event.accept(self)


class AnonymousObserver(Observer[T]):
    """Observer built from optional callbacks. Missing callbacks are no-ops."""

    __slots__ = ("_on_next", "_on_error", "_on_completed")

    def __init__(
        self,
        on_next: OnNext[T] | None = None,
        on_error: OnError | None = None,
        on_completed: OnCompleted | None = None,
    ) -> None:
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed

    @classmethod
    def from_handler(cls, handler: Callable[[Event[T]], None]) -> AnonymousObserver[T]:
        """Adapt a single handler(event) callback."""
        return cls(
            lambda value: handler(Next(value)),
            lambda error: handler(Error(error)),
            lambda: handler(Completed()),
        )

    def on_next(self, value: T) -> None:
        if self._on_next is not None:
            self._on_next(value)

    def on_error(self, error: BaseException) -> None:
        if self._on_error is not None:
            self._on_error(error)
        else:
            logger.debug("Error reached an observer without on_error: %r", error)

    def on_completed(self) -> None:
        if self._on_completed is not None:
            self._on_completed()


class AutoDetachObserver(Observer[T]):
    """Per-subscription guard around the subscriber's observer.

    Drops every event after the first terminal one, and after a terminal
    event (or an explicit dispose) releases the producer teardown and then
    calls on_disposed, once. dispose() detaches from the source but does not
    gate delivery: an emission a source already started still arrives, and
    the source itself stops sending once its teardown has run.
    """

    __slots__ = ("_observer", "_subscription", "_lock", "_stopped", "_disposed")

    def __init__(self, observer: Observer[T], on_disposed: Callable[[], None] | None = None) -> None:
        self._observer = observer
        self._subscription = SingleAssignmentDisposable(on_disposed)
        self._lock = threading.Lock()
        self._stopped = False
        self._disposed = False

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def set_disposable(self, disposable: Disposable) -> None:
        """Attach the producer teardown. Runs immediately if already terminated."""
        self._subscription.disposable = disposable

    def on_next(self, value: T) -> None:
        if self.is_stopped:
            return
        self._observer.on_next(value)

    def on_error(self, error: BaseException) -> None:
        if not self._stop():
            return
        try:
            self._observer.on_error(error)
        finally:
            self.dispose()

    def on_completed(self) -> None:
        if not self._stop():
            return
        try:
            self._observer.on_completed()
        finally:
            self.dispose()

    def _stop(self) -> bool:
        """Atomically claim the terminal slot. False if already taken."""
        with self._lock:
            if self._stopped:
                return False
            self._stopped = True
            return True

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        self._subscription.dispose()
