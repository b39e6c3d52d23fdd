"""Subjects — hot sources that are both observer and observable.

A producer pushes events into a Subject with on_next/on_error/on_completed;
the Subject fans each one out, synchronously and in attach order, to every
observer attached at that moment.

Thread safety: each Subject owns one re-entrant lock. The observer snapshot
and the terminal check-and-set happen under it, delivery happens outside it.
Attach-time replay runs under the lock so it never interleaves with a
concurrent emission.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import TypeVar

from rxkit._scheduling import dispatch
from rxkit.disposable import AnonymousDisposable, Disposable
from rxkit.errors import DisposedError, InvalidArgumentError
from rxkit.event import Completed, Error, Event, Next
from rxkit.observable import Observable
from rxkit.observer import Observer

logger = logging.getLogger("rxkit.subject")

T = TypeVar("T")


class Subject(Observable[T], Observer[T], Disposable):
    """Shared machinery of all subject variants.

    A Subject is built with its constructor. The creation classmethods
    inherited from Observable (create, just, of, ...) are disabled here,
    since they build cold observables rather than subjects. ReplaySubject
    adds its own alternate constructors, create(buffer_size) and
    create_unbounded().
    """

    @classmethod
    def _not_a_subject(cls, *args, **kwargs):
        raise TypeError(
            f"`{cls.__name__}` is built with its constructor. "
            "Use the module-level creation functions for cold observables."
        )

    create = deferred = just = of = from_iterable = empty = never = throw = _not_a_subject

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.RLock()
        self._observers: dict[object, Observer[T]] = {}
        self._terminal: Event | None = None
        self._disposed = False

    @property
    def has_observers(self) -> bool:
        with self._lock:
            return bool(self._observers)

    @property
    def is_terminated(self) -> bool:
        return self._terminal is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # --- Emission ---

    def on_next(self, value: T) -> None:
        self.on(Next(value))

    def on_error(self, error: BaseException) -> None:
        self.on(Error(error))

    def on_completed(self) -> None:
        self.on(Completed())

    def on(self, event: Event[T]) -> None:
        """Deliver event to every attached observer. No-op once terminated."""
        dispatch(lambda: self._emit(event))

    def _emit(self, event: Event[T]) -> None:
        with self._lock:
            if self._terminal is not None or self._disposed:
                return
            observers = tuple(self._observers.values())
            if event.is_terminal:
                self._terminal = event
                self._observers.clear()
                logger.debug("%r terminated with %r", self, event)
            else:
                self._record(event.value)

        for observer in observers:
            event.accept(observer)

    def _record(self, value: T) -> None:
        """Remember value for observers that attach later."""

    # --- Subscription ---

    def _subscribe_core(self, observer: Observer[T]) -> Disposable:
        with self._lock:
            if self._disposed:
                observer.on_error(DisposedError(self))
                return Disposable.empty()

            if self._terminal is not None:
                self._replay(observer)
                self._terminal.accept(observer)
                return Disposable.empty()

            key = object()
            self._observers[key] = observer
            self._replay(observer)

        return AnonymousDisposable(lambda: self._unsubscribe(key))

    def _replay(self, observer: Observer[T]) -> None:
        """Deliver remembered values to a newly attached observer."""

    def _unsubscribe(self, key: object) -> None:
        with self._lock:
            self._observers.pop(key, None)

    # --- Lifecycle ---

    def dispose(self) -> None:
        """Release the subject. Later emissions are ignored.

        Later subscribers receive a DisposedError through on_error.
        """
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._observers.clear()
            self._clear()
        logger.debug("%r disposed", self)

    def _clear(self) -> None:
        """Drop remembered values."""

    def __repr__(self) -> str:
        if self._disposed:
            state = "disposed"
        elif self._terminal is not None:
            state = "terminated"
        else:
            state = f"{len(self._observers)} observers"
        return f"{type(self).__name__}({state})"


class PublishSubject(Subject[T]):
    """Starts empty and only emits new elements to subscribers.

    Usage:
        subject = PublishSubject()
        subject.on_next("Is anyone listening?")  # dropped, nobody attached

        subscription = subject.subscribe(on_next=print)
        subject.on_next("1")  # printed
    """


class BehaviorSubject(Subject[T]):
    """Starts with a seed and replays the latest element to new subscribers.

    After on_error, new subscribers receive the error instead of a value.
    """

    def __init__(self, value: T) -> None:
        super().__init__()
        self._latest = value

    @property
    def value(self) -> T:
        """The latest element. Raises the stored error if the subject failed."""
        with self._lock:
            if self._disposed:
                raise DisposedError(self)
            if isinstance(self._terminal, Error):
                raise self._terminal.error
            return self._latest

    def _record(self, value: T) -> None:
        self._latest = value

    def _replay(self, observer: Observer[T]) -> None:
        if self._terminal is None:
            observer.on_next(self._latest)

    def _clear(self) -> None:
        self._latest = None


class ReplaySubject(Subject[T]):
    """Buffers the last buffer_size elements and replays them to new subscribers.

    buffer_size=None keeps every element. New subscribers of a terminated
    subject receive the buffered elements followed by the terminal event.

    Usage:
        subject = ReplaySubject.create(buffer_size=2)
        subject.on_next("1")
        subject.on_next("2")
        subject.on_next("3")
        subject.subscribe(on_next=print)  # prints 2, 3
    """

    def __init__(self, buffer_size: int | None) -> None:
        if buffer_size is not None and (
            isinstance(buffer_size, bool) or not isinstance(buffer_size, int) or buffer_size < 0
        ):
            raise InvalidArgumentError(
                f"Replay buffer size must be a non-negative integer, got {buffer_size!r}."
            )
        super().__init__()
        self._buffer_size = buffer_size
        self._buffer: deque[T] = deque(maxlen=buffer_size)

    @classmethod
    def create(cls, buffer_size: int) -> ReplaySubject[T]:
        if buffer_size is None:
            raise InvalidArgumentError("Replay buffer size is required.")
        return cls(buffer_size)

    @classmethod
    def create_unbounded(cls) -> ReplaySubject[T]:
        return cls(None)

    @property
    def buffer_size(self) -> int | None:
        return self._buffer_size

    def _record(self, value: T) -> None:
        self._buffer.append(value)

    def _replay(self, observer: Observer[T]) -> None:
        for value in tuple(self._buffer):
            observer.on_next(value)

    def _clear(self) -> None:
        self._buffer.clear()
