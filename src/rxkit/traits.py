"""Traits — observables with a narrower event grammar.

    Single       emits Success(value) or Error
    Maybe        emits Success(value), Completed or Error
    Completable  emits Completed or Error

Each trait is built like an Observable, except the builder receives a single
emit(event) callback instead of an observer handle. emit is single-shot: the
first event ends the subscription and later calls are ignored.

Usage:
    def load_text(path):
        def read(emit):
            try:
                emit(Success(path.read_text()))
            except FileNotFoundError as exc:
                emit(Error(exc))
        return Single.create(read)

    load_text(path).subscribe(on_success=print, on_error=log_failure)
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

from rxkit.disposable import AnonymousDisposable, Disposable, SingleAssignmentDisposable, to_disposable
from rxkit.event import Completed, CompletableEvent, Error, MaybeEvent, SingleEvent, Success
from rxkit.observable import Observable
from rxkit.observer import Observer

T = TypeVar("T")
E = TypeVar("E")

Emit = Callable[[E], None]


class _SingleShotSink(Generic[E]):
    """Delivers at most one event, then releases the subscription."""

    __slots__ = ("_handler", "_subscription", "_lock", "_done", "_disposed")

    def __init__(self, handler: Callable[[E], None], on_disposed: Callable[[], None] | None) -> None:
        self._handler = handler
        self._subscription = SingleAssignmentDisposable(on_disposed)
        self._lock = threading.Lock()
        self._done = False
        self._disposed = False

    def set_disposable(self, disposable: Disposable) -> None:
        self._subscription.disposable = disposable

    def emit(self, event: E) -> None:
        with self._lock:
            if self._done or self._disposed:
                return
            self._done = True
        try:
            self._handler(event)
        finally:
            self.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        self._subscription.dispose()


class _Trait(Generic[E]):
    _grammar: tuple[type, ...] = ()

    def __init__(self, subscribe: Callable[[Emit[E]], object]) -> None:
        self._subscribe_fn = subscribe

    def _check(self, emit: Emit[E]) -> Emit[E]:
        def _checked(event: E) -> None:
            if not isinstance(event, self._grammar):
                allowed = ", ".join(cls.__name__ for cls in self._grammar)
                raise TypeError(f"{type(self).__name__} only emits {allowed}, got {event!r}.")
            emit(event)

        return _checked

    def subscribe_event(
        self,
        handler: Callable[[E], None],
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        """Subscribe with one handler(event) callback."""
        sink = _SingleShotSink(handler, on_disposed)
        sink.set_disposable(to_disposable(self._subscribe_fn(self._check(sink.emit))))
        return AnonymousDisposable(sink.dispose)

    def as_observable(self) -> Observable:
        """The general-grammar view. Success becomes Next then Completed."""

        def _subscribe(observer: Observer) -> Disposable:
            def _forward(event) -> None:
                if isinstance(event, Success):
                    observer.on_next(event.value)
                    observer.on_completed()
                else:
                    event.accept(observer)

            return self.subscribe_event(_forward)

        return Observable(_subscribe)

    @classmethod
    def create(cls, builder: Callable[[Emit[E]], object]):
        """Trait whose single event is produced by builder, once per subscription.

        builder returns the teardown: a Disposable, a zero-argument callable or None.
        """
        return cls(builder)

    @classmethod
    def deferred(cls, factory: Callable[[], _Trait[E]]):
        """Trait that calls factory() fresh for every subscription."""

        def _subscribe(emit: Emit[E]) -> Disposable:
            try:
                source = factory()
            except Exception as exc:
                emit(Error(exc))
                return Disposable.empty()
            return source.subscribe_event(emit)

        return cls(_subscribe)

    @classmethod
    def error(cls, error: BaseException):
        def _subscribe(emit: Emit[E]) -> None:
            emit(Error(error))

        return cls(_subscribe)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Single(_Trait[SingleEvent[T]], Generic[T]):
    """Exactly one value, or an error."""

    _grammar = (Success, Error)

    def subscribe(
        self,
        on_success: Callable[[T], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        def _handle(event: SingleEvent[T]) -> None:
            if isinstance(event, Success):
                if on_success is not None:
                    on_success(event.value)
            elif on_error is not None:
                on_error(event.error)

        return self.subscribe_event(_handle, on_disposed=on_disposed)

    @classmethod
    def just(cls, value: T) -> Single[T]:
        def _subscribe(emit: Emit[SingleEvent[T]]) -> None:
            emit(Success(value))

        return cls(_subscribe)


class Maybe(_Trait[MaybeEvent[T]], Generic[T]):
    """At most one value, then completion, or an error."""

    _grammar = (Success, Completed, Error)

    def subscribe(
        self,
        on_success: Callable[[T], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        on_completed: Callable[[], None] | None = None,
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        def _handle(event: MaybeEvent[T]) -> None:
            if isinstance(event, Success):
                if on_success is not None:
                    on_success(event.value)
            elif isinstance(event, Completed):
                if on_completed is not None:
                    on_completed()
            elif on_error is not None:
                on_error(event.error)

        return self.subscribe_event(_handle, on_disposed=on_disposed)

    @classmethod
    def just(cls, value: T) -> Maybe[T]:
        def _subscribe(emit: Emit[MaybeEvent[T]]) -> None:
            emit(Success(value))

        return cls(_subscribe)

    @classmethod
    def empty(cls) -> Maybe[T]:
        def _subscribe(emit: Emit[MaybeEvent[T]]) -> None:
            emit(Completed())

        return cls(_subscribe)


class Completable(_Trait[CompletableEvent]):
    """Completion or an error, never a value."""

    _grammar = (Completed, Error)

    def subscribe(
        self,
        on_completed: Callable[[], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        def _handle(event: CompletableEvent) -> None:
            if isinstance(event, Completed):
                if on_completed is not None:
                    on_completed()
            elif on_error is not None:
                on_error(event.error)

        return self.subscribe_event(_handle, on_disposed=on_disposed)

    @classmethod
    def empty(cls) -> Completable:
        def _subscribe(emit: Emit[CompletableEvent]) -> None:
            emit(Completed())

        return cls(_subscribe)
