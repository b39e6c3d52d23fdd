"""Observable — a description of how to produce events.

An Observable wraps a subscription function: given an observer, start
emitting and return a Disposable. Nothing happens until subscribe() is
called, and cold sources (create, deferred, just, of, ...) run their
producing logic again for every subscriber.

Every subscription goes through an AutoDetachObserver, so the grammar
Next* (Error | Completed)? holds per subscriber no matter what the
producer does.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Iterable, TypeVar

from rxkit.disposable import AnonymousDisposable, Disposable, to_disposable
from rxkit.errors import EmptyInputError
from rxkit.event import Event
from rxkit.observer import (
    AnonymousObserver,
    AutoDetachObserver,
    Observer,
    OnCompleted,
    OnError,
    OnNext,
)

logger = logging.getLogger("rxkit.observable")

T = TypeVar("T")

SubscribeFn = Callable[[Observer[T]], Disposable]
Builder = Callable[[Observer[T]], object]


class Observable(Generic[T]):
    """A cold or hot source of events."""

    def __init__(self, subscribe: SubscribeFn[T] | None = None) -> None:
        self._subscribe_fn = subscribe

    def _subscribe_core(self, observer: Observer[T]) -> Disposable:
        if self._subscribe_fn is None:
            return Disposable.empty()
        return self._subscribe_fn(observer)

    def subscribe(
        self,
        on_next: Observer[T] | OnNext[T] | None = None,
        on_error: OnError | None = None,
        on_completed: OnCompleted | None = None,
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        """Start receiving events. Returns the subscription.

        Pass an Observer, or any of the three callbacks. Missing callbacks
        are no-ops. on_disposed runs once, after termination or dispose().

        Usage:
            subscription = of(1, 2, 3).subscribe(
                on_next=print,
                on_completed=lambda: print("done"),
            )
            subscription.dispose()
        """
        if isinstance(on_next, Observer):
            observer = on_next
        else:
            observer = AnonymousObserver(on_next, on_error, on_completed)

        sink = AutoDetachObserver(observer, on_disposed)
        sink.set_disposable(to_disposable(self._subscribe_core(sink)))
        return AnonymousDisposable(sink.dispose)

    def subscribe_event(
        self,
        handler: Callable[[Event[T]], None],
        *,
        on_disposed: Callable[[], None] | None = None,
    ) -> Disposable:
        """Subscribe with one handler(event) callback."""
        return self.subscribe(AnonymousObserver.from_handler(handler), on_disposed=on_disposed)

    def as_observable(self) -> Observable[T]:
        """A plain Observable view of this source."""
        return Observable(self._subscribe_core)

    # --- Creation ---

    @classmethod
    def create(cls, builder: Builder[T]) -> Observable[T]:
        return create(builder)

    @classmethod
    def deferred(cls, factory: Callable[[], Observable[T]]) -> Observable[T]:
        return deferred(factory)

    @classmethod
    def just(cls, value: T) -> Observable[T]:
        return just(value)

    @classmethod
    def of(cls, *values: T) -> Observable[T]:
        return of(*values)

    @classmethod
    def from_iterable(cls, items: Iterable[T], *, allow_empty: bool = True) -> Observable[T]:
        return from_iterable(items, allow_empty=allow_empty)

    @classmethod
    def empty(cls) -> Observable[T]:
        return empty()

    @classmethod
    def never(cls) -> Observable[T]:
        return never()

    @classmethod
    def throw(cls, error: BaseException) -> Observable[T]:
        return throw(error)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _ProducerHandle(Observer[T], Disposable):
    """The observer a create() builder emits into. Goes quiet once disposed."""

    __slots__ = ("_observer", "_disposed")

    def __init__(self, observer: Observer[T]) -> None:
        self._observer = observer
        self._disposed = False

    def on_next(self, value: T) -> None:
        if not self._disposed:
            self._observer.on_next(value)

    def on_error(self, error: BaseException) -> None:
        if not self._disposed:
            self._observer.on_error(error)

    def on_completed(self) -> None:
        if not self._disposed:
            self._observer.on_completed()

    def dispose(self) -> None:
        self._disposed = True


def create(builder: Builder[T]) -> Observable[T]:
    """Observable whose events are produced by builder, once per subscription.

    builder receives the subscriber's observer handle and returns the
    teardown: a Disposable, a zero-argument callable, or None.

    Usage:
        def produce(observer):
            observer.on_next("1")
            observer.on_completed()
            observer.on_next("?")  # ignored, the stream is over
            return Disposable.empty()

        create(produce).subscribe(on_next=print)
    """

    def _subscribe(observer: Observer[T]) -> Disposable:
        handle = _ProducerHandle(observer)
        teardown = to_disposable(builder(handle))

        def _dispose() -> None:
            handle.dispose()
            teardown.dispose()

        return AnonymousDisposable(_dispose)

    return Observable(_subscribe)


def deferred(factory: Callable[[], Observable[T]]) -> Observable[T]:
    """Observable that calls factory() fresh for every subscription.

    Usage:
        flip = [False]

        def factory():
            flip[0] = not flip[0]
            return of(1, 2, 3) if flip[0] else of(4, 5, 6)

        source = deferred(factory)
        # first subscriber sees 1, 2, 3, the next sees 4, 5, 6
    """

    def _subscribe(observer: Observer[T]) -> Disposable:
        try:
            source = factory()
        except Exception as exc:
            logger.debug("Deferred factory %r failed", factory, exc_info=True)
            observer.on_error(exc)
            return Disposable.empty()
        return source.subscribe(observer)

    return Observable(_subscribe)


def just(value: T) -> Observable[T]:
    """Emit value, then complete."""

    def _subscribe(observer: Observer[T]) -> Disposable:
        observer.on_next(value)
        observer.on_completed()
        return Disposable.empty()

    return Observable(_subscribe)


def of(*values: T) -> Observable[T]:
    """Emit each argument in order, then complete."""
    return from_iterable(values)


def from_iterable(items: Iterable[T], *, allow_empty: bool = True) -> Observable[T]:
    """Emit each element of items in order, then complete.

    items is materialized now, so generators replay the same elements to
    every subscriber. With allow_empty=False an empty input raises
    EmptyInputError here rather than producing an observable that completes
    without elements.
    """
    values = tuple(items)
    if not values and not allow_empty:
        raise EmptyInputError()

    def _produce(observer: Observer[T]) -> None:
        for value in values:
            observer.on_next(value)
        observer.on_completed()

    return create(_produce)


def empty() -> Observable[T]:
    """Complete immediately without elements."""

    def _subscribe(observer: Observer[T]) -> Disposable:
        observer.on_completed()
        return Disposable.empty()

    return Observable(_subscribe)


def never() -> Observable[T]:
    """Never emit and never terminate."""
    return Observable(lambda observer: Disposable.empty())


def throw(error: BaseException) -> Observable[T]:
    """Terminate immediately with error."""

    def _subscribe(observer: Observer[T]) -> Disposable:
        observer.on_error(error)
        return Disposable.empty()

    return Observable(_subscribe)
