"""Disposables — handles for cancellable resources and subscriptions.

Every dispose() is idempotent and thread-safe: the first call does the work,
later calls do nothing. A DisposeBag is the aggregate owner: it releases
everything it holds, in registration order, exactly once, when disposed or
when its `with` block exits.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger("rxkit.disposable")

Action = Callable[[], None]


class Disposable(ABC):
    """A cancellable resource."""

    __slots__ = ()

    @abstractmethod
    def dispose(self) -> None:
        raise NotImplementedError

    def disposed_by(self, bag: DisposeBag) -> None:
        """Hand ownership of this disposable to bag."""
        bag.add(self)

    @staticmethod
    def create(action: Action | None = None) -> Disposable:
        """Disposable that runs action once on first dispose()."""
        return AnonymousDisposable(action)

    @staticmethod
    def empty() -> Disposable:
        return AnonymousDisposable()


class AnonymousDisposable(Disposable):
    __slots__ = ("_action", "_lock", "_disposed")

    def __init__(self, action: Action | None = None) -> None:
        self._action = action
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            action, self._action = self._action, None
        if action is not None:
            action()


class BooleanDisposable(Disposable):
    """Flag-only disposable. Producers poll is_disposed to stop."""

    __slots__ = ("_disposed",)

    def __init__(self) -> None:
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._disposed = True


class SingleAssignmentDisposable(Disposable):
    """Holds a disposable that is only known after it is needed.

    If dispose() arrives before assignment, the assigned disposable is
    disposed as soon as it is set. on_disposed runs once, after the held
    disposable has been released.
    """

    __slots__ = ("_current", "_lock", "_disposed", "_assigned", "_on_disposed")

    def __init__(self, on_disposed: Action | None = None) -> None:
        self._current: Disposable | None = None
        self._lock = threading.Lock()
        self._disposed = False
        self._assigned = False
        self._on_disposed = on_disposed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def disposable(self) -> Disposable | None:
        return self._current

    @disposable.setter
    def disposable(self, value: Disposable) -> None:
        with self._lock:
            if self._assigned:
                raise RuntimeError("Disposable has already been assigned.")
            self._assigned = True
            should_dispose = self._disposed
            if not should_dispose:
                self._current = value
        if should_dispose:
            value.dispose()
            self._notify_disposed()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            current, self._current = self._current, None
            assigned = self._assigned
        if current is not None:
            current.dispose()
        if assigned:
            self._notify_disposed()

    def _notify_disposed(self) -> None:
        with self._lock:
            on_disposed, self._on_disposed = self._on_disposed, None
        if on_disposed is not None:
            on_disposed()


class DisposeBag(Disposable):
    """Exclusively owns a set of disposables and releases them together.

    Usage:
        with DisposeBag() as bag:
            subject.subscribe(on_next=print).disposed_by(bag)
            ...
        # every subscription released here, in registration order
    """

    __slots__ = ("_items", "_lock", "_disposed")

    def __init__(self) -> None:
        self._items: list[Disposable] = []
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __len__(self) -> int:
        return len(self._items)

    def add(self, disposable: Disposable) -> None:
        """Take ownership. A disposed bag releases the item immediately."""
        with self._lock:
            if not self._disposed:
                self._items.append(disposable)
                return
        disposable.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            items, self._items = self._items, []

        first_error: Exception | None = None
        for item in items:
            try:
                item.dispose()
            except Exception as exc:
                logger.exception("Failed to dispose %r", item)
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise first_error

    def __enter__(self) -> DisposeBag:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


def to_disposable(teardown) -> Disposable:
    """Normalize a producer teardown: Disposable, zero-arg callable or None."""
    if teardown is None:
        return Disposable.empty()
    if isinstance(teardown, Disposable):
        return teardown
    dispose = getattr(teardown, "dispose", None)
    if callable(dispose):
        return AnonymousDisposable(dispose)
    if callable(teardown):
        return AnonymousDisposable(teardown)
    raise TypeError(f"Expected a Disposable, a callable or None, got `{type(teardown).__name__}`.")
