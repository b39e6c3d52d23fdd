"""Variable — a settable current value backed by a BehaviorSubject.

Writes to .value become on_next on the wrapped subject; reads need no
subscription. There is no way to push an error into a Variable, and no way
to complete it by hand: completion belongs to the Variable's own teardown.

Python gives no reliable destructor hook, so that teardown is the explicit
dispose(), called by whoever owns the Variable's scope, directly, through a
DisposeBag, or by leaving a `with` block:

    with Variable("initial") as name:
        name.as_observable().subscribe(on_next=print)
        name.value = "changed"
    # wrapped subject completed here
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from rxkit.disposable import Disposable
from rxkit.observable import Observable
from rxkit.subject import BehaviorSubject

logger = logging.getLogger("rxkit.variable")

T = TypeVar("T")


class Variable(Disposable, Generic[T]):
    """A current value that replays itself to every new subscriber."""

    __slots__ = ("_subject", "_disposed")

    def __init__(self, value: T) -> None:
        self._subject: BehaviorSubject[T] = BehaviorSubject(value)
        self._disposed = False

    @property
    def value(self) -> T:
        return self._subject.value

    @value.setter
    def value(self, value: T) -> None:
        self._subject.on_next(value)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def as_observable(self) -> Observable[T]:
        """Observable view of the wrapped subject. Replays the current value."""
        return self._subject.as_observable()

    def dispose(self) -> None:
        """End the Variable's scope: complete the wrapped subject."""
        if self._disposed:
            return
        self._disposed = True
        self._subject.on_completed()
        logger.debug("%r completed", self)

    def __enter__(self) -> Variable[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"Variable({self._subject._latest!r})"
