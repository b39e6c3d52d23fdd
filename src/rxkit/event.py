"""Events — the tagged payloads delivered through a subscription.

A general Observable speaks the three-variant grammar Next | Error | Completed.
The traits speak narrower grammars built from the same terminal variants plus
Success, which carries a value and ends the stream in one step:

    SingleEvent      = Success | Error
    MaybeEvent       = Success | Completed | Error
    CompletableEvent = Completed | Error
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from rxkit.observer import Observer

T = TypeVar("T")


class Event(Generic[T]):
    """Base class of Next, Error and Completed."""

    __slots__ = ()

    @property
    def is_terminal(self) -> bool:
        return False

    def accept(self, observer: Observer[T]) -> None:
        """Dispatch this event to the matching observer method."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Next(Event[T]):
    value: T

    def accept(self, observer: Observer[T]) -> None:
        observer.on_next(self.value)


@dataclass(frozen=True, slots=True)
class Error(Event):
    error: BaseException

    @property
    def is_terminal(self) -> bool:
        return True

    def accept(self, observer: Observer) -> None:
        observer.on_error(self.error)


@dataclass(frozen=True, slots=True)
class Completed(Event):
    @property
    def is_terminal(self) -> bool:
        return True

    def accept(self, observer: Observer) -> None:
        observer.on_completed()


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """The value-carrying terminal event of Single and Maybe."""

    value: T

    @property
    def is_terminal(self) -> bool:
        return True


SingleEvent = Union[Success[T], Error]
MaybeEvent = Union[Success[T], Completed, Error]
CompletableEvent = Union[Completed, Error]
