"""Test helpers. Opt-in — not imported by rxkit itself."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

from rxkit.event import Completed, Error, Event, Next
from rxkit.observer import Observer

T = TypeVar("T")


class EventRecorder(Observer[T], Generic[T]):
    """Observer that records every event it receives, in order.

    Usage:
        recorder = EventRecorder()
        of(1, 2).subscribe(recorder)
        assert recorder.events == [Next(1), Next(2), Completed()]
    """

    __slots__ = ("events",)

    def __init__(self) -> None:
        self.events: list[Event[T]] = []

    def on_next(self, value: T) -> None:
        self.events.append(Next(value))

    def on_error(self, error: BaseException) -> None:
        self.events.append(Error(error))

    def on_completed(self) -> None:
        self.events.append(Completed())

    @property
    def values(self) -> list[T]:
        return [event.value for event in self.events if isinstance(event, Next)]

    @property
    def errors(self) -> list[BaseException]:
        return [event.error for event in self.events if isinstance(event, Error)]

    @property
    def is_completed(self) -> bool:
        return any(isinstance(event, Completed) for event in self.events)

    @property
    def is_terminated(self) -> bool:
        return any(event.is_terminal for event in self.events)

    def clear(self) -> EventRecorder[T]:
        self.events.clear()
        return self

    def __iter__(self) -> Iterator[Event[T]]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"EventRecorder({self.events!r})"
