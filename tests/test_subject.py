"""Tests for PublishSubject, BehaviorSubject and ReplaySubject."""

import logging
import threading

import pytest

from rxkit import (
    BehaviorSubject,
    Completed,
    DisposeBag,
    DisposedError,
    Error,
    InvalidArgumentError,
    Next,
    PublishSubject,
    ReplaySubject,
)
from rxkit.testing import EventRecorder


class AnError(Exception):
    pass


def _subjects():
    return [PublishSubject(), BehaviorSubject("seed"), ReplaySubject(2), ReplaySubject.create_unbounded()]


class TestPublishSubject:
    def test_drops_events_before_subscription(self):
        subject = PublishSubject()
        subject.on_next("Is anyone listening?")
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert recorder.events == []

    def test_late_subscriber_sees_later_events_only(self):
        subject = PublishSubject()
        first, second = EventRecorder(), EventRecorder()
        subject.subscribe(first)
        subject.on_next("1")
        subject.subscribe(second)
        subject.on_next("2")
        assert first.values == ["1", "2"]
        assert second.values == ["2"]

    def test_walkthrough(self):
        subject = PublishSubject()
        subject.on_next("Is anyone listening?")

        one = EventRecorder()
        subscription_one = subject.subscribe(one)
        subject.on(Next("1"))
        subject.on_next("2")

        two = EventRecorder()
        subscription_two = subject.subscribe(two)
        subject.on_next("3")
        subscription_one.dispose()
        subject.on_next("4")

        subject.on_completed()
        subject.on_next("5")
        subscription_two.dispose()

        three = EventRecorder()
        with DisposeBag() as bag:
            subject.subscribe(three).disposed_by(bag)
            subject.on_next("?")

        assert one.events == [Next("1"), Next("2"), Next("3")]
        assert two.events == [Next("3"), Next("4"), Completed()]
        assert three.events == [Completed()]

    def test_fan_out_in_attach_order(self):
        subject = PublishSubject()
        log = []
        for name in "abc":
            subject.subscribe(on_next=lambda v, n=name: log.append((n, v)))
        subject.on_next(1)
        assert log == [("a", 1), ("b", 1), ("c", 1)]

    def test_late_subscriber_gets_stored_error(self):
        subject = PublishSubject()
        subject.on_next(1)
        subject.on_error(AnError())
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert len(recorder.events) == 1
        assert isinstance(recorder.errors[0], AnError)

    def test_has_observers(self):
        subject = PublishSubject()
        assert not subject.has_observers
        subscription = subject.subscribe()
        assert subject.has_observers
        subscription.dispose()
        assert not subject.has_observers

    def test_terminal_releases_observers(self):
        subject = PublishSubject()
        subject.subscribe()
        subject.on_completed()
        assert not subject.has_observers
        assert subject.is_terminated


class TestBehaviorSubject:
    def test_seed_delivered_first(self):
        subject = BehaviorSubject("init")
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert recorder.events == [Next("init")]

    def test_latest_replayed(self):
        subject = BehaviorSubject("Initial value")
        subject.on_next("X")
        recorder = EventRecorder()
        subject.subscribe(recorder)
        subject.on_next("Y")
        assert recorder.values == ["X", "Y"]

    def test_error_replaces_value_for_late_subscribers(self):
        subject = BehaviorSubject("Initial value")
        with DisposeBag() as bag:
            subject.on_next("X")
            first = EventRecorder()
            subject.subscribe(first).disposed_by(bag)
            err = AnError()
            subject.on_error(err)
            second = EventRecorder()
            subject.subscribe(second).disposed_by(bag)

        assert first.events == [Next("X"), Error(err)]
        assert second.events == [Error(err)]

    def test_value_property(self):
        subject = BehaviorSubject(1)
        assert subject.value == 1
        subject.on_next(2)
        assert subject.value == 2

    def test_value_raises_stored_error(self):
        subject = BehaviorSubject(1)
        subject.on_error(AnError("failed"))
        with pytest.raises(AnError):
            subject.value

    def test_seed_required(self):
        with pytest.raises(TypeError):
            BehaviorSubject()


class TestReplaySubject:
    @pytest.mark.parametrize("size", [0, 1, 2, 3, 5])
    @pytest.mark.parametrize("count", [0, 1, 2, 4, 7])
    def test_replays_last_min_k_n(self, size, count):
        subject = ReplaySubject(size)
        for i in range(count):
            subject.on_next(i)
        recorder = EventRecorder()
        subject.subscribe(recorder)
        subject.on_next("live")
        expected = list(range(count))[count - min(count, size):]
        assert recorder.values == expected + ["live"]

    def test_walkthrough(self):
        subject = ReplaySubject.create(buffer_size=2)
        with DisposeBag() as bag:
            subject.on_next("1")
            subject.on_next("2")
            subject.on_next("3")

            one, two = EventRecorder(), EventRecorder()
            subject.subscribe(one).disposed_by(bag)
            subject.subscribe(two).disposed_by(bag)

            subject.on_next("4")

            three = EventRecorder()
            subject.subscribe(three).disposed_by(bag)

            err = AnError()
            subject.on_error(err)

        assert one.events == [Next("2"), Next("3"), Next("4"), Error(err)]
        assert two.events == [Next("2"), Next("3"), Next("4"), Error(err)]
        assert three.events == [Next("3"), Next("4"), Error(err)]

    def test_replay_then_terminal_for_late_subscriber(self):
        subject = ReplaySubject(2)
        subject.on_next("3")
        subject.on_next("4")
        subject.on_completed()
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert recorder.events == [Next("3"), Next("4"), Completed()]

    def test_unbounded(self):
        subject = ReplaySubject.create_unbounded()
        for i in range(100):
            subject.on_next(i)
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert recorder.values == list(range(100))
        assert subject.buffer_size is None

    @pytest.mark.parametrize("size", [-1, 1.5, "2", True])
    def test_invalid_buffer_size(self, size):
        with pytest.raises(InvalidArgumentError):
            ReplaySubject(size)

    def test_create_requires_buffer_size(self):
        with pytest.raises(InvalidArgumentError):
            ReplaySubject.create(None)

    def test_subscribe_after_dispose_gets_error(self):
        subject = ReplaySubject(2)
        subject.on_next(1)
        subject.dispose()
        recorder = EventRecorder()
        subject.subscribe(recorder)
        assert recorder.values == []
        assert isinstance(recorder.errors[0], DisposedError)

    def test_alternate_constructors_only(self):
        """Subjects do not inherit the cold creation helpers."""
        for cls in (PublishSubject, BehaviorSubject, ReplaySubject):
            with pytest.raises(TypeError):
                cls.of(1, 2)
            with pytest.raises(TypeError):
                cls.just(1)
        with pytest.raises(TypeError):
            PublishSubject.create(lambda observer: None)
        assert isinstance(ReplaySubject.create(3), ReplaySubject)
        assert isinstance(ReplaySubject.create_unbounded(), ReplaySubject)


class TestTerminalState:
    """Emissions after a terminal event are ignored by every subject."""

    @pytest.mark.parametrize("subject", _subjects(), ids=lambda s: type(s).__name__)
    def test_on_next_after_completed_is_noop(self, subject):
        recorder = EventRecorder()
        subject.subscribe(recorder)
        subject.on_completed()
        before = list(recorder.events)
        subject.on_next("after")
        subject.on_error(AnError())
        subject.on_completed()
        assert recorder.events == before
        assert recorder.events[-1] == Completed()

    @pytest.mark.parametrize("subject", _subjects(), ids=lambda s: type(s).__name__)
    def test_on_next_after_error_is_noop(self, subject):
        recorder = EventRecorder()
        subject.subscribe(recorder)
        err = AnError()
        subject.on_error(err)
        subject.on_next("after")
        assert recorder.events[-1] == Error(err)
        assert recorder.errors == [err]


class TestDisposal:
    """Disposing a subscription or the subject itself."""

    def test_subscription_dispose_idempotent(self):
        subject = PublishSubject()
        recorder = EventRecorder()
        subscription = subject.subscribe(recorder)
        subscription.dispose()
        subscription.dispose()
        subject.on_next(1)
        assert recorder.events == []

    def test_dispose_subject(self, caplog):
        subject = PublishSubject()
        recorder = EventRecorder()
        subject.subscribe(recorder)
        with caplog.at_level(logging.DEBUG, logger="rxkit.subject"):
            subject.dispose()
        subject.on_next(1)
        assert recorder.events == []
        assert subject.is_disposed
        assert "disposed" in caplog.text

        late = EventRecorder()
        subject.subscribe(late)
        assert len(late.events) == 1
        assert isinstance(late.errors[0], DisposedError)

    def test_subscribe_after_terminal_then_dispose(self):
        subject = ReplaySubject.create(buffer_size=2)
        subject.on_next(1)
        subject.on_error(AnError())
        subject.dispose()

        recorder = EventRecorder()
        subscription = subject.subscribe(recorder)
        subscription.dispose()
        assert recorder.values == []
        assert len(recorder.errors) == 1
        assert isinstance(recorder.errors[0], DisposedError)

    def test_disposed_subject_error_reaches_on_error(self):
        subject = BehaviorSubject("seed")
        subject.dispose()
        errors, disposed = [], []
        subject.subscribe(on_error=errors.append, on_disposed=lambda: disposed.append(True))
        assert [type(e) for e in errors] == [DisposedError]
        assert disposed == [True]

    def test_behavior_value_after_dispose(self):
        subject = BehaviorSubject(1)
        subject.dispose()
        with pytest.raises(DisposedError):
            subject.value


class TestReentrancy:
    """Callbacks that subscribe, unsubscribe or emit during an emission."""

    def test_subscribe_during_emission_not_notified(self):
        subject = PublishSubject()
        late = EventRecorder()

        def attach(value):
            if value == 1:
                subject.subscribe(late)

        subject.subscribe(on_next=attach)
        subject.on_next(1)
        assert late.values == []
        subject.on_next(2)
        assert late.values == [2]

    def test_unsubscribe_during_emission_still_delivered(self):
        subject = PublishSubject()
        second = EventRecorder()
        subscriptions = []

        def detach_second(value):
            subscriptions[1].dispose()

        subscriptions.append(subject.subscribe(on_next=detach_second))
        subscriptions.append(subject.subscribe(second))
        subject.on_next(1)
        subject.on_next(2)
        assert second.values == [1]

    def test_unsubscribe_during_terminal_still_delivered(self):
        subject = PublishSubject()
        second = EventRecorder()
        subscriptions = []

        subscriptions.append(subject.subscribe(on_completed=lambda: subscriptions[1].dispose()))
        subscriptions.append(subject.subscribe(second))
        subject.on_completed()
        assert second.events == [Completed()]

    def test_unsubscribe_earlier_observer_keeps_emission(self):
        """Disposing an observer already notified leaves the rest of the emission intact."""
        subject = BehaviorSubject(0)
        log = []
        subscriptions = []

        def first(value):
            log.append(("first", value))

        def second(value):
            log.append(("second", value))
            if value == 1:
                subscriptions[0].dispose()

        subscriptions.append(subject.subscribe(on_next=first))
        subscriptions.append(subject.subscribe(on_next=second))
        subscriptions.append(subject.subscribe(on_next=lambda v: log.append(("third", v))))
        log.clear()
        subject.on_next(1)
        subject.on_next(2)
        assert log == [
            ("first", 1),
            ("second", 1),
            ("third", 1),
            ("second", 2),
            ("third", 2),
        ]

    def test_self_dispose_during_notification(self):
        subject = PublishSubject()
        received = []
        holder = []

        def once(value):
            received.append(value)
            holder[0].dispose()

        holder.append(subject.subscribe(on_next=once))
        subject.on_next(1)
        subject.on_next(2)
        assert received == [1]
        assert not subject.has_observers

    def test_emit_from_callback(self):
        subject = PublishSubject()
        log = []

        def echo(value):
            log.append(value)
            if value < 3:
                subject.on_next(value + 1)

        subject.subscribe(on_next=echo)
        subject.on_next(1)
        assert log == [1, 2, 3]


class TestConcurrency:
    """Emission and attachment from several threads at once."""

    def test_concurrent_emitters_deliver_each_value_once(self):
        subject = PublishSubject()
        received = []
        lock = threading.Lock()

        def on_next(value):
            with lock:
                received.append(value)

        subject.subscribe(on_next=on_next)

        def emit(base):
            for i in range(200):
                subject.on_next(base + i)

        threads = [threading.Thread(target=emit, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(received) == sorted(n * 1000 + i for n in range(4) for i in range(200))

    def test_attach_vs_terminal_race(self):
        """Every attacher receives the terminal event exactly once."""
        for _ in range(20):
            subject = ReplaySubject(1)
            recorders = [EventRecorder() for _ in range(8)]
            start = threading.Barrier(len(recorders) + 1)

            def attach(recorder):
                start.wait()
                subject.subscribe(recorder)

            threads = [threading.Thread(target=attach, args=(r,)) for r in recorders]
            for t in threads:
                t.start()
            subject.on_next("v")
            start.wait()
            subject.on_completed()
            for t in threads:
                t.join()

            for recorder in recorders:
                assert recorder.events.count(Completed()) == 1
                assert recorder.events[-1] == Completed()
                assert recorder.values == ["v"]
