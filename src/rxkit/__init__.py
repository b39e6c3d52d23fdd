"""rxkit: push-based reactive event streams for Python."""

from importlib.metadata import version as _version

__version__ = _version("rxkit")

from rxkit._scheduling import set_scheduler
from rxkit.disposable import (
    AnonymousDisposable,
    BooleanDisposable,
    Disposable,
    DisposeBag,
    SingleAssignmentDisposable,
)
from rxkit.errors import DisposedError, EmptyInputError, InvalidArgumentError, RxError
from rxkit.event import (
    Completed,
    CompletableEvent,
    Error,
    Event,
    MaybeEvent,
    Next,
    SingleEvent,
    Success,
)
from rxkit.observer import AnonymousObserver, Observer
from rxkit.observable import (
    Observable,
    create,
    deferred,
    empty,
    from_iterable,
    just,
    never,
    of,
    throw,
)
from rxkit.subject import BehaviorSubject, PublishSubject, ReplaySubject, Subject
from rxkit.variable import Variable
from rxkit.traits import Completable, Maybe, Single
from rxkit.watch import watch, WatchHandle
# testing NOT auto-imported — opt-in only

__all__ = [
    "AnonymousDisposable",
    "AnonymousObserver",
    "BehaviorSubject",
    "BooleanDisposable",
    "Completable",
    "CompletableEvent",
    "Completed",
    "Disposable",
    "DisposeBag",
    "DisposedError",
    "EmptyInputError",
    "Error",
    "Event",
    "InvalidArgumentError",
    "Maybe",
    "MaybeEvent",
    "Next",
    "Observable",
    "Observer",
    "PublishSubject",
    "ReplaySubject",
    "RxError",
    "Single",
    "SingleAssignmentDisposable",
    "SingleEvent",
    "Subject",
    "Success",
    "Variable",
    "WatchHandle",
    "create",
    "deferred",
    "empty",
    "from_iterable",
    "just",
    "never",
    "of",
    "set_scheduler",
    "throw",
    "watch",
]
