"""Optional cross-thread delivery for Subject emissions.

The engine is synchronous by default. Call set_scheduler() once from the
thread that should receive events:

    rxkit.set_scheduler(app.call_from_thread)

After that, any Subject emission issued from another thread is handed to the
scheduler instead of running in place. Emissions on the scheduler thread
remain synchronous.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger("rxkit.scheduling")

Scheduler = Callable[[Callable[[], None]], object]

_scheduler: Scheduler | None = None
_scheduler_thread: threading.Thread | None = None


def set_scheduler(scheduler: Scheduler | None) -> None:
    """Install (or with None, remove) the global delivery scheduler."""
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None
    logger.debug("Scheduler %s on %s", "installed" if scheduler else "removed", _scheduler_thread)


def dispatch(fn: Callable[[], None]) -> None:
    """Run fn here, or marshal it to the scheduler thread."""
    if _scheduler is not None and threading.current_thread() != _scheduler_thread:
        _scheduler(fn)
    else:
        fn()
