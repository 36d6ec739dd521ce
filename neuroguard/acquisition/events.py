"""Observer registration with explicit unsubscribe handles."""
from __future__ import annotations
import logging
import threading
from typing import Callable, Generic, TypeVar

log = logging.getLogger(__name__)

H = TypeVar("H", bound=Callable)


class Observers(Generic[H]):
    """Ordered, thread-safe handler registry.

    Handlers fire in registration order. A handler that raises is logged
    and skipped; the remaining handlers still run.
    """
    def __init__(self, name: str = "observers"):
        self.name = name
        self._lock = threading.Lock()
        self._handlers: list[_Entry] = []

    def add(self, handler: H) -> Callable[[], None]:
        """Register a handler and return an idempotent unsubscribe callable."""
        entry = _Entry(handler)
        with self._lock:
            self._handlers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._handlers:
                    self._handlers.remove(entry)

        return unsubscribe

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def emit(self, *args) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for entry in handlers:
            try:
                entry.fn(*args)
            except Exception:
                log.exception("%s handler %r failed", self.name, entry.fn)


class _Entry:
    # Identity-compared wrapper so the same callable can be registered twice
    # and each registration is removed independently.
    __slots__ = ("fn",)

    def __init__(self, fn):
        self.fn = fn
