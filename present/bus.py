import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Type

log = logging.getLogger(__name__)


# ----------------------------
# Events
# ----------------------------
@dataclass(frozen=True)
class Play:
    """Open the fullscreen presentation."""


@dataclass(frozen=True)
class Stop:
    """Close the fullscreen presentation."""


@dataclass(frozen=True)
class ScrollBy:
    """Scroll the presented slide vertically by dy pixels."""
    dy: float


EVENT_KINDS = (Play, Stop, ScrollBy)


# ----------------------------
# Bus
# ----------------------------
class Subscription:
    """
    Handle returned by NotificationBus.subscribe.

    The bus never drops a handler on its own; whoever holds this calls
    dispose() once at teardown, or uses it as a context manager.
    """

    def __init__(self, bus, kind, handler):
        self._bus = bus
        self.kind = kind
        self.handler = handler
        self._disposed = False

    @property
    def disposed(self):
        return self._disposed

    def dispose(self):
        if self._disposed:
            return
        self._disposed = True
        self._bus._remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False


class NotificationBus:
    """
    In-process publish/subscribe for Play, Stop and ScrollBy.

    publish() calls handlers synchronously on the caller's thread, in the
    order they subscribed. Events published with no subscriber are dropped.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._subs: Dict[Type, List[Subscription]] = {}

    def subscribe(self, kind, handler: Callable[[object], None]) -> Subscription:
        if kind not in EVENT_KINDS:
            raise TypeError(f"unknown event kind: {kind!r}")
        sub = Subscription(self, kind, handler)
        with self.lock:
            self._subs.setdefault(kind, []).append(sub)
        return sub

    def _remove(self, sub):
        with self.lock:
            subs = self._subs.get(sub.kind, [])
            if sub in subs:
                subs.remove(sub)

    def subscriber_count(self, kind):
        with self.lock:
            return len(self._subs.get(kind, []))

    def publish(self, event):
        with self.lock:
            subs = list(self._subs.get(type(event), []))
        if not subs:
            log.debug("No subscriber for %s, dropped", event)
            return 0
        for sub in subs:
            try:
                sub.handler(event)
            except Exception:
                log.exception("Subscriber for %s failed", type(event).__name__)
        return len(subs)
