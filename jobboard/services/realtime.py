"""
Real-time listener hub.

Listeners subscribe to a topic (e.g. "messages:<conversation_id>") with a
snapshot function and a callback. The callback receives the current
snapshot immediately and a fresh snapshot every time the topic is
published. Subscribing returns an `unsubscribe` callable.

Writers publish after every write. Snapshots are computed per listener,
outside the hub lock, so a slow query never blocks subscribe/unsubscribe.
"""

import itertools
import logging
import threading
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

Snapshot = Callable[[], list]
Callback = Callable[[list], None]


class _Listener:
    __slots__ = ("listener_id", "topic", "snapshot", "callback", "active")

    def __init__(self, listener_id: int, topic: str, snapshot: Snapshot, callback: Callback):
        self.listener_id = listener_id
        self.topic = topic
        self.snapshot = snapshot
        self.callback = callback
        self.active = True


class ListenerHub:

    def __init__(self):
        self._lock = threading.Lock()
        self._topics: Dict[str, Dict[int, _Listener]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, topic: str, snapshot: Snapshot, callback: Callback) -> Callable[[], None]:
        listener = _Listener(next(self._ids), topic, snapshot, callback)
        with self._lock:
            self._topics.setdefault(topic, {})[listener.listener_id] = listener

        logger.debug("Listener %s attached to %s", listener.listener_id, topic)
        self._deliver(listener)

        def unsubscribe() -> None:
            with self._lock:
                listener.active = False
                listeners = self._topics.get(topic)
                if listeners and listeners.pop(listener.listener_id, None) is not None:
                    logger.debug("Listener %s detached from %s", listener.listener_id, topic)
                    if not listeners:
                        del self._topics[topic]

        return unsubscribe

    def publish(self, topic: str) -> None:
        with self._lock:
            listeners = list(self._topics.get(topic, {}).values())
        for listener in listeners:
            self._deliver(listener)

    def listener_count(self, topic: str = None) -> int:
        with self._lock:
            if topic is not None:
                return len(self._topics.get(topic, {}))
            return sum(len(listeners) for listeners in self._topics.values())

    def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return
        try:
            data = listener.snapshot()
        except Exception as e:
            logger.error("Snapshot query failed for %s: %s", listener.topic, e)
            data = []

        # Unsubscribed while the snapshot was computed
        if not listener.active:
            return
        try:
            listener.callback(data)
        except Exception:
            logger.exception("Listener callback failed for %s", listener.topic)


def noop_unsubscribe() -> None:
    """Returned when no listener was attached."""


_hub: ListenerHub = None


def get_listener_hub() -> ListenerHub:
    """Process-wide hub (singleton pattern)"""
    global _hub
    if _hub is None:
        _hub = ListenerHub()
    return _hub


def reset_listener_hub() -> ListenerHub:
    global _hub
    _hub = ListenerHub()
    return _hub


def topics_for(prefix: str, keys: List[str]) -> List[str]:
    return [f"{prefix}:{key}" for key in keys]
