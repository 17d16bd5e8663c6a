"""Event bus used to fan out transfer and media notifications.

The download/sync subsystem lives outside this package. It reports its state by
emitting events on a shared bus; previews subscribe while they are visible.

Example usage:
    # In the transfer service when a file starts syncing
    services.event_bus.emit(SYNC_STARTED, {'remote_path': path, 'account': name})

    # In a preview overlay that wants to show a progress bar
    services.event_bus.subscribe(SYNC_STARTED, self._handle_sync_started)
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

# Topics emitted by the transfer subsystem
SYNC_STARTED = "transfer.sync_started"
SYNC_FINISHED = "transfer.sync_finished"
TRANSFER_PROGRESS = "transfer.progress"

# Topics emitted by previews
MEDIA_STOP_ALL = "media.stop_all"

EventCallback = Callable[[str, Dict[str, Any]], None]

_logger = logging.getLogger("SyncView.EventBus")


class EventBus:
    """Central pub/sub bus shared by the transfer service and open previews."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventCallback]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_name: str, callback: EventCallback) -> None:
        """Subscribe to an event.

        Args:
            event_name: Name of the event to listen for (e.g., 'transfer.sync_started')
            callback: Function to call when event is emitted.
                     Receives (event_name, data) as arguments.
        """
        with self._lock:
            subscribers = self._subscribers.setdefault(event_name, [])
            if callback not in subscribers:
                subscribers.append(callback)

    def unsubscribe(self, event_name: str, callback: EventCallback) -> None:
        with self._lock:
            subscribers = self._subscribers.get(event_name)
            if subscribers and callback in subscribers:
                subscribers.remove(callback)

    def emit(self, event_name: str, data: Dict[str, Any] = None) -> None:
        """Emit an event to all subscribers.

        Callbacks run on the emitting thread, outside the lock. A failing
        subscriber is logged and does not prevent delivery to the others.
        """
        if data is None:
            data = {}

        with self._lock:
            callbacks = list(self._subscribers.get(event_name, []))

        for callback in callbacks:
            try:
                callback(event_name, data)
            except Exception:
                _logger.exception("Subscriber for '%s' failed", event_name)

    def clear(self) -> None:
        """Clear all event subscriptions. Useful for testing."""
        with self._lock:
            self._subscribers.clear()

    def subscriber_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_name, []))
