from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ...core.dispatch import Dispatcher, ImmediateDispatcher
from ...core.events import SYNC_FINISHED, SYNC_STARTED, TRANSFER_PROGRESS, EventBus, EventCallback
from .models import AccountRef, MediaItem

_logger = logging.getLogger("SyncView.Overlay")


class OverlayIndicator(Protocol):
    def set_visible(self, visible: bool) -> None: ...

    def set_progress(self, percent: int) -> None: ...


class ProgressOverlaySubscription:
    """Keeps a sync indicator in step with the transfer service for one file.

    At most one binding exists at a time. ``activate`` and ``deactivate`` are
    idempotent; events delivered after ``deactivate`` are dropped.
    """

    def __init__(
        self,
        event_bus: EventBus,
        indicator: OverlayIndicator,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self._bus = event_bus
        self._indicator = indicator
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._binding: Optional[Tuple[MediaItem, AccountRef]] = None
        self._handlers: List[Tuple[str, EventCallback]] = []
        self._epoch = 0

    @property
    def is_active(self) -> bool:
        return self._binding is not None

    @property
    def binding(self) -> Optional[Tuple[MediaItem, AccountRef]]:
        return self._binding

    def activate(self, item: MediaItem, account: AccountRef) -> None:
        if self._binding is not None:
            _logger.debug("Overlay already bound to %s", self._binding[0].remote_path)
            return
        self._epoch += 1
        self._binding = (item, account)
        epoch = self._epoch

        def _handler(event_name: str, data: Dict[str, Any]) -> None:
            self._dispatcher.post(lambda: self._apply(epoch, event_name, data))

        for topic in (SYNC_STARTED, SYNC_FINISHED, TRANSFER_PROGRESS):
            self._bus.subscribe(topic, _handler)
            self._handlers.append((topic, _handler))
        _logger.debug("Listening for transfer progress of %s", item.remote_path)

    def deactivate(self) -> None:
        if self._binding is None:
            return
        for topic, handler in self._handlers:
            self._bus.unsubscribe(topic, handler)
        self._handlers.clear()
        _logger.debug("Stopped listening for transfer progress of %s", self._binding[0].remote_path)
        self._binding = None
        self._epoch += 1

    def rebind(self, item: MediaItem) -> None:
        """Follow a replaced MediaItem without leaving a gap or a duplicate."""
        if self._binding is None:
            return
        account = self._binding[1]
        self.deactivate()
        self.activate(item, account)

    def set_sync_in_progress(self, in_progress: bool) -> None:
        if self._binding is None:
            return
        self._indicator.set_visible(in_progress)

    def _apply(self, epoch: int, event_name: str, data: Dict[str, Any]) -> None:
        if epoch != self._epoch or self._binding is None:
            _logger.debug("Dropping %s for an inactive overlay", event_name)
            return
        item, account = self._binding
        if data.get("remote_path") != item.remote_path or data.get("account") != account.name:
            return
        if event_name == SYNC_STARTED:
            self._indicator.set_visible(True)
        elif event_name == SYNC_FINISHED:
            self._indicator.set_visible(False)
        elif event_name == TRANSFER_PROGRESS:
            percent = max(0, min(100, int(data.get("percent", 0))))
            self._indicator.set_progress(percent)
            self._indicator.set_visible(True)
