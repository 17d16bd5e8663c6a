"""Marshalling of callbacks onto the thread that owns preview state.

All preview state is mutated from a single owner thread (the Qt GUI thread).
Engine and transfer callbacks may arrive from elsewhere and are posted through a
dispatcher before they touch anything.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6.QtCore import QObject, Signal  # type: ignore[import-not-found]

_logger = logging.getLogger("SyncView.Dispatch")


class Dispatcher(Protocol):
    def post(self, callback: Callable[[], None]) -> None:
        """Run *callback* on the owner thread, preserving posting order."""


class ImmediateDispatcher:
    """Runs callbacks inline; for callers already on the owner thread."""

    def post(self, callback: Callable[[], None]) -> None:
        callback()


class QtDispatcher(QObject):
    """Queues callbacks onto the thread this object lives on.

    Emitting from the owner thread invokes the slot directly; emitting from any
    other thread queues it on the owner's event loop in emission order.
    """

    _invoke = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._invoke.connect(self._run)

    def post(self, callback: Callable[[], None]) -> None:
        self._invoke.emit(callback)

    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            _logger.exception("Posted callback failed")
