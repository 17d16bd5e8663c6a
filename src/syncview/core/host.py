from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from .view_base import ViewLifecycle, ViewState

_logger = logging.getLogger("SyncView.ViewHost")

ViewFactory = Callable[[Any], ViewLifecycle]


@dataclass
class ViewRecord:
    key: str
    view: ViewLifecycle
    factory: Optional[ViewFactory] = None
    state: ViewState = ViewState.CREATED
    error: Optional[str] = None
    saved_state: Any = None


class ViewHost:
    """Drives lifecycle hooks of embedded views and tracks their state.

    ``recreate`` models an involuntary teardown (rotation, re-parenting): the
    view's state is saved, the instance destroyed and a fresh one built from
    the saved state through the registered factory.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ViewRecord] = {}

    def add(self, key: str, view: ViewLifecycle, factory: Optional[ViewFactory] = None) -> ViewRecord:
        if key in self._records:
            raise KeyError(f"View '{key}' already registered")
        record = ViewRecord(key=key, view=view, factory=factory)
        self._records[key] = record
        _logger.debug("Registered view '%s'", key)
        return record

    def get(self, key: str) -> Optional[ViewRecord]:
        return self._records.get(key)

    def iter_views(self) -> Iterable[ViewRecord]:
        return self._records.values()

    def activate(self, key: str) -> ViewState:
        record = self._require_record(key)
        if record.state is ViewState.ACTIVE:
            return record.state
        try:
            record.view.on_activate()
            record.state = ViewState.ACTIVE
            record.error = None
        except Exception as exc:
            record.state = ViewState.FAILED
            record.error = str(exc)
            _logger.exception("View '%s' failed to activate", key)
        return record.state

    def deactivate(self, key: str) -> ViewState:
        record = self._require_record(key)
        if record.state is not ViewState.ACTIVE:
            return record.state
        try:
            record.view.on_deactivate()
            record.state = ViewState.INACTIVE
        except Exception as exc:
            record.state = ViewState.FAILED
            record.error = str(exc)
            _logger.exception("View '%s' failed to deactivate", key)
        return record.state

    def destroy(self, key: str) -> None:
        record = self._require_record(key)
        self.deactivate(key)
        try:
            record.view.on_destroy()
        except Exception:
            _logger.exception("View '%s' failed during destroy", key)
        record.state = ViewState.DESTROYED
        del self._records[key]

    def recreate(self, key: str) -> ViewRecord:
        record = self._require_record(key)
        if record.factory is None:
            raise RuntimeError(f"View '{key}' cannot be recreated without a factory")
        was_active = record.state is ViewState.ACTIVE
        saved = record.view.on_save_state()
        self.destroy(key)
        _logger.info("Recreating view '%s'", key)
        new_record = self.add(key, record.factory(saved), record.factory)
        new_record.saved_state = saved
        if was_active:
            self.activate(key)
        return new_record

    def shutdown(self) -> None:
        for key in list(self._records):
            self.destroy(key)

    def _require_record(self, key: str) -> ViewRecord:
        record = self._records.get(key)
        if not record:
            raise KeyError(f"View '{key}' not found")
        return record
