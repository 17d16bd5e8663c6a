from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any


class ViewState(enum.Enum):
    """Lifecycle states reported by the view host."""

    CREATED = "created"
    ACTIVE = "active"
    INACTIVE = "inactive"
    DESTROYED = "destroyed"
    FAILED = "failed"


class ViewLifecycle(ABC):
    """Hooks the host environment invokes on an embedded view.

    Views never subclass a toolkit lifecycle; the host decides when a view is
    shown, hidden, torn down or recreated and calls these hooks accordingly.
    """

    @abstractmethod
    def on_activate(self) -> None:
        """The view became visible and may start its work."""

    @abstractmethod
    def on_deactivate(self) -> None:
        """The view is no longer visible; stop work and drop subscriptions."""

    def on_save_state(self) -> Any:
        """Return the state needed to rebuild an equivalent view, or ``None``."""
        return None

    def on_destroy(self) -> None:
        """Release everything; the instance is not used afterwards."""
