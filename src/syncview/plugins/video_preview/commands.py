from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Protocol

from .lifecycle import PlaybackLifecycleController
from .models import MediaItem

_logger = logging.getLogger("SyncView.Commands")


class PreviewAction(enum.Enum):
    SHARE = "share"
    SEND = "send"
    OPEN_WITH = "open_with"
    SYNC = "sync"
    FAVORITE = "favorite"
    UNFAVORITE = "unfavorite"
    DETAILS = "details"
    REMOVE = "remove"
    RENAME = "rename"
    MOVE = "move"
    COPY = "copy"


# Never offered from inside a video preview, whatever the file policy says
FORCED_HIDDEN = frozenset({PreviewAction.RENAME, PreviewAction.MOVE, PreviewAction.COPY})


@dataclass(frozen=True)
class ActionState:
    visible: bool = True
    enabled: bool = True


def filter_menu(policy: Mapping[PreviewAction, ActionState]) -> Dict[PreviewAction, ActionState]:
    """Apply the preview-specific restrictions on top of the general file policy."""
    result = dict(policy)
    for action in FORCED_HIDDEN:
        result[action] = ActionState(visible=False, enabled=False)
    return result


class FileOperations(Protocol):
    """File commands implemented by the surrounding file browser."""

    def share(self, item: MediaItem) -> None: ...

    def send(self, item: MediaItem) -> None: ...

    def open_with(self, item: MediaItem) -> None: ...

    def sync(self, item: MediaItem) -> None: ...

    def toggle_favorite(self, item: MediaItem, favorite: bool) -> None: ...

    def show_details(self, item: MediaItem) -> None: ...

    def remove(self, item: MediaItem) -> None: ...


RemoveConfirmation = Callable[[MediaItem, Callable[[], None]], None]


class PreviewCommands:
    """Routes menu actions to the file operations, pausing inline playback first."""

    def __init__(
        self,
        operations: FileOperations,
        controller: PlaybackLifecycleController,
        confirm_remove: RemoveConfirmation,
        finish: Optional[Callable[[], None]] = None,
    ) -> None:
        self._operations = operations
        self._controller = controller
        self._confirm_remove = confirm_remove
        self._finish = finish

    def handle(self, action: PreviewAction, item: MediaItem) -> bool:
        """Return True if the action was handled."""
        if action in FORCED_HIDDEN:
            _logger.warning("Action '%s' is not available in a video preview", action.value)
            return False

        self._controller.suspend()
        _logger.debug("Running '%s' on %s", action.value, item.remote_path)
        ops = self._operations
        if action is PreviewAction.SHARE:
            ops.share(item)
        elif action is PreviewAction.SEND:
            ops.send(item)
        elif action is PreviewAction.OPEN_WITH:
            ops.open_with(item)
            if self._finish is not None:
                self._finish()
        elif action is PreviewAction.SYNC:
            ops.sync(item)
        elif action is PreviewAction.FAVORITE:
            ops.toggle_favorite(item, True)
        elif action is PreviewAction.UNFAVORITE:
            ops.toggle_favorite(item, False)
        elif action is PreviewAction.DETAILS:
            ops.show_details(item)
        elif action is PreviewAction.REMOVE:
            self._confirm_remove(item, lambda: ops.remove(item))
        else:  # pragma: no cover - enum is exhaustive
            return False
        return True
