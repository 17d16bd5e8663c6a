from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Set

from ...core.dispatch import Dispatcher, ImmediateDispatcher
from .lifecycle import PlaybackLifecycleController
from .models import AccountRef, HandoffRequest, HandoffResult, MediaItem

_logger = logging.getLogger("SyncView.Handoff")

# Touches closer than this to the left edge (in density-independent units)
# belong to the navigation drawer swipe, not to the video.
EDGE_MARGIN_DIP = 24.0

HandoffCallback = Callable[[int, Optional[HandoffResult]], None]


class PointerPhase(enum.Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerEvent:
    phase: PointerPhase
    x: float
    density: float = 1.0

    @property
    def normalized_x(self) -> float:
        return self.x / self.density if self.density > 0 else self.x


class FullscreenLauncher(Protocol):
    def launch(
        self,
        request: HandoffRequest,
        item: MediaItem,
        account: AccountRef,
        on_finished: HandoffCallback,
    ) -> None:
        """Open the full-screen viewer; call ``on_finished(request_id, result)`` when it closes.

        ``result`` is ``None`` for any outcome other than a normal close.
        """


class FullscreenHandoffCoordinator:
    """Moves playback from the inline preview to a full-screen viewer and back.

    Each qualifying pointer-down starts its own handoff; rapid repeats are not
    debounced and may leave several requests outstanding at once.
    """

    def __init__(
        self,
        controller: PlaybackLifecycleController,
        launcher: FullscreenLauncher,
        dispatcher: Optional[Dispatcher] = None,
        on_returned: Optional[Callable[[HandoffResult], None]] = None,
    ) -> None:
        self._controller = controller
        self._launcher = launcher
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._on_returned = on_returned
        self._pending: Set[int] = set()
        self._next_id = 0

    @property
    def pending_requests(self) -> Set[int]:
        return set(self._pending)

    def on_pointer_event(self, event: PointerEvent, item: MediaItem, account: AccountRef) -> bool:
        """Return True if the event started a handoff."""
        if event.phase is not PointerPhase.DOWN:
            return False
        if event.normalized_x <= EDGE_MARGIN_DIP:
            return False
        self.start_handoff(item, account)
        return True

    def start_handoff(self, item: MediaItem, account: AccountRef) -> HandoffRequest:
        position = self._controller.current_position()
        playing = self._controller.current_is_playing()
        self._controller.suspend()

        self._next_id += 1
        request = HandoffRequest(position_ms=position, autoplay=playing, request_id=self._next_id)
        self._pending.add(request.request_id)
        if len(self._pending) > 1:
            _logger.warning("%d full-screen handoffs outstanding", len(self._pending))
        _logger.info("Handing off %s at %d ms (playing=%s)", item.remote_path, position, playing)
        self._launcher.launch(request, item, account, self._finished)
        return request

    def _finished(self, request_id: int, result: Optional[HandoffResult]) -> None:
        self._dispatcher.post(lambda: self.on_result(request_id, result))

    def on_result(self, request_id: int, result: Optional[HandoffResult]) -> bool:
        """Apply what the viewer handed back. Returns True if local state changed."""
        if request_id not in self._pending:
            _logger.debug("Ignoring result for unknown handoff %s", request_id)
            return False
        self._pending.discard(request_id)
        if result is None:
            _logger.info("Full-screen viewer closed without a result")
            return False
        self._controller.set_resume_point(result.position_ms, result.is_playing)
        _logger.info("Back from full screen at %d ms (playing=%s)", result.position_ms, result.is_playing)
        if self._on_returned is not None:
            self._on_returned(result)
        return True
