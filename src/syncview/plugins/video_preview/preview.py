"""Inline preview of a downloaded video inside the file browser.

A :class:`VideoPreview` is built for exactly one (MediaItem, AccountRef) pair and
refuses to exist for anything that cannot be played locally. The host calls its
lifecycle hooks; everything else is driven by engine events, transfer events,
pointer input and menu actions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from ...core.dispatch import Dispatcher
from ...core.events import MEDIA_STOP_ALL
from ...core.services import PreviewServices
from ...core.view_base import ViewLifecycle
from .commands import ActionState, FileOperations, PreviewAction, PreviewCommands, RemoveConfirmation, filter_menu
from .error_presenter import ConfirmationDialog, ErrorPresenter, MessageResolver, describe_media_error
from .handoff import FullscreenHandoffCoordinator, FullscreenLauncher, PointerEvent
from .lifecycle import PlaybackControls, PlaybackEngine, PlaybackLifecycleController
from .models import AccountRef, MediaItem, PlaybackSession, PlaybackState, Snapshot
from .overlay import OverlayIndicator, ProgressOverlaySubscription
from .snapshot import StateSnapshotManager
from .validator import can_be_previewed, validate_preview_target

_logger = logging.getLogger("SyncView.VideoPreview")

SOURCE_ID = "video_preview"


def _always_attached() -> bool:
    return True


@dataclass
class PreviewCollaborators:
    """Everything a preview talks to but does not own."""

    engine: PlaybackEngine
    controls: PlaybackControls
    indicator: OverlayIndicator
    dialog: ConfirmationDialog
    launcher: FullscreenLauncher
    operations: FileOperations
    confirm_remove: RemoveConfirmation
    is_attached: Callable[[], bool] = field(default=_always_attached)
    dispatcher: Optional[Dispatcher] = None
    finish: Optional[Callable[[], None]] = None
    invalidate_menu: Optional[Callable[[], None]] = None
    resolver: MessageResolver = field(default=describe_media_error)


class VideoPreview(ViewLifecycle):
    def __init__(
        self,
        item: Optional[MediaItem],
        account: Optional[AccountRef],
        services: PreviewServices,
        collaborators: PreviewCollaborators,
        position_ms: int = 0,
        autoplay: Optional[bool] = None,
    ) -> None:
        item, account = validate_preview_target(item, account)

        self._item = item
        self._account = account
        self._services = services
        self._collaborators = collaborators
        self._active = False

        settings = services.settings
        self._snapshots = StateSnapshotManager(services.config_store if settings.remember_position else None)
        if autoplay is None:
            autoplay = settings.autoplay
        session = PlaybackSession(position_ms=int(position_ms), autoplay=bool(autoplay))
        if position_ms == 0:
            stored = self._snapshots.load_persisted(item, account)
            if stored is not None:
                _logger.info("Resuming %s at %d ms", item.remote_path, stored.position_ms)
                session = self._snapshots.restore(stored)

        self._presenter = ErrorPresenter(
            collaborators.dialog,
            collaborators.is_attached,
            resolver=collaborators.resolver,
            notify=lambda message: services.send_notification(message, level="error", source=SOURCE_ID),
        )
        self._controller = PlaybackLifecycleController(
            collaborators.engine,
            collaborators.controls,
            self._presenter,
            dispatcher=collaborators.dispatcher,
            session=session,
        )
        self._overlay = ProgressOverlaySubscription(
            services.event_bus,
            collaborators.indicator,
            dispatcher=collaborators.dispatcher,
        )
        self._handoff = FullscreenHandoffCoordinator(
            self._controller,
            collaborators.launcher,
            dispatcher=collaborators.dispatcher,
        )
        self._commands = PreviewCommands(
            collaborators.operations,
            self._controller,
            collaborators.confirm_remove,
            finish=collaborators.finish,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Snapshot,
        services: PreviewServices,
        collaborators: PreviewCollaborators,
    ) -> "VideoPreview":
        session = StateSnapshotManager().restore(snapshot)
        return cls(
            snapshot.item,
            snapshot.account,
            services,
            collaborators,
            position_ms=session.position_ms,
            autoplay=session.autoplay,
        )

    # ---------------------------------------------------------------- accessors
    @property
    def item(self) -> MediaItem:
        return self._item

    @property
    def account(self) -> AccountRef:
        return self._account

    @property
    def controller(self) -> PlaybackLifecycleController:
        return self._controller

    @property
    def overlay(self) -> ProgressOverlaySubscription:
        return self._overlay

    @property
    def handoff(self) -> FullscreenHandoffCoordinator:
        return self._handoff

    @property
    def presenter(self) -> ErrorPresenter:
        return self._presenter

    @property
    def session(self) -> PlaybackSession:
        return self._controller.session

    @property
    def state(self) -> PlaybackState:
        return self._controller.state

    @property
    def is_active(self) -> bool:
        return self._active

    # ------------------------------------------------------------ lifecycle hooks
    def on_activate(self) -> None:
        if self._active:
            return
        self._active = True
        _logger.debug("Activating preview of %s", self._item.remote_path)
        self._overlay.activate(self._item, self._account)
        if self._services.settings.stop_background_audio:
            self._services.event_bus.emit(MEDIA_STOP_ALL, {"source": SOURCE_ID})
        self._play_video()

    def on_deactivate(self) -> None:
        if not self._active:
            return
        self._active = False
        _logger.debug("Deactivating preview of %s", self._item.remote_path)
        self._overlay.deactivate()
        self._presenter.dismiss()
        snapshot = self.on_save_state()
        self._controller.stop()
        self._apply_snapshot(snapshot)

    def on_save_state(self) -> Snapshot:
        snapshot = self._snapshots.capture(self._item, self._account, self._controller)
        self._snapshots.persist(snapshot)
        return snapshot

    def on_destroy(self) -> None:
        self.on_deactivate()

    # ------------------------------------------------------------- host events
    def on_pointer_event(self, event: PointerEvent) -> bool:
        return self._handoff.on_pointer_event(event, self._item, self._account)

    def toggle_playback(self) -> None:
        self._controller.toggle()

    def handle_action(self, action: PreviewAction) -> bool:
        return self._commands.handle(action, self._item)

    def menu_state(self, policy: Mapping[PreviewAction, ActionState]) -> Dict[PreviewAction, ActionState]:
        return filter_menu(policy)

    def on_file_metadata_changed(self, updated_item: Optional[MediaItem] = None) -> None:
        if updated_item is not None:
            self._item = updated_item
            self._overlay.rebind(updated_item)
            if not can_be_previewed(updated_item):
                _logger.warning("%s can no longer be previewed", updated_item.remote_path)
                self._controller.stop()
        if self._collaborators.invalidate_menu is not None:
            self._collaborators.invalidate_menu()

    def on_file_content_changed(self) -> None:
        if not self._active:
            return
        snapshot = self._snapshots.capture(self._item, self._account, self._controller)
        self._controller.stop()
        self._apply_snapshot(snapshot)
        self._play_video()

    def on_transfer_service_connected(self) -> None:
        if self._active:
            self._overlay.activate(self._item, self._account)

    def update_view_for_sync_in_progress(self) -> None:
        self._overlay.set_sync_in_progress(True)

    def update_view_for_sync_off(self) -> None:
        self._overlay.set_sync_in_progress(False)

    # ------------------------------------------------------------------ helpers
    def _play_video(self) -> None:
        if not can_be_previewed(self._item):
            _logger.warning("Not loading %s, no playable local copy", self._item.remote_path)
            return
        if self._controller.state in (PlaybackState.UNINITIALIZED, PlaybackState.COMPLETED, PlaybackState.ERROR):
            self._controller.load(self._item)

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        restored = self._snapshots.restore(snapshot)
        self._controller.set_resume_point(restored.position_ms, restored.autoplay)
