from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QEvent, QObject, Qt, Signal  # type: ignore[import-not-found]
from PySide6.QtGui import QCloseEvent, QContextMenuEvent, QHideEvent, QShowEvent  # type: ignore[import-not-found]
from PySide6.QtMultimediaWidgets import QVideoWidget  # type: ignore[import-not-found]
from PySide6.QtWidgets import (  # type: ignore[import-not-found]
    QHBoxLayout,
    QLabel,
    QMenu,
    QMessageBox,
    QProgressBar,
    QSlider,
    QStyle,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from ...core.dispatch import QtDispatcher
from ...core.services import PreviewServices
from .commands import ActionState, FileOperations, PreviewAction
from .engine import QtPlaybackEngine
from .file_operations import LocalFileOperations, ask_remove_confirmation
from .fullscreen import QtFullscreenLauncher, format_time
from .handoff import HandoffCallback, PointerEvent, PointerPhase
from .models import AccountRef, HandoffRequest, HandoffResult, MediaItem, Snapshot
from .preview import PreviewCollaborators, VideoPreview
from .validator import validate_preview_target

_logger = logging.getLogger("SyncView.PreviewWidget")

ACTION_LABELS = {
    PreviewAction.SHARE: "Teilen",
    PreviewAction.SEND: "Senden",
    PreviewAction.OPEN_WITH: "Öffnen mit…",
    PreviewAction.SYNC: "Synchronisieren",
    PreviewAction.FAVORITE: "Als Favorit markieren",
    PreviewAction.UNFAVORITE: "Favorit entfernen",
    PreviewAction.DETAILS: "Details",
    PreviewAction.REMOVE: "Löschen",
    PreviewAction.RENAME: "Umbenennen",
    PreviewAction.MOVE: "Verschieben",
    PreviewAction.COPY: "Kopieren",
}


class QtConfirmationDialog:
    """Non-cancelable, window-modal message with a single button."""

    def __init__(self, parent: QWidget) -> None:
        self._parent = parent
        self._open: List[QMessageBox] = []

    def show_message(self, message: str, button_text: str, on_acknowledged: Callable[[], None]) -> None:
        box = QMessageBox(self._parent)
        box.setIcon(QMessageBox.Icon.Warning)
        box.setWindowTitle("Wiedergabefehler")
        box.setText(message)
        button = box.addButton(button_text, QMessageBox.ButtonRole.AcceptRole)
        box.setDefaultButton(button)
        box.setEscapeButton(button)
        box.setWindowFlag(Qt.WindowType.WindowCloseButtonHint, False)
        box.setWindowModality(Qt.WindowModality.WindowModal)
        self._open.append(box)

        def _on_finished(_result: int) -> None:
            self._open.remove(box)
            box.deleteLater()
            on_acknowledged()

        box.finished.connect(_on_finished)
        box.open()

    def dismiss(self) -> None:
        for box in list(self._open):
            box.done(0)


class _TransportControls:
    def __init__(self, play_button: QToolButton, slider: QSlider, style: QStyle) -> None:
        self._play_button = play_button
        self._slider = slider
        self._style = style

    def set_enabled(self, enabled: bool) -> None:
        self._play_button.setEnabled(enabled)
        self._slider.setEnabled(enabled)

    def refresh(self, playing: bool) -> None:
        icon = QStyle.StandardPixmap.SP_MediaPause if playing else QStyle.StandardPixmap.SP_MediaPlay
        self._play_button.setIcon(self._style.standardIcon(icon))
        self._play_button.setToolTip("Pausieren" if playing else "Abspielen")


class _SyncIndicator:
    def __init__(self, bar: QProgressBar) -> None:
        self._bar = bar

    def set_visible(self, visible: bool) -> None:
        self._bar.setVisible(visible)

    def set_progress(self, percent: int) -> None:
        self._bar.setValue(percent)


class _PreviewLauncher:
    """Stops the inline preview while a full-screen window owns playback."""

    def __init__(self, widget: "VideoPreviewWidget") -> None:
        self._widget = widget
        self.fullscreen = QtFullscreenLauncher()

    def launch(
        self,
        request: HandoffRequest,
        item: MediaItem,
        account: AccountRef,
        on_finished: HandoffCallback,
    ) -> None:
        self._widget.begin_fullscreen()

        def _finished(request_id: int, result: Optional[HandoffResult]) -> None:
            on_finished(request_id, result)
            self._widget.end_fullscreen()

        self.fullscreen.launch(request, item, account, _finished)


class VideoPreviewWidget(QWidget):
    """Hosts a :class:`VideoPreview` inside the file browser.

    Qt show/hide/close events are mapped onto the preview's lifecycle hooks; a
    mouse press on the video surface goes to the full-screen handoff.
    """

    finished = Signal()
    status_message = Signal(str)

    def __init__(
        self,
        item: Optional[MediaItem],
        account: Optional[AccountRef],
        services: PreviewServices,
        position_ms: int = 0,
        autoplay: Optional[bool] = None,
        operations: Optional[FileOperations] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        # nothing is built for an item that cannot be previewed
        validate_preview_target(item, account)
        super().__init__(parent)
        self.setObjectName("videoPreview")
        self._services = services

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.sync_progress = QProgressBar(self)
        self.sync_progress.setRange(0, 100)
        self.sync_progress.setTextVisible(False)
        self.sync_progress.setMaximumHeight(4)
        self.sync_progress.setVisible(False)
        layout.addWidget(self.sync_progress)

        self.video_widget = QVideoWidget(self)
        self.video_widget.installEventFilter(self)
        layout.addWidget(self.video_widget, stretch=1)

        controls_row = QHBoxLayout()
        controls_row.setContentsMargins(8, 4, 8, 4)
        self.play_button = QToolButton(self)
        self.play_button.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_MediaPlay))
        self.play_button.setEnabled(False)
        controls_row.addWidget(self.play_button)
        self.position_slider = QSlider(Qt.Orientation.Horizontal, self)
        self.position_slider.setRange(0, 0)
        self.position_slider.setEnabled(False)
        controls_row.addWidget(self.position_slider, stretch=1)
        self.time_label = QLabel("0:00 / 0:00", self)
        controls_row.addWidget(self.time_label)
        layout.addLayout(controls_row)

        self._dispatcher = QtDispatcher(self)
        self.engine = QtPlaybackEngine(self.video_widget, self)
        self.launcher = _PreviewLauncher(self)
        self._fullscreen_open = 0
        collaborators = PreviewCollaborators(
            engine=self.engine,
            controls=_TransportControls(self.play_button, self.position_slider, self.style()),
            indicator=_SyncIndicator(self.sync_progress),
            dialog=QtConfirmationDialog(self),
            launcher=self.launcher,
            operations=operations or LocalFileOperations(services),
            confirm_remove=ask_remove_confirmation(self),
            is_attached=self.isVisible,
            dispatcher=self._dispatcher,
            finish=self.close,
            invalidate_menu=self._invalidate_menu,
        )
        self.preview = VideoPreview(item, account, services, collaborators, position_ms, autoplay)
        self._menu_dirty = True

        self.play_button.clicked.connect(self.preview.toggle_playback)
        self.position_slider.sliderMoved.connect(self.engine.seek)
        self.engine.player.positionChanged.connect(self._on_position_changed)
        self.engine.player.durationChanged.connect(self._on_duration_changed)
        services.notifications.subscribe(self._on_notification)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Snapshot,
        services: PreviewServices,
        operations: Optional[FileOperations] = None,
        parent: Optional[QWidget] = None,
    ) -> "VideoPreviewWidget":
        return cls(
            snapshot.item,
            snapshot.account,
            services,
            position_ms=snapshot.position_ms,
            autoplay=snapshot.autoplay,
            operations=operations,
            parent=parent,
        )

    # ---------------------------------------------------------- lifecycle mapping
    def showEvent(self, event: QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        if not self._fullscreen_open:
            self.preview.on_activate()

    def hideEvent(self, event: QHideEvent) -> None:  # type: ignore[override]
        self.preview.on_deactivate()
        super().hideEvent(event)

    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        self.preview.on_destroy()
        self._services.notifications.unsubscribe(self._on_notification)
        self.finished.emit()
        super().closeEvent(event)

    def save_state(self) -> Snapshot:
        return self.preview.on_save_state()

    def begin_fullscreen(self) -> None:
        self._fullscreen_open += 1
        self.preview.on_deactivate()

    def end_fullscreen(self) -> None:
        self._fullscreen_open = max(0, self._fullscreen_open - 1)
        if not self._fullscreen_open and self.isVisible():
            self.preview.on_activate()

    # ---------------------------------------------------------------- input
    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if (
            watched is self.video_widget
            and event.type() == QEvent.Type.MouseButtonPress
            and event.button() == Qt.MouseButton.LeftButton
        ):
            # Qt positions are already density independent
            pointer = PointerEvent(PointerPhase.DOWN, float(event.position().x()))
            self.preview.on_pointer_event(pointer)
            return True
        return super().eventFilter(watched, event)

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:  # type: ignore[override]
        menu = self.build_menu()
        menu.exec(event.globalPos())

    def build_menu(self) -> QMenu:
        item = self.preview.item
        policy = {action: ActionState() for action in PreviewAction}
        policy[PreviewAction.FAVORITE] = ActionState(visible=not item.favorite)
        policy[PreviewAction.UNFAVORITE] = ActionState(visible=item.favorite)
        menu = QMenu(self)
        for action, state in self.preview.menu_state(policy).items():
            entry = menu.addAction(ACTION_LABELS[action])
            entry.setVisible(state.visible)
            entry.setEnabled(state.enabled)
            entry.triggered.connect(lambda _checked=False, a=action: self.preview.handle_action(a))
        self._menu_dirty = False
        return menu

    @property
    def menu_dirty(self) -> bool:
        return self._menu_dirty

    def _invalidate_menu(self) -> None:
        self._menu_dirty = True

    # --------------------------------------------------------------- display
    def _on_position_changed(self, position: int) -> None:
        if not self.position_slider.isSliderDown():
            self.position_slider.setValue(position)
        self.time_label.setText(f"{format_time(position)} / {format_time(self.position_slider.maximum())}")

    def _on_duration_changed(self, duration: int) -> None:
        self.position_slider.setRange(0, max(0, duration))

    def _on_notification(self, notification) -> None:
        self.status_message.emit(notification.message)
