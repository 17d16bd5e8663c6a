"""Full-screen viewer that takes over playback from an inline preview.

The window receives a :class:`HandoffRequest` (start position, autoplay), plays
the file on its own player and reports a :class:`HandoffResult` when the user
leaves it. Nothing else is shared with the inline preview.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtCore import QTimer, QUrl, Qt, Signal  # type: ignore[import-not-found]
from PySide6.QtGui import QKeyEvent, QMouseEvent  # type: ignore[import-not-found]
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer  # type: ignore[import-not-found]
from PySide6.QtMultimediaWidgets import QVideoWidget  # type: ignore[import-not-found]
from PySide6.QtWidgets import (  # type: ignore[import-not-found]
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from .handoff import HandoffCallback
from .models import AccountRef, HandoffRequest, HandoffResult, MediaItem

_logger = logging.getLogger("SyncView.Fullscreen")


def format_time(ms: int) -> str:
    """Format milliseconds to M:SS."""
    seconds = max(0, ms) // 1000
    return f"{seconds // 60}:{seconds % 60:02d}"


class FullscreenVideoWindow(QWidget):
    """Frameless full-screen player.

    Keyboard shortcuts: ESC leaves, Space toggles play/pause, F11 toggles
    full screen. Controls hide after 3s without mouse movement.
    """

    handoff_finished = Signal(int, object)  # request_id, HandoffResult or None

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._request: Optional[HandoffRequest] = None
        self._start_applied = False
        self._failed = False
        self._reported = False

        self._player = QMediaPlayer(self)
        self._audio_output = QAudioOutput(self)
        self._player.setAudioOutput(self._audio_output)
        self._video_widget = QVideoWidget(self)
        self._player.setVideoOutput(self._video_widget)

        self._controls_hide_timer = QTimer(self)
        self._controls_hide_timer.setSingleShot(True)
        self._controls_hide_timer.timeout.connect(self._hide_controls)

        self._setup_ui()
        self.setMouseTracking(True)
        self.setWindowFlags(Qt.WindowType.Window | Qt.WindowType.FramelessWindowHint)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        self._video_widget.setStyleSheet("background-color: #000000;")
        layout.addWidget(self._video_widget, stretch=1)

        self._controls_frame = QFrame(self)
        self._controls_frame.setStyleSheet(
            "QFrame { background-color: rgba(0, 0, 0, 180); }"
            "QPushButton { background-color: transparent; color: #ffffff; border: none; padding: 8px 16px; }"
            "QLabel { color: #ffffff; }"
        )
        controls = QHBoxLayout(self._controls_frame)
        controls.setContentsMargins(20, 10, 20, 10)

        self._play_pause_button = QPushButton("▶ Abspielen")
        self._play_pause_button.clicked.connect(self.toggle_play_pause)
        controls.addWidget(self._play_pause_button)

        self._position_label = QLabel("0:00")
        controls.addWidget(self._position_label)
        self._progress_slider = QSlider(Qt.Orientation.Horizontal)
        self._progress_slider.setRange(0, 0)
        self._progress_slider.sliderMoved.connect(self._player.setPosition)
        controls.addWidget(self._progress_slider, stretch=1)
        self._duration_label = QLabel("0:00")
        controls.addWidget(self._duration_label)

        exit_button = QPushButton("✖ Schließen (ESC)")
        exit_button.clicked.connect(self.close)
        controls.addWidget(exit_button)
        layout.addWidget(self._controls_frame)

        self._player.positionChanged.connect(self._update_position)
        self._player.durationChanged.connect(self._update_duration)
        self._player.playbackStateChanged.connect(self._update_play_button)
        self._player.mediaStatusChanged.connect(self._on_media_status_changed)
        self._player.errorOccurred.connect(self._on_error)

    @property
    def request(self) -> Optional[HandoffRequest]:
        return self._request

    def open_request(self, request: HandoffRequest, item: MediaItem) -> None:
        self._request = request
        self._start_applied = False
        self.setWindowTitle(item.name)
        self._player.setSource(QUrl.fromLocalFile(str(item.local_path)))
        self.showFullScreen()
        self._reset_controls_timer()

    def result(self) -> Optional[HandoffResult]:
        if self._failed or not self._start_applied:
            return None
        playing = self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState
        return HandoffResult(position_ms=int(self._player.position()), is_playing=playing)

    def toggle_play_pause(self) -> None:
        if self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState:
            self._player.pause()
        else:
            self._player.play()

    def _on_media_status_changed(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.LoadedMedia and not self._start_applied and self._request:
            self._start_applied = True
            self._player.setPosition(self._request.position_ms)
            if self._request.autoplay:
                self._player.play()
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._player.setPosition(0)

    def _on_error(self, error: QMediaPlayer.Error, error_string: str = "") -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        _logger.error("Full-screen playback failed: %s", error_string)
        self._failed = True

    def _update_play_button(self, state: QMediaPlayer.PlaybackState) -> None:
        if state == QMediaPlayer.PlaybackState.PlayingState:
            self._play_pause_button.setText("⏸ Pause")
        else:
            self._play_pause_button.setText("▶ Abspielen")

    def _update_position(self, position: int) -> None:
        self._progress_slider.setValue(position)
        self._position_label.setText(format_time(position))

    def _update_duration(self, duration: int) -> None:
        self._progress_slider.setRange(0, max(0, duration))
        self._duration_label.setText(format_time(duration))

    def _report(self) -> None:
        if self._reported or self._request is None:
            return
        self._reported = True
        result = self.result()
        self._player.stop()
        self.handoff_finished.emit(self._request.request_id, result)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._reset_controls_timer()
        super().mouseMoveEvent(event)

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        key = event.key()
        if key == Qt.Key.Key_Escape:
            self.close()
        elif key == Qt.Key.Key_Space:
            self.toggle_play_pause()
        elif key == Qt.Key.Key_F11:
            if self.isFullScreen():
                self.showNormal()
            else:
                self.showFullScreen()
        else:
            super().keyPressEvent(event)

    def _hide_controls(self) -> None:
        self._controls_frame.setVisible(False)

    def _reset_controls_timer(self) -> None:
        self._controls_hide_timer.stop()
        self._controls_frame.setVisible(True)
        self._controls_hide_timer.start(3000)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._controls_hide_timer.stop()
        self._report()
        super().closeEvent(event)


class QtFullscreenLauncher:
    """Opens one :class:`FullscreenVideoWindow` per handoff request."""

    def __init__(self) -> None:
        self._windows: List[FullscreenVideoWindow] = []

    @property
    def open_windows(self) -> List[FullscreenVideoWindow]:
        return list(self._windows)

    def launch(
        self,
        request: HandoffRequest,
        item: MediaItem,
        account: AccountRef,
        on_finished: HandoffCallback,
    ) -> None:
        window = FullscreenVideoWindow()
        self._windows.append(window)

        def _finished(request_id: int, result: object) -> None:
            if window in self._windows:
                self._windows.remove(window)
            on_finished(request_id, result if isinstance(result, HandoffResult) else None)

        window.handoff_finished.connect(_finished)
        _logger.debug("Opening full screen for %s (%s)", item.remote_path, account)
        window.open_request(request, item)
