"""Qt Multimedia implementation of the playback engine used by inline previews."""
from __future__ import annotations

import logging
from typing import Any, Optional

from PySide6.QtCore import QObject, QUrl  # type: ignore[import-not-found]
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer  # type: ignore[import-not-found]

from .error_presenter import ERROR_IO, ERROR_UNKNOWN, ERROR_UNSUPPORTED
from .lifecycle import EngineListener
from .models import PlaybackEvent

_logger = logging.getLogger("SyncView.Engine")

_ERROR_SUBCODES = {
    QMediaPlayer.Error.ResourceError: ERROR_IO,
    QMediaPlayer.Error.FormatError: ERROR_UNSUPPORTED,
    QMediaPlayer.Error.NetworkError: ERROR_IO,
    QMediaPlayer.Error.AccessDeniedError: ERROR_IO,
}


class QtPlaybackEngine(QObject):
    """Wraps a QMediaPlayer and reports its lifecycle as PlaybackEvents.

    Only one listener is attached at a time; ``release`` detaches it before
    stopping so that the teardown itself produces no events.
    """

    def __init__(self, video_output: Any = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._player = QMediaPlayer(self)
        self._audio_output = QAudioOutput(self)
        self._player.setAudioOutput(self._audio_output)
        if video_output is not None:
            self._player.setVideoOutput(video_output)
        self._listener: Optional[EngineListener] = None
        self._prepared_sent = False

        self._player.mediaStatusChanged.connect(self._on_media_status_changed)
        self._player.playbackStateChanged.connect(self._on_playback_state_changed)
        self._player.errorOccurred.connect(self._on_error)

    @property
    def player(self) -> QMediaPlayer:
        return self._player

    def prepare(self, source: str, listener: EngineListener) -> None:
        self._listener = listener
        self._prepared_sent = False
        self._player.setSource(QUrl.fromLocalFile(source))

    def seek(self, position_ms: int) -> None:
        self._player.setPosition(int(position_ms))

    def start(self) -> None:
        self._player.play()

    def pause(self) -> None:
        self._player.pause()

    def release(self) -> None:
        self._listener = None
        self._prepared_sent = False
        self._player.stop()
        self._player.setSource(QUrl())

    def position(self) -> int:
        return int(self._player.position())

    def is_playing(self) -> bool:
        return self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState

    # ---------------------------------------------------------------- Qt slots
    def _emit(self, event: PlaybackEvent) -> None:
        listener = self._listener
        if listener is not None:
            listener(event)

    def _on_media_status_changed(self, status: QMediaPlayer.MediaStatus) -> None:
        if status in (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia):
            if not self._prepared_sent:
                self._prepared_sent = True
                self._emit(PlaybackEvent.prepared())
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._emit(PlaybackEvent.completed())

    def _on_playback_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        self._emit(PlaybackEvent.playing_changed(state == QMediaPlayer.PlaybackState.PlayingState))

    def _on_error(self, error: QMediaPlayer.Error, error_string: str = "") -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        _logger.error("Media player error %s: %s", error, error_string)
        self._emit(PlaybackEvent.error(ERROR_UNKNOWN, _ERROR_SUBCODES.get(error, 0)))
