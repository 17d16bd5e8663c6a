from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QUrl  # type: ignore[import-not-found]
from PySide6.QtGui import QDesktopServices, QGuiApplication  # type: ignore[import-not-found]
from PySide6.QtWidgets import QMessageBox, QWidget  # type: ignore[import-not-found]
from send2trash import send2trash

from ...core.services import PreviewServices
from .models import MediaItem

_logger = logging.getLogger("SyncView.FileOperations")

SYNC_REQUESTED = "transfer.sync_requested"
FAVORITE_CHANGED = "files.favorite_changed"
FILES_REMOVED = "files.removed"
SOURCE_ID = "video_preview"


class LocalFileOperations:
    """File commands for a standalone desktop host without a file browser.

    Sync and favourite changes are forwarded to the transfer service over the
    event bus; everything else acts on the local copy directly.
    """

    def __init__(self, services: PreviewServices) -> None:
        self._services = services

    def _copy_location(self, item: MediaItem) -> None:
        clipboard = QGuiApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(str(item.local_path or item.remote_path))
        self._services.send_notification(
            f"Pfad von {item.name} in die Zwischenablage kopiert", source=SOURCE_ID
        )

    def share(self, item: MediaItem) -> None:
        self._copy_location(item)

    def send(self, item: MediaItem) -> None:
        self._copy_location(item)

    def open_with(self, item: MediaItem) -> None:
        if not item.local_path:
            return
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(item.local_path)):
            self._services.send_notification(
                f"Keine Anwendung zum Öffnen von {item.name} gefunden", level="warning", source=SOURCE_ID
            )

    def sync(self, item: MediaItem) -> None:
        self._services.event_bus.emit(SYNC_REQUESTED, {"remote_path": item.remote_path})

    def toggle_favorite(self, item: MediaItem, favorite: bool) -> None:
        self._services.event_bus.emit(
            FAVORITE_CHANGED, {"remote_path": item.remote_path, "favorite": favorite}
        )

    def show_details(self, item: MediaItem) -> None:
        size = ""
        if item.local_path and Path(item.local_path).exists():
            size = f", {Path(item.local_path).stat().st_size // 1024} KB"
        self._services.send_notification(f"{item.remote_path}{size}", source=SOURCE_ID)

    def remove(self, item: MediaItem) -> None:
        if not item.local_path:
            return
        try:
            send2trash(str(item.local_path))
        except OSError as exc:
            _logger.error("Failed to remove %s: %s", item.local_path, exc)
            self._services.send_notification(f"Fehler beim Löschen: {exc}", level="error", source=SOURCE_ID)
            return
        self._services.event_bus.emit(FILES_REMOVED, {"paths": [item.remote_path]})
        self._services.send_notification(f"{item.name} in Papierkorb verschoben", source=SOURCE_ID)


def ask_remove_confirmation(parent: Optional[QWidget]) -> Callable[[MediaItem, Callable[[], None]], None]:
    """Return a non-blocking confirmation step that asks before a file is removed."""
    open_boxes: List[QMessageBox] = []

    def _confirm(item: MediaItem, proceed: Callable[[], None]) -> None:
        box = QMessageBox(
            QMessageBox.Icon.Question,
            "Löschen bestätigen",
            f"Möchten Sie '{item.name}' wirklich löschen?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            parent,
        )
        open_boxes.append(box)

        def _on_finished(_result: int) -> None:
            open_boxes.remove(box)
            if box.clickedButton() is box.button(QMessageBox.StandardButton.Yes):
                proceed()
            box.deleteLater()

        box.finished.connect(_on_finished)
        box.open()

    return _confirm
