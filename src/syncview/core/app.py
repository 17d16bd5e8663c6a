from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication, QMainWindow, QMessageBox  # type: ignore[import-not-found]

from ..plugins.video_preview.models import AccountRef, MediaItem
from ..plugins.video_preview.validator import can_be_previewed
from ..plugins.video_preview.widget import VideoPreviewWidget
from .services import PreviewServices

_logger = logging.getLogger("SyncView.App")


class PreviewWindow(QMainWindow):
    def __init__(self, preview: VideoPreviewWidget) -> None:
        super().__init__()
        self.setWindowTitle(f"SyncView – {preview.preview.item.name}")
        self.resize(960, 600)
        self.setCentralWidget(preview)
        preview.status_message.connect(lambda message: self.statusBar().showMessage(message, 5000))
        preview.finished.connect(self.close)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="syncview-preview", description="Preview a synced video file.")
    parser.add_argument("file", type=Path, help="local copy of the video")
    parser.add_argument("--account", required=True, help="account owning the file")
    parser.add_argument("--remote-path", default=None, help="path of the file on the server")
    parser.add_argument("--position", type=int, default=0, help="start position in milliseconds")
    parser.add_argument("--paused", action="store_true", help="do not start playback automatically")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app = QApplication(sys.argv[:1])
    services = PreviewServices()

    path = args.file.resolve()
    item = MediaItem.from_local_file(path, remote_path=args.remote_path) if path.exists() else None
    if not can_be_previewed(item):
        QMessageBox.critical(None, "SyncView", f"{args.file} kann nicht als Video angezeigt werden.")
        return 2

    preview = VideoPreviewWidget(
        item,
        AccountRef(args.account),
        services,
        position_ms=max(0, args.position),
        autoplay=False if args.paused else None,
    )
    window = PreviewWindow(preview)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
