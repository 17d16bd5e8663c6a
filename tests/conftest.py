"""Fake collaborators shared by the preview tests."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import pytest

from syncview.core.config import ConfigStore
from syncview.core.services import PreviewServices
from syncview.plugins.video_preview.models import (
    AccountRef,
    HandoffRequest,
    HandoffResult,
    MediaItem,
    MediaKind,
    PlaybackEvent,
)
from syncview.plugins.video_preview.preview import PreviewCollaborators, VideoPreview


class FakeEngine:
    def __init__(self) -> None:
        self.source: Optional[str] = None
        self.listener: Optional[Callable[[PlaybackEvent], None]] = None
        self.prepare_calls = 0
        self.release_calls = 0
        self.seeks: List[int] = []
        self._position = 0
        self._playing = False

    def prepare(self, source: str, listener: Callable[[PlaybackEvent], None]) -> None:
        self.source = source
        self.listener = listener
        self.prepare_calls += 1
        self._position = 0
        self._playing = False

    def seek(self, position_ms: int) -> None:
        self.seeks.append(position_ms)
        self._position = position_ms

    def start(self) -> None:
        self._playing = True
        self.fire(PlaybackEvent.playing_changed(True))

    def pause(self) -> None:
        self._playing = False
        self.fire(PlaybackEvent.playing_changed(False))

    def release(self) -> None:
        self.release_calls += 1
        self.listener = None
        self._playing = False

    def position(self) -> int:
        return self._position

    def is_playing(self) -> bool:
        return self._playing

    # test helpers
    def fire(self, event: PlaybackEvent) -> None:
        if self.listener is not None:
            self.listener(event)

    def advance(self, ms: int) -> None:
        self._position += ms


class FakeControls:
    def __init__(self) -> None:
        self.enabled = False
        self.refreshes: List[bool] = []

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def refresh(self, playing: bool) -> None:
        self.refreshes.append(playing)


class FakeIndicator:
    def __init__(self) -> None:
        self.visible: Optional[bool] = None
        self.progress: Optional[int] = None
        self.calls: List[Tuple[str, Any]] = []

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        self.calls.append(("visible", visible))

    def set_progress(self, percent: int) -> None:
        self.progress = percent
        self.calls.append(("progress", percent))


class FakeDialog:
    def __init__(self) -> None:
        self.shown: List[Tuple[str, str, Callable[[], None]]] = []
        self.dismissals = 0

    def show_message(self, message: str, button_text: str, on_acknowledged: Callable[[], None]) -> None:
        self.shown.append((message, button_text, on_acknowledged))

    def dismiss(self) -> None:
        self.dismissals += 1

    def acknowledge(self, index: int = -1) -> None:
        self.shown[index][2]()


class FakeLauncher:
    def __init__(self) -> None:
        self.launches: List[Tuple[HandoffRequest, MediaItem, AccountRef, Callable]] = []

    def launch(self, request, item, account, on_finished) -> None:
        self.launches.append((request, item, account, on_finished))

    def finish(self, index: int, result: Optional[HandoffResult]) -> None:
        request, _item, _account, on_finished = self.launches[index]
        on_finished(request.request_id, result)


class FakeOperations:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Any]] = []

    def _record(self, name: str, item: MediaItem, extra: Any = None) -> None:
        self.calls.append((name, item.remote_path, extra))

    def share(self, item):
        self._record("share", item)

    def send(self, item):
        self._record("send", item)

    def open_with(self, item):
        self._record("open_with", item)

    def sync(self, item):
        self._record("sync", item)

    def toggle_favorite(self, item, favorite):
        self._record("toggle_favorite", item, favorite)

    def show_details(self, item):
        self._record("show_details", item)

    def remove(self, item):
        self._record("remove", item)


class FakeRemoveConfirmation:
    def __init__(self, approve: bool = True) -> None:
        self.approve = approve
        self.asked: List[str] = []

    def __call__(self, item: MediaItem, proceed: Callable[[], None]) -> None:
        self.asked.append(item.remote_path)
        if self.approve:
            proceed()


class QueueDispatcher:
    """Holds posted callbacks until drained, like an owner-thread event loop."""

    def __init__(self) -> None:
        self.queue: List[Callable[[], None]] = []

    def post(self, callback: Callable[[], None]) -> None:
        self.queue.append(callback)

    def drain(self) -> None:
        while self.queue:
            self.queue.pop(0)()


@pytest.fixture
def video_item(tmp_path: Path) -> MediaItem:
    local = tmp_path / "holiday.mp4"
    local.write_bytes(b"\x00" * 16)
    return MediaItem(remote_path="/Videos/holiday.mp4", local_path=str(local), kind=MediaKind.VIDEO, mime_type="video/mp4")


@pytest.fixture
def account() -> AccountRef:
    return AccountRef("alice@cloud.example.com")


@pytest.fixture
def services(tmp_path: Path) -> PreviewServices:
    return PreviewServices(data_dir=tmp_path / "data")


class PreviewKit:
    def __init__(self, attached: bool = True) -> None:
        self.engine = FakeEngine()
        self.controls = FakeControls()
        self.indicator = FakeIndicator()
        self.dialog = FakeDialog()
        self.launcher = FakeLauncher()
        self.operations = FakeOperations()
        self.confirm_remove = FakeRemoveConfirmation()
        self.attached = attached
        self.finished = 0
        self.menu_invalidations = 0

    def _finish(self) -> None:
        self.finished += 1

    def _invalidate(self) -> None:
        self.menu_invalidations += 1

    def collaborators(self, dispatcher=None) -> PreviewCollaborators:
        return PreviewCollaborators(
            engine=self.engine,
            controls=self.controls,
            indicator=self.indicator,
            dialog=self.dialog,
            launcher=self.launcher,
            operations=self.operations,
            confirm_remove=self.confirm_remove,
            is_attached=lambda: self.attached,
            dispatcher=dispatcher,
            finish=self._finish,
            invalidate_menu=self._invalidate,
        )


@pytest.fixture
def kit() -> PreviewKit:
    return PreviewKit()


@pytest.fixture
def make_preview(kit: PreviewKit, services: PreviewServices, video_item: MediaItem, account: AccountRef):
    def _make(position_ms: int = 0, autoplay: Optional[bool] = True, **kwargs: Any) -> VideoPreview:
        return VideoPreview(
            kwargs.pop("item", video_item),
            kwargs.pop("account", account),
            kwargs.pop("services", services),
            kit.collaborators(kwargs.pop("dispatcher", None)),
            position_ms=position_ms,
            autoplay=autoplay,
        )

    return _make


@pytest.fixture
def queue_dispatcher() -> QueueDispatcher:
    return QueueDispatcher()


@pytest.fixture
def remembering_services(tmp_path: Path) -> PreviewServices:
    data_dir = tmp_path / "remembering"
    ConfigStore(data_dir / "config.json").update_section("video_preview", {"remember_position": True})
    return PreviewServices(data_dir=data_dir)
