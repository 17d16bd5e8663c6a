from __future__ import annotations

import pytest

from syncview.core.config import ConfigStore
from syncview.plugins.video_preview.error_presenter import ErrorPresenter
from syncview.plugins.video_preview.lifecycle import PlaybackLifecycleController
from syncview.plugins.video_preview.models import (
    KEY_ACCOUNT,
    KEY_FILE,
    KEY_PLAY_POSITION,
    KEY_PLAYING,
    MediaItem,
    PlaybackEvent,
    PlaybackSession,
    Snapshot,
)
from syncview.plugins.video_preview.snapshot import SNAPSHOT_SECTION, StateSnapshotManager


def _controller(kit, session: PlaybackSession) -> PlaybackLifecycleController:
    return PlaybackLifecycleController(kit.engine, kit.controls, ErrorPresenter(kit.dialog, lambda: True), session=session)


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    return ConfigStore(tmp_path / "config.json")


def test_capture_reads_live_engine(kit, video_item, account) -> None:
    controller = _controller(kit, PlaybackSession(position_ms=1_000, autoplay=True))
    controller.load(video_item)
    kit.engine.fire(PlaybackEvent.prepared())
    kit.engine.advance(41_000)
    controller.pause()

    snapshot = StateSnapshotManager().capture(video_item, account, controller)
    assert snapshot == Snapshot(video_item, account, position_ms=42_000, autoplay=False)


def test_capture_before_prepare_uses_session(kit, video_item, account) -> None:
    controller = _controller(kit, PlaybackSession(position_ms=8_000, autoplay=False))
    controller.load(video_item)

    snapshot = StateSnapshotManager().capture(video_item, account, controller)
    assert (snapshot.position_ms, snapshot.autoplay) == (8_000, False)


@pytest.mark.parametrize("position_ms, autoplay", [(0, True), (5_000, False), (123_456, True)])
def test_restore_is_inverse_of_capture(kit, video_item, account, position_ms, autoplay) -> None:
    manager = StateSnapshotManager()
    session = manager.restore(Snapshot(video_item, account, position_ms, autoplay))
    assert (session.position_ms, session.autoplay) == (position_ms, autoplay)
    assert session.is_prepared is False

    controller = _controller(kit, session)
    again = manager.capture(video_item, account, controller)
    assert (again.position_ms, again.autoplay) == (position_ms, autoplay)


def test_snapshot_state_uses_well_known_keys(video_item, account) -> None:
    state = Snapshot(video_item, account, 2_500, False).to_state()
    assert set(state) == {KEY_FILE, KEY_ACCOUNT, KEY_PLAY_POSITION, KEY_PLAYING}
    assert state[KEY_PLAY_POSITION] == 2_500
    assert state[KEY_PLAYING] is False
    assert Snapshot.from_state(state) == Snapshot(video_item, account, 2_500, False)


def test_persisted_snapshot_survives_reopen(store, video_item, account) -> None:
    StateSnapshotManager(store).persist(Snapshot(video_item, account, 9_000, True))

    reopened = ConfigStore(store.path)
    loaded = StateSnapshotManager(reopened).load_persisted(video_item, account)
    assert loaded == Snapshot(video_item, account, 9_000, True)


def test_persisted_snapshot_keeps_current_item(store, video_item, account) -> None:
    manager = StateSnapshotManager(store)
    manager.persist(Snapshot(video_item, account, 9_000, True))

    favorited = MediaItem(
        remote_path=video_item.remote_path,
        local_path=video_item.local_path,
        kind=video_item.kind,
        favorite=True,
    )
    assert manager.load_persisted(favorited, account).item is favorited


def test_forget_removes_entry(store, video_item, account) -> None:
    manager = StateSnapshotManager(store)
    manager.persist(Snapshot(video_item, account, 9_000, True))
    manager.forget(video_item, account)
    manager.forget(video_item, account)

    assert manager.load_persisted(video_item, account) is None


def test_unreadable_entry_is_discarded(store, video_item, account) -> None:
    store.update_section(SNAPSHOT_SECTION, {f"{account.name}:{video_item.remote_path}": {KEY_FILE: "garbage"}})

    assert StateSnapshotManager(store).load_persisted(video_item, account) is None


def test_without_store_nothing_is_persisted(video_item, account) -> None:
    manager = StateSnapshotManager()
    manager.persist(Snapshot(video_item, account, 9_000, True))
    assert manager.load_persisted(video_item, account) is None
