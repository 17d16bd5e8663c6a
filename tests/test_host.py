from __future__ import annotations

import pytest

from syncview.core.host import ViewHost
from syncview.core.view_base import ViewLifecycle, ViewState
from syncview.plugins.video_preview.models import PlaybackEvent, PlaybackState
from syncview.plugins.video_preview.preview import VideoPreview


class BrokenView(ViewLifecycle):
    def on_activate(self) -> None:
        raise RuntimeError("no surface")

    def on_deactivate(self) -> None:
        pass


def test_failing_view_is_marked_failed() -> None:
    host = ViewHost()
    host.add("broken", BrokenView())

    assert host.activate("broken") is ViewState.FAILED
    assert host.get("broken").error == "no surface"


def test_duplicate_key_is_rejected() -> None:
    host = ViewHost()
    host.add("a", BrokenView())
    with pytest.raises(KeyError):
        host.add("a", BrokenView())


def test_recreate_requires_factory() -> None:
    host = ViewHost()
    host.add("a", BrokenView())
    with pytest.raises(RuntimeError):
        host.recreate("a")


def test_recreate_preserves_position_and_play_state(make_preview, kit, services) -> None:
    def factory(snapshot):
        return VideoPreview.from_snapshot(snapshot, services, kit.collaborators())

    host = ViewHost()
    host.add("preview", make_preview(position_ms=0, autoplay=True), factory)
    host.activate("preview")
    kit.engine.fire(PlaybackEvent.prepared())
    kit.engine.advance(15_000)

    record = host.recreate("preview")
    assert record.state is ViewState.ACTIVE
    assert record.saved_state.position_ms == 15_000
    assert record.saved_state.autoplay is True

    kit.engine.fire(PlaybackEvent.prepared())
    assert kit.engine.seeks[-1] == 15_000
    assert record.view.state is PlaybackState.PLAYING


def test_recreate_inactive_view_stays_inactive(make_preview, kit, services) -> None:
    def factory(snapshot):
        return VideoPreview.from_snapshot(snapshot, services, kit.collaborators())

    host = ViewHost()
    host.add("preview", make_preview(position_ms=4_000, autoplay=False), factory)

    record = host.recreate("preview")
    assert record.state is ViewState.CREATED
    assert (record.view.session.position_ms, record.view.session.autoplay) == (4_000, False)
    assert kit.engine.prepare_calls == 0


def test_shutdown_destroys_everything(make_preview, kit) -> None:
    host = ViewHost()
    host.add("preview", make_preview())
    host.activate("preview")
    host.shutdown()

    assert list(host.iter_views()) == []
    assert kit.engine.release_calls == 1
