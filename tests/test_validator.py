from __future__ import annotations

import pytest

from syncview.core.errors import InvalidStateError
from syncview.plugins.video_preview.models import AccountRef, MediaItem, MediaKind
from syncview.plugins.video_preview.validator import can_be_previewed, validate_preview_target

ACCOUNT = AccountRef("bob@cloud.example.com")


def _item(local: bool, kind: MediaKind) -> MediaItem:
    return MediaItem(
        remote_path="/Videos/clip.mp4",
        local_path="/tmp/clip.mp4" if local else None,
        kind=kind,
    )


@pytest.mark.parametrize("local", [True, False])
@pytest.mark.parametrize("kind", list(MediaKind))
def test_can_be_previewed_requires_local_video(local: bool, kind: MediaKind) -> None:
    assert can_be_previewed(_item(local, kind)) is (local and kind is MediaKind.VIDEO)


def test_can_be_previewed_rejects_missing_item() -> None:
    assert can_be_previewed(None) is False


@pytest.mark.parametrize(
    "item, account, reason",
    [
        (None, ACCOUNT, "missing media item"),
        (_item(True, MediaKind.VIDEO), None, "missing account"),
        (_item(False, MediaKind.VIDEO), ACCOUNT, "no local file"),
        (_item(True, MediaKind.OTHER), ACCOUNT, "Not a video"),
    ],
)
def test_validate_preview_target_rejects(item, account, reason: str) -> None:
    with pytest.raises(InvalidStateError, match=reason):
        validate_preview_target(item, account)


def test_validate_preview_target_accepts_downloaded_video() -> None:
    item = _item(True, MediaKind.VIDEO)
    assert validate_preview_target(item, ACCOUNT) == (item, ACCOUNT)


def test_media_kind_inference() -> None:
    assert MediaKind.infer("movie.MKV") is MediaKind.VIDEO
    assert MediaKind.infer("notes.txt") is MediaKind.OTHER
    # mime type wins over the extension
    assert MediaKind.infer("movie.bin", "video/quicktime") is MediaKind.VIDEO
    assert MediaKind.infer("movie.mp4", "audio/mpeg") is MediaKind.OTHER


def test_media_item_from_local_file(tmp_path) -> None:
    path = tmp_path / "trip.mov"
    path.write_bytes(b"")
    item = MediaItem.from_local_file(path, remote_path="/Shared/trip.mov")
    assert item.is_locally_available
    assert item.is_video
    assert item.name == "trip.mov"
    assert MediaItem.from_dict(item.to_dict()) == item
