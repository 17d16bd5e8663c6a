from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

VIDEO_EXTENSIONS = (".mp4", ".m4v", ".avi", ".mkv", ".mov", ".webm", ".3gp", ".mpg", ".mpeg", ".wmv")

# Keys of the persisted snapshot mapping
KEY_FILE = "FILE"
KEY_ACCOUNT = "ACCOUNT"
KEY_PLAY_POSITION = "PLAY_POSITION"
KEY_PLAYING = "PLAYING"


class MediaKind(enum.Enum):
    VIDEO = "video"
    OTHER = "other"

    @classmethod
    def infer(cls, name: str, mime_type: str = "") -> "MediaKind":
        if mime_type:
            return cls.VIDEO if mime_type.lower().startswith("video/") else cls.OTHER
        if Path(name).suffix.lower() in VIDEO_EXTENSIONS:
            return cls.VIDEO
        return cls.OTHER


@dataclass(frozen=True)
class MediaItem:
    """Reference to a synced file.

    Never mutated: metadata updates from the sync layer produce a new instance.
    ``local_path`` is set only once the file content has been downloaded.
    """

    remote_path: str
    local_path: Optional[str] = None
    kind: MediaKind = MediaKind.OTHER
    mime_type: str = ""
    favorite: bool = False

    @property
    def is_locally_available(self) -> bool:
        return bool(self.local_path)

    @property
    def is_video(self) -> bool:
        return self.kind is MediaKind.VIDEO

    @property
    def name(self) -> str:
        return Path(self.remote_path).name

    @classmethod
    def from_local_file(cls, path: Path, remote_path: Optional[str] = None, mime_type: str = "") -> "MediaItem":
        return cls(
            remote_path=remote_path or f"/{path.name}",
            local_path=str(path),
            kind=MediaKind.infer(path.name, mime_type),
            mime_type=mime_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "remote_path": self.remote_path,
            "local_path": self.local_path,
            "kind": self.kind.value,
            "mime_type": self.mime_type,
            "favorite": self.favorite,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaItem":
        return cls(
            remote_path=str(data["remote_path"]),
            local_path=data.get("local_path"),
            kind=MediaKind(data.get("kind", MediaKind.OTHER.value)),
            mime_type=str(data.get("mime_type", "")),
            favorite=bool(data.get("favorite", False)),
        )


@dataclass(frozen=True)
class AccountRef:
    """Opaque identity of the account owning a file."""

    name: str

    def __str__(self) -> str:
        return self.name


class PlaybackState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    PREPARING = "preparing"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class PlaybackSession:
    """Live state of one inline playback instance.

    ``position_ms`` and ``autoplay`` describe where and how the next prepared
    media starts; ``is_playing`` mirrors what the engine last reported.
    """

    position_ms: int = 0
    autoplay: bool = True
    is_playing: bool = False
    is_prepared: bool = False

    def __post_init__(self) -> None:
        if self.position_ms < 0:
            raise ValueError(f"position_ms must be >= 0, got {self.position_ms}")


class PlaybackEventKind(enum.Enum):
    PREPARED = "prepared"
    COMPLETED = "completed"
    ERROR = "error"
    PLAYING_CHANGED = "playing_changed"


@dataclass(frozen=True)
class PlaybackEvent:
    """Single tagged event delivered by a playback engine."""

    kind: PlaybackEventKind
    code: int = 0
    subcode: int = 0
    playing: bool = False

    @classmethod
    def prepared(cls) -> "PlaybackEvent":
        return cls(PlaybackEventKind.PREPARED)

    @classmethod
    def completed(cls) -> "PlaybackEvent":
        return cls(PlaybackEventKind.COMPLETED)

    @classmethod
    def error(cls, code: int, subcode: int = 0) -> "PlaybackEvent":
        return cls(PlaybackEventKind.ERROR, code=code, subcode=subcode)

    @classmethod
    def playing_changed(cls, playing: bool) -> "PlaybackEvent":
        return cls(PlaybackEventKind.PLAYING_CHANGED, playing=playing)


@dataclass(frozen=True)
class HandoffRequest:
    """What the full-screen viewer receives: where to start and whether to play."""

    position_ms: int
    autoplay: bool
    request_id: int = 0


@dataclass(frozen=True)
class HandoffResult:
    """What the full-screen viewer hands back when it closes normally."""

    position_ms: int
    is_playing: bool


@dataclass(frozen=True)
class Snapshot:
    """Minimal state needed to rebuild a preview after involuntary teardown."""

    item: MediaItem
    account: AccountRef
    position_ms: int = 0
    autoplay: bool = True

    def to_state(self) -> Dict[str, Any]:
        return {
            KEY_FILE: self.item.to_dict(),
            KEY_ACCOUNT: self.account.name,
            KEY_PLAY_POSITION: int(self.position_ms),
            KEY_PLAYING: bool(self.autoplay),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Snapshot":
        return cls(
            item=MediaItem.from_dict(state[KEY_FILE]),
            account=AccountRef(str(state[KEY_ACCOUNT])),
            position_ms=int(state.get(KEY_PLAY_POSITION, 0)),
            autoplay=bool(state.get(KEY_PLAYING, True)),
        )
