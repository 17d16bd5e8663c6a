"""Inline video preview for synced files.

Qt widgets live in :mod:`.widget`, :mod:`.engine` and :mod:`.fullscreen`; the
names exported here work without a running QApplication.
"""
from __future__ import annotations

from .models import AccountRef, MediaItem, MediaKind, PlaybackSession, PlaybackState, Snapshot  # noqa: F401
from .preview import PreviewCollaborators, VideoPreview  # noqa: F401
from .validator import can_be_previewed, validate_preview_target  # noqa: F401

__all__ = [
    "AccountRef",
    "MediaItem",
    "MediaKind",
    "PlaybackSession",
    "PlaybackState",
    "PreviewCollaborators",
    "Snapshot",
    "VideoPreview",
    "can_be_previewed",
    "validate_preview_target",
]
