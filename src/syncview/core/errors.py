from __future__ import annotations

from dataclasses import dataclass


class PreviewError(Exception):
    """Base class for errors raised by the preview components."""


class InvalidStateError(PreviewError):
    """Raised when a preview is built from unusable inputs or driven out of order."""


@dataclass(frozen=True)
class PlaybackError:
    """Engine-reported playback failure as recorded by the error presenter."""

    code: int
    subcode: int = 0
    message: str = ""
