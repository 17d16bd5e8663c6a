from __future__ import annotations

import logging
from typing import Optional, Tuple

from ...core.errors import InvalidStateError
from .models import AccountRef, MediaItem

_logger = logging.getLogger("SyncView.Validator")


def can_be_previewed(item: Optional[MediaItem]) -> bool:
    """Return True if *item* can be handed to an inline video preview."""
    return item is not None and item.is_locally_available and item.is_video


def validate_preview_target(
    item: Optional[MediaItem], account: Optional[AccountRef]
) -> Tuple[MediaItem, AccountRef]:
    """Return (item, account) if they can be previewed, else raise :class:`InvalidStateError`.

    Runs once, before anything is rendered. There is no recovery: callers are
    expected to check :func:`can_be_previewed` first.
    """
    if item is None:
        reason = "Instanced with a missing media item"
    elif account is None:
        reason = "Instanced with a missing account"
    elif not item.is_locally_available:
        reason = f"There is no local file to preview: {item.remote_path}"
    elif not item.is_video:
        reason = f"Not a video file: {item.remote_path}"
    else:
        return item, account
    _logger.warning("Rejecting preview: %s", reason)
    raise InvalidStateError(reason)
