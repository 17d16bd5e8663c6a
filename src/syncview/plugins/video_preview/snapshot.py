from __future__ import annotations

import logging
from typing import Optional

from ...core.config import ConfigStore
from .lifecycle import PlaybackLifecycleController
from .models import AccountRef, MediaItem, PlaybackSession, Snapshot

_logger = logging.getLogger("SyncView.Snapshot")

SNAPSHOT_SECTION = "video_preview.snapshots"


class StateSnapshotManager:
    """Captures and restores the state a preview needs to survive recreation.

    Snapshots can optionally be kept in a :class:`ConfigStore` so that a file
    reopened later resumes where it was left.
    """

    def __init__(self, store: Optional[ConfigStore] = None) -> None:
        self._store = store

    def capture(
        self,
        item: MediaItem,
        account: AccountRef,
        controller: PlaybackLifecycleController,
    ) -> Snapshot:
        # the engine is the source of truth while media is prepared
        if controller.is_prepared:
            position = controller.current_position()
            playing = controller.current_is_playing()
        else:
            position = controller.session.position_ms
            playing = controller.session.autoplay
        snapshot = Snapshot(item=item, account=account, position_ms=position, autoplay=playing)
        _logger.debug("Captured %s at %d ms (playing=%s)", item.remote_path, position, playing)
        return snapshot

    def restore(self, snapshot: Snapshot) -> PlaybackSession:
        """Build the session to load with. Must run before ``load``."""
        return PlaybackSession(position_ms=snapshot.position_ms, autoplay=snapshot.autoplay)

    # --------------------------------------------------------------- persistence
    @staticmethod
    def _key(item: MediaItem, account: AccountRef) -> str:
        return f"{account.name}:{item.remote_path}"

    def persist(self, snapshot: Snapshot) -> None:
        if self._store is None:
            return
        section = self._store.get_section(SNAPSHOT_SECTION)
        section[self._key(snapshot.item, snapshot.account)] = snapshot.to_state()

    def load_persisted(self, item: MediaItem, account: AccountRef) -> Optional[Snapshot]:
        if self._store is None:
            return None
        state = self._store.get_section(SNAPSHOT_SECTION).get(self._key(item, account))
        if not isinstance(state, dict):
            return None
        try:
            snapshot = Snapshot.from_state(state)
        except (KeyError, TypeError, ValueError):
            _logger.warning("Discarding unreadable snapshot for %s", item.remote_path)
            return None
        # the stored item may be outdated; keep the caller's current one
        return Snapshot(item=item, account=account, position_ms=snapshot.position_ms, autoplay=snapshot.autoplay)

    def forget(self, item: MediaItem, account: AccountRef) -> None:
        if self._store is None:
            return
        section = self._store.get_section(SNAPSHOT_SECTION)
        key = self._key(item, account)
        if key in section:
            del section[key]
