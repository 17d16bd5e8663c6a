"""Playback lifecycle of an inline video preview.

State machine::

    UNINITIALIZED -> PREPARING -> READY -> PLAYING <-> PAUSED -> COMPLETED
                         |                   |           |
                         +------------> ERROR <----------+

``load`` leaves UNINITIALIZED (or retries from COMPLETED/ERROR), ``stop`` returns
to UNINITIALIZED from anywhere. Engine notifications arrive as a single tagged
:class:`PlaybackEvent` and are applied on the owner thread, in delivery order,
only if they belong to the current load generation.
"""
from __future__ import annotations

import functools
import logging
from typing import Callable, Optional, Protocol

from ...core.dispatch import Dispatcher, ImmediateDispatcher
from ...core.errors import InvalidStateError
from .error_presenter import ErrorPresenter
from .models import MediaItem, PlaybackEvent, PlaybackEventKind, PlaybackSession, PlaybackState

_logger = logging.getLogger("SyncView.Playback")

EngineListener = Callable[[PlaybackEvent], None]


class PlaybackEngine(Protocol):
    """The media decode/render pipeline, owned elsewhere."""

    def prepare(self, source: str, listener: EngineListener) -> None: ...

    def seek(self, position_ms: int) -> None: ...

    def start(self) -> None: ...

    def pause(self) -> None: ...

    def release(self) -> None: ...

    def position(self) -> int: ...

    def is_playing(self) -> bool: ...


class PlaybackControls(Protocol):
    """Transport controls shown next to the video."""

    def set_enabled(self, enabled: bool) -> None: ...

    def refresh(self, playing: bool) -> None: ...


_LOADABLE = frozenset({PlaybackState.UNINITIALIZED, PlaybackState.COMPLETED, PlaybackState.ERROR})
_ACTIVE = frozenset({PlaybackState.PREPARING, PlaybackState.READY, PlaybackState.PLAYING, PlaybackState.PAUSED})
_COMPLETABLE = frozenset(
    {PlaybackState.READY, PlaybackState.PLAYING, PlaybackState.PAUSED, PlaybackState.ERROR}
)


class PlaybackLifecycleController:
    """Owns the playback session and every transition applied to it."""

    def __init__(
        self,
        engine: PlaybackEngine,
        controls: PlaybackControls,
        presenter: ErrorPresenter,
        dispatcher: Optional[Dispatcher] = None,
        session: Optional[PlaybackSession] = None,
    ) -> None:
        self._engine = engine
        self._controls = controls
        self._presenter = presenter
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._session = session or PlaybackSession()
        self._state = PlaybackState.UNINITIALIZED
        self._generation = 0

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def session(self) -> PlaybackSession:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_prepared(self) -> bool:
        return self._session.is_prepared

    # ------------------------------------------------------------------ commands
    def load(self, item: MediaItem) -> None:
        if self._state not in _LOADABLE:
            raise InvalidStateError(f"Cannot load while {self._state.value}")
        if not item.is_locally_available:
            raise InvalidStateError(f"There is no local file to play: {item.remote_path}")
        if self._state is not PlaybackState.UNINITIALIZED:
            self._engine.release()
        self._generation += 1
        self._session.is_prepared = False
        self._session.is_playing = False
        self._controls.set_enabled(False)
        self._set_state(PlaybackState.PREPARING)
        listener = functools.partial(self.post, generation=self._generation)
        self._engine.prepare(str(item.local_path), listener)

    def stop(self) -> None:
        """Release the engine and forget everything in flight."""
        self._generation += 1
        self._engine.release()
        self._session.is_prepared = False
        self._session.is_playing = False
        self._controls.set_enabled(False)
        self._set_state(PlaybackState.UNINITIALIZED)

    def play(self) -> None:
        if self._state in (PlaybackState.READY, PlaybackState.PAUSED, PlaybackState.COMPLETED):
            self._engine.start()

    def pause(self) -> None:
        if self._state is PlaybackState.PLAYING:
            self._engine.pause()

    def toggle(self) -> None:
        if self._state is PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()

    def suspend(self) -> None:
        """Pause inline playback, keeping the engine and the loaded media."""
        if self._engine.is_playing():
            self._engine.pause()

    def set_resume_point(self, position_ms: int, autoplay: bool) -> None:
        """Set where (and whether playing) the next prepared media starts."""
        if position_ms < 0:
            raise ValueError(f"position_ms must be >= 0, got {position_ms}")
        self._session.position_ms = int(position_ms)
        self._session.autoplay = bool(autoplay)

    def current_position(self) -> int:
        if self._session.is_prepared:
            return max(0, int(self._engine.position()))
        return self._session.position_ms

    def current_is_playing(self) -> bool:
        if self._session.is_prepared:
            return bool(self._engine.is_playing())
        return False

    # -------------------------------------------------------------------- events
    def post(self, event: PlaybackEvent, generation: Optional[int] = None) -> None:
        """Entry point for engine callbacks, safe to call from any thread."""
        self._dispatcher.post(lambda: self._deliver(event, generation))

    def _deliver(self, event: PlaybackEvent, generation: Optional[int]) -> None:
        if generation is not None and generation != self._generation:
            _logger.debug("Dropping stale %s (generation %s, current %s)", event.kind.value, generation, self._generation)
            return
        if self._state is PlaybackState.UNINITIALIZED:
            _logger.debug("Dropping %s received while stopped", event.kind.value)
            return
        self.dispatch(event)

    def dispatch(self, event: PlaybackEvent) -> None:
        if event.kind is PlaybackEventKind.PREPARED:
            self.prepared()
        elif event.kind is PlaybackEventKind.COMPLETED:
            self.completed()
        elif event.kind is PlaybackEventKind.ERROR:
            self.errored(event.code, event.subcode)
        elif event.kind is PlaybackEventKind.PLAYING_CHANGED:
            self._on_playing_changed(event.playing)

    def prepared(self) -> None:
        if self._state is not PlaybackState.PREPARING:
            _logger.debug("Ignoring prepared while %s", self._state.value)
            return
        self._set_state(PlaybackState.READY)
        self._engine.seek(self._session.position_ms)
        if self._session.autoplay:
            self._engine.start()
            self._session.is_playing = True
            self._set_state(PlaybackState.PLAYING)
        else:
            self._session.is_playing = False
        self._session.is_prepared = True
        self._controls.set_enabled(True)
        self._controls.refresh(self._session.is_playing)

    def completed(self) -> None:
        if self._state is PlaybackState.COMPLETED:
            self._controls.refresh(False)
            return
        if self._state not in _COMPLETABLE:
            _logger.debug("Ignoring completed while %s", self._state.value)
            return
        if self._state is not PlaybackState.ERROR:
            if self._engine.is_playing():
                self._engine.pause()
            self._engine.seek(0)
        self._session.position_ms = 0
        self._session.is_playing = False
        self._set_state(PlaybackState.COMPLETED)
        self._controls.refresh(False)

    def errored(self, code: int, subcode: int = 0) -> None:
        if self._state not in _ACTIVE:
            _logger.debug("Ignoring error %s/%s while %s", code, subcode, self._state.value)
            return
        self._session.is_playing = False
        self._set_state(PlaybackState.ERROR)
        generation = self._generation
        self._presenter.present(
            code,
            subcode,
            acknowledge=lambda: self.post(PlaybackEvent.completed(), generation),
        )

    def _on_playing_changed(self, playing: bool) -> None:
        if playing and self._state in (PlaybackState.READY, PlaybackState.PAUSED, PlaybackState.COMPLETED):
            self._session.is_playing = True
            self._set_state(PlaybackState.PLAYING)
        elif not playing and self._state is PlaybackState.PLAYING:
            self._session.is_playing = False
            self._set_state(PlaybackState.PAUSED)
        else:
            return
        self._controls.refresh(self._session.is_playing)

    def _set_state(self, state: PlaybackState) -> None:
        if state is self._state:
            return
        _logger.debug("Playback %s -> %s", self._state.value, state.value)
        self._state = state
