from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from ...core.errors import PlaybackError

_logger = logging.getLogger("SyncView.PlaybackErrors")

# Engine error codes understood by the default message resolver
ERROR_UNKNOWN = 1
ERROR_SERVER_DIED = 100
ERROR_NOT_VALID_FOR_PROGRESSIVE_PLAYBACK = 200
ERROR_IO = -1004
ERROR_MALFORMED = -1007
ERROR_UNSUPPORTED = -1010
ERROR_TIMED_OUT = -110

_DETAIL_MESSAGES = {
    ERROR_UNSUPPORTED: "Das Videoformat wird nicht unterstützt.",
    ERROR_IO: "Die Videodatei konnte nicht gelesen werden.",
    ERROR_MALFORMED: "Die Videodatei ist beschädigt.",
    ERROR_TIMED_OUT: "Die Wiedergabe hat zu lange gedauert und wurde abgebrochen.",
}
GENERIC_MESSAGE = "Dieses Video kann nicht abgespielt werden."
ACKNOWLEDGE_LABEL = "OK"

MessageResolver = Callable[[int, int], str]


def describe_media_error(code: int, subcode: int = 0) -> str:
    """Map an engine (code, subcode) pair to a message for the user."""
    if code == ERROR_NOT_VALID_FOR_PROGRESSIVE_PLAYBACK:
        return "Das Video ist für progressive Wiedergabe nicht geeignet."
    if code == ERROR_SERVER_DIED:
        return "Der Mediendienst wurde unerwartet beendet."
    # the detail code usually sits in subcode, some engines report it as code
    return _DETAIL_MESSAGES.get(subcode) or _DETAIL_MESSAGES.get(code) or GENERIC_MESSAGE


class ConfirmationDialog(Protocol):
    def show_message(self, message: str, button_text: str, on_acknowledged: Callable[[], None]) -> None:
        """Show a non-cancelable modal with a single acknowledgement action."""

    def dismiss(self) -> None:
        """Close any open message without acknowledging it."""


class ErrorPresenter:
    """Turns engine errors into one blocking message per failure.

    While a dialog is open, later errors replace the pending acknowledgement
    instead of stacking another dialog, so confirming it always completes the
    newest failure. When the view is not attached to a window the error is only
    recorded and published as a notification; nothing is retried.
    """

    def __init__(
        self,
        dialog: ConfirmationDialog,
        is_attached: Callable[[], bool],
        resolver: MessageResolver = describe_media_error,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._dialog = dialog
        self._is_attached = is_attached
        self._resolver = resolver
        self._notify = notify
        self._showing = False
        self._pending: Optional[Callable[[], None]] = None
        self._dialog_id = 0
        self.errors: List[PlaybackError] = []

    @property
    def last_error(self) -> Optional[PlaybackError]:
        return self.errors[-1] if self.errors else None

    @property
    def is_showing(self) -> bool:
        return self._showing

    def present(self, code: int, subcode: int, acknowledge: Callable[[], None]) -> PlaybackError:
        """Record the error and, if possible, ask the user to acknowledge it.

        ``acknowledge`` is invoked once the user confirms the dialog, unless a
        newer error has replaced it in the meantime.
        """
        message = self._resolver(code, subcode)
        error = PlaybackError(code=code, subcode=subcode, message=message)
        self.errors.append(error)
        _logger.error("Error in video playback, code=%s, subcode=%s", code, subcode)

        if not self._is_attached():
            _logger.info("View not attached, playback error recorded without dialog")
            if self._notify is not None:
                self._notify(message)
            return error

        self._pending = acknowledge
        if self._showing:
            _logger.debug("Error dialog already open, acknowledging it completes the newest error")
            return error

        self._dialog_id += 1
        dialog_id = self._dialog_id

        def _on_acknowledged() -> None:
            if dialog_id != self._dialog_id:
                return
            self._showing = False
            pending, self._pending = self._pending, None
            if pending is not None:
                pending()

        self._showing = True
        self._dialog.show_message(message, ACKNOWLEDGE_LABEL, _on_acknowledged)
        return error

    def dismiss(self) -> None:
        """Close the open dialog and forget its acknowledgement."""
        self._pending = None
        if not self._showing:
            return
        self._showing = False
        # the dialog's own finished callback must not fire the acknowledgement
        self._dialog_id += 1
        self._dialog.dismiss()
