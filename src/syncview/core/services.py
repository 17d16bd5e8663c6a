from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .config import ConfigStore, PreviewSettings, SectionConfig
from .events import EventBus

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


@dataclass(frozen=True)
class Notification:
    message: str
    level: str = "info"
    source: Optional[str] = None


class NotificationCenter:
    """Lightweight pub/sub for user-facing notices that have no dialog to live in."""

    def __init__(self) -> None:
        self._subscribers: List[Callable[[Notification], None]] = []
        self.history: List[Notification] = []

    def subscribe(self, callback: Callable[[Notification], None]) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, notification: Notification) -> None:
        self.history.append(notification)
        for subscriber in list(self._subscribers):
            try:
                subscriber(notification)
            except Exception:
                logging.getLogger("SyncView.NotificationCenter").exception(
                    "Notification subscriber failed"
                )


class PreviewServices:
    """Shared services handed to every preview: logging, config, bus, notices."""

    def __init__(
        self,
        app_name: str = "SyncView",
        data_dir: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.app_name = app_name
        self.data_dir = data_dir or self._resolve_data_dir(app_name)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._config_store = ConfigStore(self.data_dir / "config.json")
        self.settings = PreviewSettings.load(self._config_store)
        self._logger = logger or self._configure_logger(app_name, self.settings.log_level)
        self.event_bus = event_bus or EventBus()
        self.notifications = NotificationCenter()

    @staticmethod
    def _resolve_data_dir(app_name: str) -> Path:
        if os.name == "nt":
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        else:
            base = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / app_name.lower()

    @staticmethod
    def _configure_logger(app_name: str, level: str) -> logging.Logger:
        logger = logging.getLogger(app_name)
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(LOG_LEVELS.get(str(level).lower(), logging.INFO))
        return logger

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def get_logger(self, name: str) -> logging.Logger:
        return self._logger.getChild(name)

    def send_notification(
        self, message: str, level: str = "info", *, source: Optional[str] = None
    ) -> None:
        notification = Notification(message=message, level=level, source=source)
        self.notifications.publish(notification)
        log_method = getattr(self._logger, level, self._logger.info)
        log_method("%s", message)

    @property
    def config_store(self) -> ConfigStore:
        return self._config_store

    def get_section(self, name: str) -> SectionConfig:
        return self._config_store.get_section(name)
