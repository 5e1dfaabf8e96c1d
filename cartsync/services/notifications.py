"""
Notification Service

One-way "show the user a message" channel for cart failures. Message text
is resolved through i18n from the NotificationKind.
"""
import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Tuple

from cartsync.i18n import get_text
from cartsync.logging import get_logger
from cartsync.models import NotificationKind

logger = get_logger(__name__)


def _msg(kind: NotificationKind, lang: str) -> str:
    """Localized text for a notification kind."""
    return get_text(f"cart.{kind.value}", lang)


class Notifier(ABC):
    """Emits user-facing error messages."""

    def __init__(self, language: str = "pt"):
        self.language = language

    def message_for(self, kind: NotificationKind) -> str:
        return _msg(kind, self.language)

    @abstractmethod
    async def notify(self, kind: NotificationKind) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes notifications to the log (headless use)."""

    async def notify(self, kind: NotificationKind) -> None:
        logger.error(f"[{kind.value}] {self.message_for(kind)}")


class CallbackNotifier(Notifier):
    """
    Forwards notifications to a UI callable.

    The callback receives (kind, message) and may be sync or async,
    e.g. a toast function.
    """

    def __init__(self, callback: Callable[[NotificationKind, str], Any], language: str = "pt"):
        super().__init__(language)
        self.callback = callback

    async def notify(self, kind: NotificationKind) -> None:
        result = self.callback(kind, self.message_for(kind))
        if inspect.isawaitable(result):
            await result


class RecordingNotifier(Notifier):
    """Keeps every notification in memory."""

    def __init__(self, language: str = "en"):
        super().__init__(language)
        self.sent: List[Tuple[NotificationKind, str]] = []

    @property
    def kinds(self) -> List[NotificationKind]:
        return [kind for kind, _ in self.sent]

    async def notify(self, kind: NotificationKind) -> None:
        self.sent.append((kind, self.message_for(kind)))

    def clear(self) -> None:
        self.sent.clear()
