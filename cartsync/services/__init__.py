# Services Module
from .inventory import InventoryClient
from .notifications import CallbackNotifier, LoggingNotifier, Notifier, RecordingNotifier

__all__ = [
    "InventoryClient",
    "Notifier",
    "LoggingNotifier",
    "CallbackNotifier",
    "RecordingNotifier",
]
