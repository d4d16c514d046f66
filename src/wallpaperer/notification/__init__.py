from wallpaperer.notification.notifier import LogNotifier, Notifier, instructions_for

__all__ = [
    "LogNotifier",
    "Notifier",
    "instructions_for",
]
