from typing import Protocol

from wallpaperer.logging import get_logger
from wallpaperer.topology.topology import Topology

logger = get_logger("wallpaperer")


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


def instructions_for(topology: Topology) -> str:
    return (
        f"Please drop a {topology.expected_source_width()} × "
        f"{topology.expected_source_height()} image on me."
    )


class LogNotifier:
    """Reports user-facing messages on the console log."""

    def __init__(self) -> None:  # type: ignore[reportMissingSuperCall]
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
        logger.warning(message)
