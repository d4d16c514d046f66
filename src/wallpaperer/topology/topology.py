from collections.abc import Iterable
from dataclasses import dataclass

from wallpaperer.logging import get_logger
from wallpaperer.topology.data import MonitorDescriptor, Region, RegionMapping

logger = get_logger("wallpaperer.topology")


class InvalidTopology(ValueError):
    """Raised when a monitor configuration cannot describe a monitor row."""


class IndexOutOfRange(IndexError):
    """Raised when a region mapping is requested for a monitor that does not exist."""


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Topology:
    """A single horizontal row of monitors sharing one usable height.

    The bezel width is the dead space on each side of a seam, so two adjacent
    monitors are separated by ``2 * bezel_width`` pixels in the source image.
    There is no bezel before the first monitor or after the last one.
    """

    monitors: tuple[MonitorDescriptor, ...]
    height: int
    bezel_width: int = 0

    def __post_init__(self) -> None:
        if not self.monitors:
            msg = "Topology needs at least one monitor"
            raise InvalidTopology(msg)

        for index, monitor in enumerate(self.monitors):
            if not _is_int(monitor.width) or monitor.width <= 0:
                msg = f"Monitor {index} has invalid width: {monitor.width!r}"
                raise InvalidTopology(msg)

        if not _is_int(self.height) or self.height <= 0:
            msg = f"Invalid monitor height: {self.height!r}"
            raise InvalidTopology(msg)

        if not _is_int(self.bezel_width) or self.bezel_width < 0:
            msg = f"Invalid bezel width: {self.bezel_width!r}"
            raise InvalidTopology(msg)

    @classmethod
    def from_widths(
        cls, widths: Iterable[int], height: int, bezel_width: int = 0
    ) -> "Topology":
        monitors = tuple(MonitorDescriptor(width=width) for width in widths)
        topology = cls(monitors=monitors, height=height, bezel_width=bezel_width)
        logger.debug(f"Built topology: {topology.describe()}")
        return topology

    @property
    def widths(self) -> tuple[int, ...]:
        return tuple(monitor.width for monitor in self.monitors)

    def monitor_count(self) -> int:
        return len(self.monitors)

    def expected_source_width(self) -> int:
        return (
            self.expected_destination_width()
            + self.bezel_width * 2 * (self.monitor_count() - 1)
        )

    def expected_source_height(self) -> int:
        return self.height

    def expected_destination_width(self) -> int:
        return sum(self.widths)

    def expected_destination_height(self) -> int:
        return self.height

    def region_mapping(self, index: int) -> RegionMapping:
        """Return the source and destination rectangles for one monitor.

        Args:
            index: Position of the monitor in the row, left to right.

        Returns:
            RegionMapping whose source region skips the bezel gaps of every
            seam to its left and whose destination region does not.

        Raises:
            IndexOutOfRange: If index is not in [0, monitor_count()).
        """
        if not _is_int(index) or not 0 <= index < self.monitor_count():
            msg = (
                f"Monitor index {index!r} out of range for "
                f"{self.monitor_count()} monitor(s)"
            )
            raise IndexOutOfRange(msg)

        width = self.monitors[index].width
        destination_x = sum(self.widths[:index])
        source_x = destination_x + self.bezel_width * 2 * index

        return RegionMapping(
            index=index,
            source=Region(x=source_x, y=0, width=width, height=self.height),
            destination=Region(x=destination_x, y=0, width=width, height=self.height),
        )

    def region_mappings(self) -> tuple[RegionMapping, ...]:
        return tuple(self.region_mapping(i) for i in range(self.monitor_count()))

    def describe(self) -> str:
        noun = "monitor" if self.monitor_count() == 1 else "monitors"
        widths = ", ".join(str(width) for width in self.widths)
        return (
            f"{self.monitor_count()} {noun} [{widths}] x {self.height}, "
            f"bezel {self.bezel_width}px"
        )
