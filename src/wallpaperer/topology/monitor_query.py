from dataclasses import dataclass

import mss
from mss.base import MSSBase

from wallpaperer.logging import get_logger
from wallpaperer.topology.topology import InvalidTopology, Topology

logger = get_logger("wallpaperer.topology")


@dataclass(frozen=True)
class MonitorInfo:
    monitor_id: int
    x: int
    y: int
    width: int
    height: int

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.width, self.height)


class MonitorEnumerator:
    """Reads the connected monitor layout and turns it into a Topology."""

    def __init__(self) -> None:  # type: ignore[reportMissingSuperCall]
        self._mss: MSSBase | None = None
        self.last_error_msg: str | None = None

    def _ensure_mss(self) -> MSSBase:
        if self._mss is None:
            self._mss = mss.mss()
        return self._mss

    def enumerate_monitors(self) -> list[MonitorInfo]:
        sct = self._ensure_mss()
        monitors: list[MonitorInfo] = []

        # Entry 0 is the virtual bounding box of all monitors.
        for i, monitor in enumerate(sct.monitors):
            if i == 0:
                continue

            monitor_info = MonitorInfo(
                monitor_id=i,
                x=monitor["left"],
                y=monitor["top"],
                width=monitor["width"],
                height=monitor["height"],
            )
            monitors.append(monitor_info)
            logger.debug(
                f"Detected monitor {i}: {monitor_info.resolution} at ({monitor_info.x}, {monitor_info.y})"
            )

        logger.info(f"Enumerated {len(monitors)} monitor(s)")
        return monitors

    def build_topology(self, bezel_width: int) -> Topology:
        """Build a left-to-right Topology from the connected monitors.

        Args:
            bezel_width: Dead space on each side of a seam, in pixels.

        Returns:
            Topology ordered by horizontal position, using the tallest
            monitor as the shared height.

        Raises:
            InvalidTopology: If no monitors are found or the values are invalid.
        """
        monitors = sorted(self.enumerate_monitors(), key=lambda m: (m.x, m.y))

        if not monitors:
            msg = "No monitors detected"
            logger.error(msg)
            self.last_error_msg = msg
            raise InvalidTopology(msg)

        heights = {monitor.height for monitor in monitors}
        if len(heights) > 1:
            logger.warning(
                f"Monitors have different heights {sorted(heights)}; using {max(heights)}"
            )

        try:
            return Topology.from_widths(
                [monitor.width for monitor in monitors],
                height=max(heights),
                bezel_width=bezel_width,
            )
        except InvalidTopology as e:
            self.last_error_msg = str(e)
            logger.error(f"Invalid monitor layout: {e}")
            raise

    def close(self) -> None:
        if self._mss is not None:
            try:
                self._mss.close()
                self._mss = None
                logger.debug("Closed MSS connection")
            except OSError as e:
                error_msg = f"Error closing MSS connection: {e}"
                logger.error(error_msg)
                self.last_error_msg = error_msg

    def __enter__(self) -> "MonitorEnumerator":
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()
