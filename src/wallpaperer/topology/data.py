from dataclasses import dataclass


@dataclass(frozen=True)
class MonitorDescriptor:
    width: int


@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Pillow crop box: (left, upper, right, lower)."""
        return (self.x, self.y, self.right, self.bottom)

    def overlaps(self, other: "Region") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )


@dataclass(frozen=True)
class RegionMapping:
    index: int
    source: Region
    destination: Region
