from dataclasses import dataclass

from PIL import Image

from wallpaperer.logging import get_logger
from wallpaperer.topology.topology import Topology

logger = get_logger("wallpaperer.compositor")

PALETTE_MODES = ("P", "PA")
# Metadata that describes how pixel values are interpreted.
PRESERVED_INFO_KEYS = ("transparency", "icc_profile", "dpi", "gamma")


@dataclass(frozen=True)
class DimensionMismatch:
    """A source image whose size does not match the configured monitor row."""

    expected_width: int
    expected_height: int
    actual_width: int
    actual_height: int

    @property
    def message(self) -> str:
        return (
            f"Expected a {self.expected_width}x{self.expected_height} image, "
            f"got {self.actual_width}x{self.actual_height}"
        )

    @property
    def instructions(self) -> str:
        return (
            f"Please drop a {self.expected_width} × {self.expected_height} image on me."
        )


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: DimensionMismatch | None = None


@dataclass(frozen=True)
class CompositionResult:
    image: Image.Image | None = None
    error: DimensionMismatch | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None and self.image is not None


class Compositor:
    """Removes the bezel gaps from an image spanning a row of monitors.

    The source image covers every monitor plus the dead space behind the
    bezels. Each monitor's visible slice is copied into a destination image
    whose width is the sum of the monitor widths, so the picture lines up
    across the physical gaps between screens.

    Expected failures are returned as values, never raised.
    """

    def __init__(self) -> None:  # type: ignore[reportMissingSuperCall]
        self.last_error_msg: str | None = None

    def validate(self, topology: Topology, source: Image.Image) -> ValidationResult:
        """Check that the source image has the size the topology expects.

        Args:
            topology: The monitor row the image was made for.
            source: The oversized source image.

        Returns:
            ValidationResult carrying a DimensionMismatch when the sizes differ.
        """
        expected = (topology.expected_source_width(), topology.expected_source_height())

        if source.size != expected:
            mismatch = DimensionMismatch(
                expected_width=expected[0],
                expected_height=expected[1],
                actual_width=source.width,
                actual_height=source.height,
            )
            self.last_error_msg = mismatch.message
            logger.warning(mismatch.message)
            return ValidationResult(is_valid=False, error=mismatch)

        self.last_error_msg = None
        return ValidationResult(is_valid=True)

    def compose(self, topology: Topology, source: Image.Image) -> CompositionResult:
        """Build the bezel-free wallpaper for a validated source image.

        The destination has the same mode as the source. Every destination
        pixel is written exactly once because the destination regions tile
        the image without gaps.

        Args:
            topology: The monitor row the image was made for.
            source: The oversized source image. It is not modified.

        Returns:
            CompositionResult holding the new image, or the DimensionMismatch
            if validation failed, in which case nothing is allocated.
        """
        validation = self.validate(topology, source)
        if not validation.is_valid:
            return CompositionResult(error=validation.error)

        if topology.bezel_width == 0:
            logger.debug("Bezel width is 0, output is a copy of the source")
            return CompositionResult(image=source.copy())

        destination = Image.new(
            source.mode,
            (topology.expected_destination_width(), topology.expected_destination_height()),
        )
        if source.mode in PALETTE_MODES:
            palette = source.getpalette()
            if palette is not None:
                destination.putpalette(palette)
        for key in PRESERVED_INFO_KEYS:
            if key in source.info:
                destination.info[key] = source.info[key]

        for mapping in topology.region_mappings():
            region = source.crop(mapping.source.box)
            destination.paste(region, (mapping.destination.x, mapping.destination.y))
            logger.debug(
                f"Monitor {mapping.index}: source x={mapping.source.x} -> "
                f"destination x={mapping.destination.x}, width={mapping.source.width}"
            )

        logger.info(
            f"Composed {source.width}x{source.height} into "
            f"{destination.width}x{destination.height} for {topology.describe()}"
        )
        return CompositionResult(image=destination)
