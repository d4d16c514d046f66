from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from wallpaperer.logging import get_logger

logger = get_logger("wallpaperer.codec")

OUTPUT_SUFFIX = "-wallpapered"
DEFAULT_QUALITY = 90

FORMAT_EXTENSIONS: dict[str, str] = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "BMP": ".bmp",
    "GIF": ".gif",
    "TIFF": ".tif",
    "WEBP": ".webp",
}
LOSSY_FORMATS = frozenset({"JPEG", "WEBP"})
# Pillow reports multi-picture camera JPEGs as MPO.
FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF", "MPO": "JPEG"}

# Modes each format can store without conversion.
STORABLE_MODES: dict[str, frozenset[str]] = {
    "JPEG": frozenset({"L", "RGB", "CMYK"}),
}


def normalize_format(name: str) -> str:
    """Map a user-supplied format or extension to a Pillow format name.

    Raises:
        ValueError: If the format is not supported.
    """
    image_format = name.strip().lstrip(".").upper()
    image_format = FORMAT_ALIASES.get(image_format, image_format)
    if image_format not in FORMAT_EXTENSIONS:
        supported = ", ".join(sorted(FORMAT_EXTENSIONS))
        msg = f"Unsupported image format: {name!r} (supported: {supported})"
        raise ValueError(msg)
    return image_format


@dataclass(frozen=True)
class FormatOptions:
    """How the wallpaper is written. ``format=None`` keeps the source format."""

    format: str | None = None
    quality: int = DEFAULT_QUALITY

    def __post_init__(self) -> None:
        if self.format is not None:
            object.__setattr__(self, "format", normalize_format(self.format))
        if isinstance(self.quality, bool) or not 1 <= self.quality <= 100:
            msg = f"Quality must be between 1 and 100, got {self.quality!r}"
            raise ValueError(msg)


class ImageCodec:
    """Reads source images from disk and writes finished wallpapers."""

    def __init__(self) -> None:  # type: ignore[reportMissingSuperCall]
        self.last_error_msg: str | None = None

    def decode(self, path: Path | str) -> Image.Image:
        """Open and fully load an image file.

        Raises:
            OSError: If the file cannot be read or is not an image. The
                original exception is re-raised unchanged.
        """
        path = Path(path)
        try:
            with Image.open(path) as image:
                image.load()
        except OSError as e:
            self.last_error_msg = f"Failed to read image {path}: {e}"
            logger.error(self.last_error_msg)
            raise

        logger.debug(
            f"Decoded {path}: {image.width}x{image.height} {image.mode} ({image.format})"
        )
        return image

    @staticmethod
    def resolve_format(
        source_path: Path, options: FormatOptions, source_format: str | None = None
    ) -> str:
        if options.format is not None:
            return options.format
        if source_format:
            try:
                return normalize_format(source_format)
            except ValueError:
                if not source_path.suffix:
                    raise
                logger.debug(
                    f"Cannot write {source_format}, using {source_path.suffix} instead"
                )
        return normalize_format(source_path.suffix or "PNG")

    def output_path_for(
        self,
        source_path: Path | str,
        options: FormatOptions,
        source_format: str | None = None,
    ) -> Path:
        """Return ``<dir>/<stem>-wallpapered<ext>`` beside the source file."""
        source_path = Path(source_path)
        if options.format is None and source_path.suffix:
            extension = source_path.suffix
        else:
            extension = FORMAT_EXTENSIONS[
                self.resolve_format(source_path, options, source_format)
            ]
        return source_path.with_name(f"{source_path.stem}{OUTPUT_SUFFIX}{extension}")

    def encode(
        self,
        image: Image.Image,
        output_path: Path | str,
        options: FormatOptions,
        source_format: str | None = None,
    ) -> Path:
        """Write the image, applying quality settings for lossy formats.

        Raises:
            OSError: If the file cannot be written. The original exception is
                re-raised unchanged.
        """
        output_path = Path(output_path)
        image_format = self.resolve_format(output_path, options, source_format)

        storable = STORABLE_MODES.get(image_format)
        if storable is not None and image.mode not in storable:
            logger.debug(f"Converting {image.mode} to RGB for {image_format}")
            image = image.convert("RGB")

        save_kwargs: dict[str, object] = {}
        if image_format in LOSSY_FORMATS:
            save_kwargs["quality"] = options.quality
        icc_profile = image.info.get("icc_profile")
        if icc_profile:
            save_kwargs["icc_profile"] = icc_profile

        try:
            image.save(output_path, format=image_format, **save_kwargs)
        except OSError as e:
            self.last_error_msg = f"Failed to write image {output_path}: {e}"
            logger.error(self.last_error_msg)
            raise

        self.last_error_msg = None
        logger.info(f"Saved wallpaper to {output_path}")
        return output_path
