import argparse
from dataclasses import dataclass
import logging as logging_module
from pathlib import Path
import sys
import tomllib
from typing import NoReturn, TypedDict, TypeVar

from mss.exception import ScreenShotError

from wallpaperer.codec.image_codec import DEFAULT_QUALITY, FormatOptions
from wallpaperer.droplet.batch import DropletProcessor
from wallpaperer.logging import (
    get_default_log_dir,
    get_logger,
    set_console_level,
    setup_logging,
)
from wallpaperer.notification.notifier import LogNotifier, Notifier
from wallpaperer.topology.monitor_query import MonitorEnumerator
from wallpaperer.topology.topology import InvalidTopology, Topology

logger = get_logger("wallpaperer")

T = TypeVar("T")

EXIT_OK = 0
EXIT_FILES_FAILED = 1
EXIT_CONFIG_ERROR = 2


class TopologySectionConfig(TypedDict, total=False):
    bezel_width: int
    monitor_widths: list[int]
    height: int


class OutputSectionConfig(TypedDict, total=False):
    format: str
    quality: int


class GeneralSectionConfig(TypedDict, total=False):
    debug: bool
    gui: bool
    workers: int


class FileConfig(TypedDict):
    topology: TopologySectionConfig
    output: OutputSectionConfig
    general: GeneralSectionConfig


class CliArgs(TypedDict):
    paths: list[Path]
    bezel_width: int | None
    monitor_widths: list[int] | None
    height: int | None
    format: str | None
    quality: int | None
    workers: int | None
    gui: bool
    debug: bool
    config: Path


@dataclass(frozen=True)
class Settings:
    """Fully resolved settings: command line over config file over defaults."""

    bezel_width: int = 0
    monitor_widths: tuple[int, ...] | None = None
    height: int | None = None
    output_format: str | None = None
    quality: int = DEFAULT_QUALITY
    workers: int = 1
    gui: bool = False
    debug: bool = False


def parse_widths(value: str) -> list[int]:
    """Parse a comma-separated list of monitor widths, e.g. ``1920,2560``."""
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as e:
        msg = f"Invalid monitor widths {value!r}: expected comma-separated integers"
        raise argparse.ArgumentTypeError(msg) from e


def parse_args(argv: list[str] | None = None) -> CliArgs:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="wallpaperer",
        description=(
            "Wallpaperer - Turn an image spanning a row of monitors, bezels "
            "included, into a bezel-free wallpaper"
        ),
    )

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Source images sized to the monitor row plus the bezel gaps",
    )

    parser.add_argument(
        "--bezel-width",
        type=int,
        default=None,
        help="Dead space on each side of a seam, in pixels (default: 0)",
    )

    parser.add_argument(
        "--monitor-widths",
        type=parse_widths,
        default=None,
        help="Comma-separated monitor widths, left to right (default: detected)",
    )

    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Shared monitor height; required with --monitor-widths",
    )

    parser.add_argument(
        "--format",
        default=None,
        help="Output format: JPEG, PNG, BMP, GIF, TIFF or WEBP (default: same as source)",
    )

    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help=f"Quality for lossy formats, 1-100 (default: {DEFAULT_QUALITY})",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files processed in parallel (default: 1)",
    )

    parser.add_argument(
        "--gui",
        action="store_true",
        help="Show messages in dialog boxes instead of the console",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose console output and log file)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path.home() / ".config" / "wallpaperer" / "config.toml",
        help="Path to configuration file (default: ~/.config/wallpaperer/config.toml)",
    )

    parsed = parser.parse_args(argv)

    return {
        "paths": parsed.paths,
        "bezel_width": parsed.bezel_width,
        "monitor_widths": parsed.monitor_widths,
        "height": parsed.height,
        "format": parsed.format,
        "quality": parsed.quality,
        "workers": parsed.workers,
        "gui": parsed.gui,
        "debug": parsed.debug,
        "config": parsed.config,
    }


def load_config(config_path: Path) -> FileConfig:
    """Load configuration from TOML file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary containing configuration values. Sections missing from the
        file are empty.
    """
    config: FileConfig = {"topology": {}, "output": {}, "general": {}}

    if not config_path.exists():
        logger.debug("Config file not found: %s", config_path)
        return config

    try:
        with Path(config_path).open("rb") as f:
            raw_config = tomllib.load(f)
        logger.info("Loaded configuration from: %s", config_path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file: %s", e)
        return config

    for section in ("topology", "output", "general"):
        if section in raw_config and isinstance(raw_config[section], dict):
            config[section] = raw_config[section]  # type: ignore[literal-required]

    return config


def _pick(cli_value: T | None, file_value: T | None, default: T) -> T:
    if cli_value is not None:
        return cli_value
    if file_value is not None:
        return file_value
    return default


def merge_config(cli_args: CliArgs, file_config: FileConfig) -> Settings:
    """Merge CLI arguments with file configuration.

    CLI arguments take precedence over file configuration, which takes
    precedence over the defaults.

    Args:
        cli_args: Parsed CLI arguments.
        file_config: Configuration loaded from file.

    Returns:
        The resolved settings.
    """
    topology_config = file_config.get("topology", {})
    output_config = file_config.get("output", {})
    general_config = file_config.get("general", {})
    defaults = Settings()

    monitor_widths = _pick(
        cli_args["monitor_widths"], topology_config.get("monitor_widths"), None
    )

    return Settings(
        bezel_width=_pick(
            cli_args["bezel_width"],
            topology_config.get("bezel_width"),
            defaults.bezel_width,
        ),
        monitor_widths=tuple(monitor_widths) if monitor_widths else None,
        height=_pick(cli_args["height"], topology_config.get("height"), None),
        output_format=_pick(cli_args["format"], output_config.get("format"), None),
        quality=_pick(
            cli_args["quality"], output_config.get("quality"), defaults.quality
        ),
        workers=_pick(
            cli_args["workers"], general_config.get("workers"), defaults.workers
        ),
        gui=cli_args["gui"] or bool(general_config.get("gui", defaults.gui)),
        debug=cli_args["debug"] or bool(general_config.get("debug", defaults.debug)),
    )


def configure_logging(*, debug_mode: bool, log_dir: Path | None = None) -> None:
    """Configure logging based on debug mode.

    Args:
        debug_mode: Whether debug mode is enabled.
        log_dir: Optional custom log directory.
    """
    if not debug_mode:
        log_dir = None
    elif log_dir is None:
        log_dir = get_default_log_dir()

    setup_logging(log_dir)

    if debug_mode:
        set_console_level(logging_module.DEBUG)


def validate_workers(workers: object) -> int:
    """Return the worker count, rejecting anything but a positive integer.

    Raises:
        ValueError: If workers is not a positive integer.
    """
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        msg = f"Workers must be a positive integer, got {workers!r}"
        raise ValueError(msg)
    return workers


def build_topology(settings: Settings) -> Topology:
    """Build the monitor row from the settings, or detect it.

    Raises:
        InvalidTopology: If the configured or detected layout is invalid.
    """
    if settings.monitor_widths:
        if settings.height is None:
            msg = "A monitor height is required when monitor widths are given"
            raise InvalidTopology(msg)
        return Topology.from_widths(
            settings.monitor_widths, settings.height, settings.bezel_width
        )

    with MonitorEnumerator() as enumerator:
        return enumerator.build_topology(settings.bezel_width)


def build_notifier(*, gui: bool) -> Notifier:
    if gui:
        # Only pull in Qt when dialogs are wanted.
        from wallpaperer.notification.message_box import MessageBoxNotifier  # noqa: PLC0415

        return MessageBoxNotifier()
    return LogNotifier()


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the application."""
    args = parse_args(argv)

    file_config = load_config(args["config"])

    settings = merge_config(args, file_config)

    configure_logging(debug_mode=settings.debug)

    try:
        options = FormatOptions(format=settings.output_format, quality=settings.quality)
        workers = validate_workers(settings.workers)
    except (TypeError, ValueError) as e:
        logger.error("Invalid settings: %s", e)
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        topology = build_topology(settings)
    except InvalidTopology as e:
        logger.error("Invalid monitor topology: %s", e)
        sys.exit(EXIT_CONFIG_ERROR)
    except ScreenShotError as e:
        logger.error("Could not detect monitors: %s", e)
        sys.exit(EXIT_CONFIG_ERROR)

    logger.info("Topology: %s", topology.describe())
    logger.info(
        "Expected source size: %dx%d",
        topology.expected_source_width(),
        topology.expected_source_height(),
    )

    notifier = build_notifier(gui=settings.gui)
    processor = DropletProcessor(topology, options, notifier)
    report = processor.process_files(args["paths"], workers=workers)

    sys.exit(EXIT_OK if report.all_succeeded else EXIT_FILES_FAILED)


if __name__ == "__main__":
    main()
