"""DropletProcessor - Turns dropped source images into bezel-free wallpapers."""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from wallpaperer.codec.image_codec import FormatOptions, ImageCodec
from wallpaperer.compositor.compositor import Compositor, DimensionMismatch
from wallpaperer.logging import get_logger
from wallpaperer.notification.notifier import Notifier, instructions_for
from wallpaperer.topology.topology import Topology

logger = get_logger("wallpaperer.droplet")


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one source file."""

    source_path: Path
    output_path: Path | None = None
    mismatch: DimensionMismatch | None = None
    exception: Exception | None = None

    @property
    def is_success(self) -> bool:
        return self.output_path is not None

    @property
    def error_message(self) -> str | None:
        if self.mismatch is not None:
            return f"{self.source_path.name}: {self.mismatch.instructions}"
        if self.exception is not None:
            return f"{self.source_path.name}: {self.exception}"
        return None


@dataclass(frozen=True)
class BatchReport:
    outcomes: tuple[FileOutcome, ...] = ()

    @property
    def succeeded(self) -> tuple[FileOutcome, ...]:
        return tuple(o for o in self.outcomes if o.is_success)

    @property
    def failed(self) -> tuple[FileOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.is_success)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class DropletProcessor:
    """Runs decode, compose and encode for every dropped file.

    A file that fails, whether its size is wrong or it cannot be read or
    written, is skipped and the rest of the batch still runs. Each failure is
    reported to the notifier once the batch is done.

    With more than one worker the codec and compositor are shared between
    threads, so their ``last_error_msg`` holds whichever file failed last in
    time. ``last_error_msg`` on the processor is set from the finished batch
    and always names the last failed file in input order.
    """

    def __init__(
        self,
        topology: Topology,
        options: FormatOptions,
        notifier: Notifier,
        codec: ImageCodec | None = None,
        compositor: Compositor | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            topology: The monitor row every source image is checked against.
            options: Output format and quality.
            notifier: Receives user-facing messages.
            codec: Optional ImageCodec instance.
            compositor: Optional Compositor instance.
        """
        self._topology = topology
        self._options = options
        self._notifier = notifier
        self._codec = codec or ImageCodec()
        self._compositor = compositor or Compositor()
        self.last_error_msg: str | None = None

    @property
    def topology(self) -> Topology:
        return self._topology

    def process_file(self, source_path: Path | str) -> FileOutcome:
        """Create ``<name>-wallpapered.<ext>`` next to one source image.

        Args:
            source_path: Path of the oversized source image.

        Returns:
            FileOutcome with the written path, or the mismatch or codec
            exception that caused the file to be skipped.
        """
        source_path = Path(source_path)
        logger.info(f"Processing {source_path}")

        try:
            source = self._codec.decode(source_path)
        except (OSError, ValueError) as e:
            return self._failed(FileOutcome(source_path=source_path, exception=e))

        source_format = source.format
        result = self._compositor.compose(self._topology, source)
        if not result.is_success or result.image is None:
            return self._failed(
                FileOutcome(source_path=source_path, mismatch=result.error)
            )

        output_path = self._codec.output_path_for(
            source_path, self._options, source_format
        )
        try:
            written = self._codec.encode(
                result.image, output_path, self._options, source_format
            )
        except (OSError, ValueError) as e:
            return self._failed(FileOutcome(source_path=source_path, exception=e))

        return FileOutcome(source_path=source_path, output_path=written)

    def _failed(self, outcome: FileOutcome) -> FileOutcome:
        self.last_error_msg = outcome.error_message
        logger.error(f"Skipping {outcome.error_message}")
        return outcome

    def process_files(
        self, source_paths: Sequence[Path | str], workers: int = 1
    ) -> BatchReport:
        """Process every file, continuing past per-file failures.

        Args:
            source_paths: The dropped files, in order.
            workers: Number of files processed concurrently.

        Returns:
            BatchReport with one outcome per file, in input order.
        """
        if not source_paths:
            logger.info("No input files given")
            self._notifier.notify(instructions_for(self._topology))
            return BatchReport()

        if workers > 1 and len(source_paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = tuple(executor.map(self.process_file, source_paths))
        else:
            outcomes = tuple(self.process_file(path) for path in source_paths)

        report = BatchReport(outcomes=outcomes)
        self.last_error_msg = (
            report.failed[-1].error_message if report.failed else None
        )
        for outcome in report.failed:
            if outcome.error_message is not None:
                self._notifier.notify(outcome.error_message)

        logger.info(
            f"Processed {len(report.outcomes)} file(s): "
            f"{len(report.succeeded)} succeeded, {len(report.failed)} failed"
        )
        return report
