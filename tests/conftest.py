from collections.abc import Callable, Generator
import logging
from pathlib import Path

import numpy as np
from PIL import Image
import pytest

from wallpaperer.topology.topology import Topology


@pytest.fixture(autouse=True)
def clear_logger_cache() -> Generator[None, None, None]:
    """Clear the logger cache before and after each test to prevent test interference."""
    from wallpaperer import logging as wp_logging

    def reset() -> None:
        wp_logging.COMPONENT_LOGGERS.clear()
        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if logger_name.startswith("wallpaperer") or logger_name.startswith("test_"):
                logger = logging.getLogger(logger_name)
                # Close all handlers before clearing
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True

    reset()
    yield
    reset()


@pytest.fixture
def temp_log_dir(tmp_path: Path) -> Generator[Path, None, None]:
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    yield log_dir


def make_column_coded_image(width: int, height: int) -> Image.Image:
    """Build an RGB image whose pixels encode their own coordinates.

    Red and green hold the column index (low and high byte), blue holds the
    row index, so any misplaced column shows up in a pixel comparison.
    """
    columns = np.arange(width)
    rows = np.arange(height)
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[:, :, 0] = columns % 256
    arr[:, :, 1] = (columns // 256) % 256
    arr[:, :, 2] = (rows % 256)[:, None]
    return Image.fromarray(arr)


@pytest.fixture
def column_coded_image() -> Callable[[int, int], Image.Image]:
    return make_column_coded_image


@pytest.fixture
def triple_topology() -> Topology:
    """Three 1920x1080 monitors with 10px bezels."""
    return Topology.from_widths([1920, 1920, 1920], height=1080, bezel_width=10)


@pytest.fixture
def small_topology() -> Topology:
    """Mixed-width row small enough to write to disk quickly."""
    return Topology.from_widths([40, 60, 50], height=20, bezel_width=5)
