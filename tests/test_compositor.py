from collections.abc import Callable
from unittest.mock import patch

import numpy as np
from PIL import Image
import pytest

from wallpaperer.compositor import (
    CompositionResult,
    Compositor,
    DimensionMismatch,
    ValidationResult,
)
from wallpaperer.topology import Topology

ImageFactory = Callable[[int, int], Image.Image]

TOPOLOGIES = [
    ([64], 16, 0),
    ([64], 16, 9),
    ([32, 32, 32], 8, 3),
    ([40, 90, 25, 60], 12, 6),
    ([300, 1], 4, 2),
]


def columns(image: Image.Image, start: int, stop: int) -> np.ndarray:
    return np.asarray(image)[:, start:stop]


def compose_ok(topology: Topology, source: Image.Image) -> Image.Image:
    result = Compositor().compose(topology, source)
    assert result.is_success
    assert result.image is not None
    return result.image


class TestValidate:
    def test_valid_source(
        self, triple_topology: Topology, column_coded_image: ImageFactory
    ) -> None:
        compositor = Compositor()
        source = column_coded_image(5800, 1080)

        result = compositor.validate(triple_topology, source)

        assert result == ValidationResult(is_valid=True)
        assert result.error is None
        assert compositor.last_error_msg is None

    def test_wrong_width(self, triple_topology: Topology) -> None:
        compositor = Compositor()
        source = Image.new("RGB", (5760, 1080))

        result = compositor.validate(triple_topology, source)

        assert result.is_valid is False
        assert result.error == DimensionMismatch(
            expected_width=5800,
            expected_height=1080,
            actual_width=5760,
            actual_height=1080,
        )
        assert compositor.last_error_msg == "Expected a 5800x1080 image, got 5760x1080"

    def test_wrong_height(self, triple_topology: Topology) -> None:
        result = Compositor().validate(triple_topology, Image.new("RGB", (5800, 1200)))

        assert result.is_valid is False
        assert result.error is not None
        assert result.error.actual_height == 1200

    def test_error_cleared_after_valid_source(self, triple_topology: Topology) -> None:
        compositor = Compositor()
        compositor.validate(triple_topology, Image.new("RGB", (10, 10)))
        assert compositor.last_error_msg is not None

        compositor.validate(triple_topology, Image.new("RGB", (5800, 1080)))

        assert compositor.last_error_msg is None


class TestDimensionMismatch:
    def test_message(self) -> None:
        mismatch = DimensionMismatch(5800, 1080, 1920, 1080)
        assert mismatch.message == "Expected a 5800x1080 image, got 1920x1080"

    def test_instructions_name_expected_size(self) -> None:
        mismatch = DimensionMismatch(5800, 1080, 1920, 1080)
        assert mismatch.instructions == "Please drop a 5800 × 1080 image on me."


class TestCompose:
    def test_three_monitor_scenario(
        self, triple_topology: Topology, column_coded_image: ImageFactory
    ) -> None:
        source = column_coded_image(5800, 1080)

        destination = compose_ok(triple_topology, source)

        assert destination.size == (5760, 1080)
        assert destination.mode == source.mode
        assert np.array_equal(columns(destination, 0, 1920), columns(source, 0, 1920))
        assert np.array_equal(
            columns(destination, 1920, 3840), columns(source, 1940, 3860)
        )
        assert np.array_equal(
            columns(destination, 3840, 5760), columns(source, 3880, 5800)
        )

    def test_wrong_width_returns_mismatch_without_allocating(
        self, triple_topology: Topology
    ) -> None:
        compositor = Compositor()
        source = Image.new("RGB", (5760, 1080))
        expected_error = compositor.validate(triple_topology, source).error

        with patch("wallpaperer.compositor.compositor.Image.new") as mock_new:
            result = compositor.compose(triple_topology, source)

        mock_new.assert_not_called()
        assert result == CompositionResult(image=None, error=expected_error)
        assert result.is_success is False

    def test_zero_bezel_is_identity(self, column_coded_image: ImageFactory) -> None:
        topology = Topology.from_widths([2560, 1080], height=1440, bezel_width=0)
        source = column_coded_image(3640, 1440)

        destination = compose_ok(topology, source)

        assert destination.size == (3640, 1440)
        assert np.array_equal(np.asarray(destination), np.asarray(source))

    def test_zero_bezel_returns_a_new_buffer(self, column_coded_image: ImageFactory) -> None:
        topology = Topology.from_widths([30, 30], height=10)
        source = column_coded_image(60, 10)

        destination = compose_ok(topology, source)
        destination.putpixel((0, 0), (1, 2, 3))

        assert destination is not source
        assert source.getpixel((0, 0)) == (0, 0, 0)

    def test_single_monitor_is_full_copy(self, column_coded_image: ImageFactory) -> None:
        topology = Topology.from_widths([1920], height=1080, bezel_width=15)
        source = column_coded_image(1920, 1080)

        destination = compose_ok(topology, source)

        assert np.array_equal(np.asarray(destination), np.asarray(source))

    def test_source_is_not_modified(
        self, small_topology: Topology, column_coded_image: ImageFactory
    ) -> None:
        source = column_coded_image(170, 20)
        before = np.asarray(source).copy()

        compose_ok(small_topology, source)

        assert np.array_equal(np.asarray(source), before)

    def test_bezel_pixels_are_dropped(self, small_topology: Topology) -> None:
        marker = (255, 0, 255)
        source = Image.new("RGB", (170, 20), (10, 20, 30))
        for mapping in small_topology.region_mappings()[1:]:
            for x in range(mapping.source.x - 10, mapping.source.x):
                for y in range(20):
                    source.putpixel((x, y), marker)

        destination = compose_ok(small_topology, source)

        assert marker not in {color for _, color in destination.getcolors(maxcolors=10)}

    def test_idempotent(
        self, small_topology: Topology, column_coded_image: ImageFactory
    ) -> None:
        source = column_coded_image(170, 20)

        first = compose_ok(small_topology, source)
        second = compose_ok(small_topology, source)

        assert first.tobytes() == second.tobytes()

    @pytest.mark.parametrize(("widths", "height", "bezel"), TOPOLOGIES)
    def test_each_monitor_copied_pixel_exact(
        self,
        widths: list[int],
        height: int,
        bezel: int,
        column_coded_image: ImageFactory,
    ) -> None:
        topology = Topology.from_widths(widths, height=height, bezel_width=bezel)
        source = column_coded_image(topology.expected_source_width(), height)

        destination = compose_ok(topology, source)

        assert destination.size == (
            topology.expected_destination_width(),
            topology.expected_destination_height(),
        )
        for mapping in topology.region_mappings():
            assert np.array_equal(
                columns(destination, mapping.destination.x, mapping.destination.right),
                columns(source, mapping.source.x, mapping.source.right),
            )

    @pytest.mark.parametrize("mode", ["L", "RGBA", "I"])
    def test_preserves_pixel_format(self, small_topology: Topology, mode: str) -> None:
        source = Image.new(mode, (170, 20))
        source.putpixel((50, 3), 200 if mode != "RGBA" else (1, 2, 3, 4))

        destination = compose_ok(small_topology, source)

        assert destination.mode == mode
        # Column 50 of the source is column 40 of the destination.
        assert destination.getpixel((40, 3)) == source.getpixel((50, 3))

    def test_palette_image_keeps_palette(self, small_topology: Topology) -> None:
        source = Image.new("RGB", (170, 20), (200, 10, 10)).convert(
            "P", palette=Image.Palette.ADAPTIVE, colors=4
        )

        destination = compose_ok(small_topology, source)

        assert destination.mode == "P"
        assert destination.convert("RGB").getpixel((0, 0)) == (200, 10, 10)

    def test_metadata_matches_zero_bezel_copy(self, small_topology: Topology) -> None:
        def tagged_source(width: int) -> Image.Image:
            image = Image.new("P", (width, 20))
            image.putpalette([0, 0, 0, 255, 255, 255])
            image.info["transparency"] = 0
            image.info["icc_profile"] = b"fake-icc"
            return image

        zero_bezel = Topology.from_widths([40, 60, 50], height=20, bezel_width=0)
        copied = compose_ok(zero_bezel, tagged_source(150))
        composed = compose_ok(small_topology, tagged_source(170))

        for destination in (copied, composed):
            assert destination.info["transparency"] == 0
            assert destination.info["icc_profile"] == b"fake-icc"
