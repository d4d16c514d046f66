import logging
import sys
from unittest.mock import MagicMock, patch

import pytest

from wallpaperer.notification import LogNotifier, instructions_for
from wallpaperer.topology import Topology


class TestInstructions:
    def test_names_expected_source_size(self, triple_topology: Topology) -> None:
        assert (
            instructions_for(triple_topology) == "Please drop a 5800 × 1080 image on me."
        )

    def test_single_monitor(self) -> None:
        topology = Topology.from_widths([2560], height=1440, bezel_width=20)
        assert instructions_for(topology) == "Please drop a 2560 × 1440 image on me."


class TestLogNotifier:
    def test_records_messages(self) -> None:
        notifier = LogNotifier()

        notifier.notify("first")
        notifier.notify("second")

        assert notifier.messages == ["first", "second"]

    def test_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            LogNotifier().notify("Please drop a 10 × 10 image on me.")

        assert caplog.records[-1].levelname == "WARNING"
        assert "Please drop a 10 × 10 image on me." in caplog.text


class TestMessageBoxNotifier:
    @pytest.fixture(autouse=True)
    def _require_qt(self) -> None:
        pytest.importorskip("PyQt6.QtWidgets")

    def test_shows_information_dialog(self) -> None:
        from wallpaperer.notification.message_box import (  # noqa: PLC0415
            MessageBoxNotifier,
        )

        notifier = MessageBoxNotifier(app=MagicMock())
        with patch(
            "wallpaperer.notification.message_box.QMessageBox"
        ) as mock_message_box:
            notifier.notify("Please drop a 5800 × 1080 image on me.")

        mock_message_box.information.assert_called_once_with(
            None, "Wallpaperer", "Please drop a 5800 × 1080 image on me."
        )

    def test_creates_application_when_missing(self) -> None:
        from wallpaperer.notification.message_box import (  # noqa: PLC0415
            MessageBoxNotifier,
        )

        with (
            patch("wallpaperer.notification.message_box.QApplication") as mock_app,
            patch("wallpaperer.notification.message_box.QMessageBox"),
        ):
            mock_app.instance.return_value = None
            notifier = MessageBoxNotifier()
            notifier.notify("hello")
            notifier.notify("again")

        mock_app.assert_called_once_with(sys.argv)

    def test_reuses_running_application(self) -> None:
        from wallpaperer.notification.message_box import (  # noqa: PLC0415
            MessageBoxNotifier,
        )

        with (
            patch("wallpaperer.notification.message_box.QApplication") as mock_app,
            patch("wallpaperer.notification.message_box.QMessageBox"),
        ):
            mock_app.instance.return_value = MagicMock()
            MessageBoxNotifier().notify("hello")

        mock_app.assert_not_called()
