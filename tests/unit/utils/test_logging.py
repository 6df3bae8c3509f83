"""Unit tests for logging utilities."""

import json
import logging
from io import StringIO
from pathlib import Path

import pytest

from gittimelapse.utils import (
    DEBUG_ENV_VAR,
    create_null_logger,
    log_duration,
    open_cli_logger,
)
from gittimelapse.utils._logging import _create_logger, _log_level_from_string


class TestLogLevelFromString:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("unknown", logging.INFO),
        ],
    )
    def test_maps_names(self, level: str, expected: int) -> None:
        assert _log_level_from_string(level) == expected

    def test_debug_env_var_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(DEBUG_ENV_VAR, "1")

        assert _log_level_from_string("error", respect_env=True) == logging.DEBUG
        assert _log_level_from_string("error") == logging.ERROR


class TestCreateLogger:
    def test_json_format(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.INFO, log_format="json")

        logger.info("test_event", key="value")

        entry = json.loads(stream.getvalue())
        assert entry["event"] == "test_event"
        assert entry["key"] == "value"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_text_format(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.INFO, log_format="text")

        logger.info("test_event", key="value")

        output = stream.getvalue()
        assert "test_event" in output
        assert "key=value" in output

    def test_filters_below_level(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.WARNING)

        logger.info("hidden")
        logger.warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()


class TestOpenCliLogger:
    def test_writes_to_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "gittimelapse.log"
        with open_cli_logger(
            level="info", log_format="json", log_file=str(log_file), command="timelapse"
        ) as logger:
            logger.info("timeline_opened", commits=3)

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["event"] == "timeline_opened"
        assert entry["command"] == "timelapse"
        assert entry["commits"] == 3

    def test_closes_log_file_on_exit(self, tmp_path: Path) -> None:
        log_file = tmp_path / "gittimelapse.log"
        with open_cli_logger(level="info", log_file=str(log_file)) as logger:
            logger.info("inside")

        with pytest.raises(ValueError, match="closed file"):
            logger.info("after")
        assert "inside" in log_file.read_text()

    def test_closes_log_file_when_block_raises(self, tmp_path: Path) -> None:
        log_file = tmp_path / "gittimelapse.log"
        with (
            pytest.raises(RuntimeError),
            open_cli_logger(level="info", log_file=str(log_file)) as logger,
        ):
            raise RuntimeError

        with pytest.raises(ValueError, match="closed file"):
            logger.info("after")

    def test_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        with open_cli_logger(level="info") as logger:
            logger.info("to_stderr")

        captured = capsys.readouterr()
        assert "to_stderr" in captured.err
        assert captured.out == ""

    def test_stderr_stays_usable_after_exit(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with open_cli_logger(level="info") as logger:
            pass

        logger.info("still_open")

        assert "still_open" in capsys.readouterr().err

    def test_verbose_enables_debug(self, tmp_path: Path) -> None:
        log_file = tmp_path / "debug.log"
        with open_cli_logger(
            level="error", log_file=str(log_file), verbose=True
        ) as logger:
            logger.debug("detail")

        assert "detail" in log_file.read_text()

    def test_debug_env_var_enables_debug(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(DEBUG_ENV_VAR, "1")
        log_file = tmp_path / "debug.log"
        with open_cli_logger(level="error", log_file=str(log_file)) as logger:
            logger.debug("detail")

        assert "detail" in log_file.read_text()

    def test_respects_level(self, tmp_path: Path) -> None:
        log_file = tmp_path / "quiet.log"
        with open_cli_logger(level="warning", log_file=str(log_file)) as logger:
            logger.info("chatty")

        assert "chatty" not in log_file.read_text()


class TestCreateNullLogger:
    def test_discards_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = create_null_logger()

        logger.error("ignored")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""


class TestLogDuration:
    def test_logs_duration_and_extra_fields(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.DEBUG)

        with log_duration(logger, "blob_read", path="f.txt") as extra:
            extra["size"] = 12

        entry = json.loads(stream.getvalue())
        assert entry["event"] == "blob_read"
        assert entry["path"] == "f.txt"
        assert entry["size"] == 12
        assert entry["duration_ms"] >= 0

    def test_logs_when_block_raises(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.DEBUG)

        with pytest.raises(RuntimeError), log_duration(logger, "failing"):
            raise RuntimeError

        assert json.loads(stream.getvalue())["event"] == "failing"

    def test_silent_above_debug(self) -> None:
        stream = StringIO()
        logger = _create_logger(stream, log_level=logging.INFO)

        with log_duration(logger, "quiet"):
            pass

        assert stream.getvalue() == ""
