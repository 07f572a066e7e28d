"""
Tests for the split-stream logging helpers.
"""

import logging

import pytest

from textproto_validator.utils.logging_utils import configure_split_stream_logging, verbosity_to_level


@pytest.mark.parametrize(
    "verbosity, default, expected",
    [
        (0, logging.WARNING, logging.WARNING),
        (1, logging.WARNING, logging.INFO),
        (1, logging.DEBUG, logging.DEBUG),
        (2, logging.WARNING, logging.DEBUG),
        (5, logging.ERROR, logging.DEBUG),
    ],
)
def test_verbosity_to_level(verbosity, default, expected):
    assert verbosity_to_level(verbosity, default) == expected


def test_records_split_between_stdout_and_stderr(capsys, restore_root_logging):
    configure_split_stream_logging(level=logging.DEBUG, formatter=logging.Formatter("%(levelname)s %(message)s"))
    logger = logging.getLogger("textproto_validator.test")

    logger.debug("staged")
    logger.info("compiled")
    logger.warning("protoc warning")
    logger.error("failed")

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["DEBUG staged", "INFO compiled"]
    assert captured.err.splitlines() == ["WARNING protoc warning", "ERROR failed"]


def test_root_level_filters_both_streams(capsys, restore_root_logging):
    configure_split_stream_logging(level=logging.WARNING)
    logger = logging.getLogger("textproto_validator.test")

    logger.info("hidden")
    logger.warning("shown")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "shown" in captured.err
    assert len(logging.getLogger().handlers) == 2
