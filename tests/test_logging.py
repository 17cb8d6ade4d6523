"""Tests for sigscan logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sigscan.logging import configure_logging, console_level, get_logger


def test_console_level_follows_flags() -> None:
    assert console_level() == logging.INFO
    assert console_level(verbose=True) == logging.DEBUG
    assert console_level(quiet=True) == logging.WARNING
    with pytest.raises(ValueError):
        console_level(verbose=True, quiet=True)


def test_log_file_records_debug_detail_when_console_is_quiet(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_file = tmp_path / "scan.log"
    logger = configure_logging(quiet=True, log_file=log_file)

    get_logger("registry").debug("Registered signature #0")
    get_logger("orchestrator").warning("Source is empty")
    for handler in logger.handlers:
        handler.flush()

    assert capsys.readouterr().err == "[sigscan] WARNING Source is empty\n"
    contents = log_file.read_text(encoding="utf-8")
    assert "DEBUG sigscan.registry: Registered signature #0" in contents
    assert "WARNING sigscan.orchestrator: Source is empty" in contents

    configure_logging()


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(verbose=True)
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
