from __future__ import annotations

import logging
from pathlib import Path

import allure
import pytest

from review_queue.logging_setup import configure_logging

pytestmark = [
    allure.epic("Review Queue"),
    allure.feature("Logging"),
]


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.captureWarnings(False)


def test_log_file_receives_configured_level(tmp_path: Path, restore_root_logger) -> None:
    log_path = tmp_path / "logs" / "review-queue.log"

    configure_logging(log_path=log_path, level="info")
    logging.getLogger("review_queue.test").info("Created submission request %s", "42")
    logging.getLogger("review_queue.test").debug("hidden")
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = log_path.read_text("utf-8")
    assert "INFO review_queue.test: Created submission request 42" in content
    assert "hidden" not in content


def test_without_log_file_only_errors_reach_stderr(restore_root_logger) -> None:
    configure_logging(log_path=None)

    [handler] = restore_root_logger.handlers
    assert isinstance(handler, logging.StreamHandler)
    assert handler.level == logging.ERROR
    assert logging.getLogger("httpx").level == logging.WARNING
