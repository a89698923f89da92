"""Unit tests for structured logging helpers."""

from __future__ import annotations

import logging

from file_ingestion.logger import Timer, batch_id_var, get_logger, setup_logging


def test_extra_data_rendered(caplog) -> None:
    logger = get_logger("file_ingestion.test")
    with caplog.at_level(logging.INFO, logger="file_ingestion.test"):
        logger.info("Processed", extra_data={"file_name": "a.pdf", "pages": 3})

    assert caplog.messages == ["Processed [file_name=a.pdf, pages=3]"]


def test_bound_fields_and_batch_id(caplog) -> None:
    logger = get_logger("file_ingestion.test").bind(file_name="a.pdf")
    token = batch_id_var.set("batch-1")
    try:
        with caplog.at_level(logging.INFO, logger="file_ingestion.test"):
            logger.info("Done", extra_data={"pages": 2})
            logger.info("Override", extra_data={"file_name": "b.pdf"})
    finally:
        batch_id_var.reset(token)

    assert caplog.messages == [
        "Done [file_name=a.pdf, pages=2, batch_id=batch-1]",
        "Override [file_name=b.pdf, batch_id=batch-1]",
    ]


def test_record_attributed_to_caller(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="file_ingestion.test"):
        get_logger("file_ingestion.test").warning("here")

    assert caplog.records[0].funcName == "test_record_attributed_to_caller"


def test_disabled_level_skipped(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="file_ingestion.test"):
        get_logger("file_ingestion.test").debug("hidden")
    assert caplog.messages == []


def test_setup_logging_sets_level() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_timer() -> None:
    with Timer("stage") as timer:
        assert timer.get_elapsed_ms() >= 0
    assert timer.elapsed_ms is not None
    assert Timer("unused").get_elapsed_ms() == 0
