import io
import logging

import fixaugment
from fixaugment.core.config import LoggingConfig
from fixaugment.core.log import configure_logging, get_logger, temp_level


def test_configure_logging_sets_logger_level():
    logger = logging.getLogger("fixaugment")
    logger.setLevel(logging.WARNING)

    configure_logging(level="DEBUG")

    assert logger.level == logging.DEBUG


def test_temp_level_changes_and_restores():
    logger = logging.getLogger("fixaugment.test.temp")
    logger.setLevel(logging.WARNING)
    original_level = logger.level

    with temp_level(logging.DEBUG, name=logger.name):
        assert logger.level == logging.DEBUG

    assert logger.level == original_level


def test_configure_logging_writes_to_stream():
    stream = io.StringIO()
    logger = configure_logging(level="INFO", stream=stream, fmt="%(levelname)s %(message)s", logger_name="fixaugment.test.stream")

    get_logger("fixaugment.test.stream").info("chunked")

    assert logger.name == "fixaugment.test.stream"
    assert "INFO chunked" in stream.getvalue()


def test_logging_config_apply():
    LoggingConfig(level="ERROR", logger_name="fixaugment.test.apply").apply()

    logger = logging.getLogger("fixaugment.test.apply")
    assert logger.level == logging.ERROR
    assert logger.propagate is False


def test_package_exports_primary_api():
    assert "Session" in fixaugment.__all__
    assert callable(fixaugment.chunk_input)
    assert isinstance(fixaugment.__version__, str)
