import logging
from logging.handlers import RotatingFileHandler

from rulesbot.command.logs_cmds import tail_lines
from rulesbot.util.logger import (
    ColorFormatter,
    LOGS_DIR,
    get_log_filepath,
    get_logger,
    get_session_handlers,
    handle_exception,
    setup_logger,
    should_use_color,
)


class DummyStream:
    def __init__(self):
        self.written = []

    def write(self, msg):
        self.written.append(msg)

    def isatty(self):
        return True


def test_get_logger_returns_logger():
    logger = get_logger("test_logger")
    assert isinstance(logger, logging.Logger)
    assert any(isinstance(h, logging.Handler) for h in logger.handlers)


def test_setup_logger_idempotent():
    logger1 = setup_logger("test_logger_idem")
    logger2 = setup_logger("test_logger_idem")
    assert logger1 is logger2
    assert len(logger1.handlers) == 2


def test_color_formatter_applies_color():
    formatter = ColorFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.ERROR, "", 0, "error occurred", None, None)
    formatted = formatter.format(record)
    assert "\033[31m" in formatted and "error occurred" in formatted


def test_should_use_color_true(monkeypatch):
    monkeypatch.setattr("sys.stderr", DummyStream())
    assert should_use_color() is True


def test_log_file_is_shared_and_inside_logs_dir():
    path = get_log_filepath()
    assert path.parent == LOGS_DIR
    assert get_log_filepath() == path


def test_handle_exception_logs_error(caplog):
    class DummyException(Exception):
        pass
    with caplog.at_level(logging.ERROR):
        try:
            raise DummyException("fail")
        except DummyException as exc:
            handle_exception(DummyException, exc, exc.__traceback__)
    assert any("Uncaught exception" in r.message for r in caplog.records)


def test_loggers_share_one_file_handler():
    first = get_logger("test_shared_a")
    second = get_logger("test_shared_b")

    file_handlers = {id(h) for h in first.handlers + second.handlers if isinstance(h, RotatingFileHandler)}
    assert len(file_handlers) == 1


def test_records_after_rollover_land_in_current_log(monkeypatch):
    writer = get_logger("test_rollover_writer")
    other = get_logger("test_rollover_other")
    file_handler = next(h for h in get_session_handlers() if isinstance(h, RotatingFileHandler))
    monkeypatch.setattr(file_handler, "maxBytes", 400)

    for number in range(40):
        writer.debug("filler line %d", number)
    other.debug("marker-from-second-logger")
    file_handler.flush()

    assert "marker-from-second-logger" in tail_lines(get_log_filepath(), 50)
