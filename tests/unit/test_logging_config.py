"""Tests for the logging configuration helpers."""

import io

import pytest

from mcp_bitbucket.logging_config import (
    ContextualLogger,
    log_operation,
    resolve_log_level,
    setup_logger,
)


class _CapturedStderr:
    """Accumulates stderr captured by pytest's capsys for the current test."""

    def __init__(self, capsys) -> None:
        self._capsys = capsys
        self._buffer = io.StringIO()

    def getvalue(self) -> str:
        self._buffer.write(self._capsys.readouterr().err)
        return self._buffer.getvalue()


@pytest.fixture
def stderr(capsys):
    # pytest re-installs its own sys.stderr capture between the setup and call
    # phases, so monkeypatching sys.stderr in a fixture is overridden; read the
    # capsys stream instead.
    return _CapturedStderr(capsys)


@pytest.mark.parametrize(
    ("verbose", "env", "expected"),
    [
        (2, {}, "DEBUG"),
        (1, {"LOG_LEVEL": "ERROR"}, "INFO"),
        (0, {"DEBUG": "yes"}, "DEBUG"),
        (0, {"LOG_LEVEL": "error"}, "ERROR"),
        (0, {}, "WARNING"),
    ],
)
def test_resolve_log_level(monkeypatch, verbose, env, expected):
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    assert resolve_log_level(verbose) == expected


def test_setup_logger_writes_to_stderr(stderr):
    logger = setup_logger(name="mcp-bitbucket.test.console", level="info")

    logger.info("hello")
    logger.debug("hidden")

    assert isinstance(logger, ContextualLogger)
    assert logger.propagate is False
    output = stderr.getvalue()
    assert "[INFO] [mcp-bitbucket.test.console] [no-context] hello" in output
    assert "hidden" not in output


def test_setup_logger_replaces_handlers(stderr):
    setup_logger(name="mcp-bitbucket.test.handlers")
    logger = setup_logger(name="mcp-bitbucket.test.handlers")
    assert len(logger.handlers) == 1


def test_setup_logger_file_handler(tmp_path, stderr):
    logger = setup_logger(
        name="mcp-bitbucket.test.file",
        level="WARNING",
        log_to_file=True,
        log_dir=str(tmp_path / "logs"),
    )

    logger.warning("to disk")
    for handler in logger.handlers:
        handler.flush()

    log_file = tmp_path / "logs" / "mcp-bitbucket.test.file.log"
    assert "to disk" in log_file.read_text()


def test_log_operation_adds_context(stderr):
    logger = setup_logger(name="mcp-bitbucket.test.operation", level="DEBUG")

    with log_operation(logger, "fetch", trace_id="abc123"):
        logger.info("working")

    logger.info("after")
    output = stderr.getvalue()
    assert "[trace_id=abc123,operation=fetch] working" in output
    assert "Operation completed: fetch" in output
    assert "[no-context] after" in output


def test_log_operation_logs_failure(stderr):
    logger = setup_logger(name="mcp-bitbucket.test.failure", level="DEBUG")

    with pytest.raises(RuntimeError):
        with log_operation(logger, "explode"):
            raise RuntimeError("boom")

    assert "Operation failed: explode" in stderr.getvalue()
    assert "boom" in stderr.getvalue()
