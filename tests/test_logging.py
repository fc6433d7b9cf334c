"""
Logging Tests
-------------
op_id propagation, JSON file output and handler lifecycle.
"""

import json
import logging

import pytest

from infra.logging import (
    JSONFormatter, JSONLinesFileHandler, OperationContext, OperationIdFilter,
    configure_logging, generate_op_id, get_log_file_path, get_logger, get_op_id,
    shutdown_logging, with_operation_context,
)


@pytest.fixture(autouse=True)
def reset_logging():
    shutdown_logging()
    yield
    shutdown_logging()


class TestOperationContext:
    """op_id scoping."""

    def test_op_id_format(self):
        op_id = generate_op_id()
        assert op_id.startswith("op_")
        assert len(op_id) == 15

    def test_context_sets_and_restores(self):
        assert get_op_id() is None
        with OperationContext() as op_id:
            assert get_op_id() == op_id
            with OperationContext("op_inner") as inner:
                assert get_op_id() == inner == "op_inner"
            assert get_op_id() == op_id
        assert get_op_id() is None

    def test_decorator_reuses_current_op_id(self):
        @with_operation_context
        def current():
            return get_op_id()

        with OperationContext("op_outer"):
            assert current() == "op_outer"
        assert current().startswith("op_")
        assert get_op_id() is None

    def test_filter_adds_op_id(self):
        record = logging.LogRecord("rl4.x", logging.INFO, __file__, 1, "msg", None, None)
        with OperationContext("op_filter"):
            OperationIdFilter().filter(record)
        assert record.op_id == "op_filter"

    def test_filter_default(self):
        record = logging.LogRecord("rl4.x", logging.INFO, __file__, 1, "msg", None, None)
        OperationIdFilter().filter(record)
        assert record.op_id == "-"


class TestLoggers:
    """Namespace handling."""

    def test_prefix_added(self):
        assert get_logger("commands.router").name == "rl4.commands.router"

    def test_prefix_not_doubled(self):
        assert get_logger("rl4.validation").name == "rl4.validation"
        assert get_logger("rl4").name == "rl4"


class TestJSONFormatter:
    """Structured records."""

    def test_extra_fields(self):
        record = logging.LogRecord("rl4.router", logging.INFO, __file__, 1, "found %d", (3,), None)
        record.op_id = "op_x"
        record.intent = "analyze"
        record.matches = 3

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "found 3"
        assert data["level"] == "INFO"
        assert data["op_id"] == "op_x"
        assert data["intent"] == "analyze"
        assert data["matches"] == 3
        assert "registry_path" not in data


class TestConfigureLogging:
    """Handler setup and teardown."""

    def test_console_only(self):
        configure_logging(level=logging.WARNING, file=False)
        root = logging.getLogger("rl4")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert not root.propagate
        assert get_log_file_path() is None

    def test_file_logging_writes_json(self, tmp_path):
        configure_logging(level=logging.INFO, log_dir=str(tmp_path / "logs"), console=False)
        logger = get_logger("commands.router")

        with OperationContext("op_file"):
            logger.info("Registry loaded", extra={"total_commands": 4})
        shutdown_logging()

        path = tmp_path / "logs" / "rl4.log"
        line = json.loads(path.read_text(encoding="utf-8").splitlines()[-1])
        assert line["message"] == "Registry loaded"
        assert line["op_id"] == "op_file"
        assert line["total_commands"] == 4

    def test_file_receives_debug_records(self, tmp_path):
        configure_logging(level=logging.WARNING, log_dir=str(tmp_path), console=True)
        get_logger("commands.scanner").debug("Scanning extension")
        shutdown_logging()

        lines = (tmp_path / "rl4.log").read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["level"] == "DEBUG"

    def test_configure_is_idempotent(self, tmp_path):
        configure_logging(log_dir=str(tmp_path), console=False)
        configure_logging(log_dir=str(tmp_path), console=False)
        assert len(logging.getLogger("rl4").handlers) == 1

    def test_shutdown_restores_propagation(self, tmp_path):
        configure_logging(log_dir=str(tmp_path))
        shutdown_logging()
        root = logging.getLogger("rl4")
        assert root.handlers == []
        assert root.propagate
        assert root.level == logging.NOTSET


class TestFileRotation:
    """Size-based rotation."""

    def test_rotates_when_over_limit(self, tmp_path):
        path = tmp_path / "rl4.log"
        handler = JSONLinesFileHandler(path, max_bytes=100, backup_count=2)
        handler.setFormatter(logging.Formatter("%(message)s"))
        try:
            for i in range(10):
                handler.emit(logging.LogRecord("rl4", logging.INFO, __file__, 1, "x" * 60, None, None))
        finally:
            handler.close()

        assert path.exists()
        assert (tmp_path / "rl4.log.1").exists()
        assert (tmp_path / "rl4.log.2").exists()
        assert not (tmp_path / "rl4.log.3").exists()
