"""Tests for structured logging and request-id propagation."""

import json
import logging

from pulse.observability import (
    HumanFormatter,
    JSONFormatter,
    RequestContext,
    bind_user,
    configure_logging,
    get_request_id,
    get_user_id,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord("pulse.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "pulse.test"
        assert data["message"] == "hello"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        data = json.loads(JSONFormatter().format(_record(project_id="p1", record_id="c1")))

        assert data["project_id"] == "p1"
        assert data["record_id"] == "c1"
        assert "lineno" not in data

    def test_request_id_from_context(self):
        with RequestContext(request_id="req-abc"):
            data = json.loads(JSONFormatter().format(_record()))
        assert data["request_id"] == "req-abc"

    def test_user_id_from_context(self):
        with RequestContext():
            bind_user("user-42")
            data = json.loads(JSONFormatter().format(_record()))
        assert data["user_id"] == "user-42"

    def test_no_user_outside_request(self):
        assert "user_id" not in json.loads(JSONFormatter().format(_record()))


class TestHumanFormatter:
    def test_includes_request_id(self):
        with RequestContext(request_id="req-0123456789abcdef"):
            line = HumanFormatter().format(_record())

        assert "[INFO] pulse.test: [req-01234567] hello" in line

    def test_includes_bound_user(self):
        with RequestContext(request_id="req-0123456789abcdef"):
            bind_user("user-123456789")
            line = HumanFormatter().format(_record())

        assert "[req-01234567 user=user-123] hello" in line


class TestRequestContext:
    def test_resets_after_exit(self):
        assert get_request_id() is None
        with RequestContext() as ctx:
            assert get_request_id() == ctx.request_id
            assert ctx.request_id.startswith("req-")
        assert get_request_id() is None

    def test_user_binding_does_not_leak(self):
        with RequestContext():
            bind_user("user-1")
            assert get_user_id() == "user-1"
        assert get_user_id() is None

        with RequestContext():
            assert get_user_id() is None


class TestConfigureLogging:
    def test_installs_single_handler(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            configure_logging("DEBUG", json_format=True)
            configure_logging("DEBUG", json_format=True)

            stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
            assert len(stream_handlers) == 1
            assert isinstance(stream_handlers[0].formatter, JSONFormatter)
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])

    def test_log_file_gets_rotating_handler(self, tmp_path):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        log_file = tmp_path / "logs" / "pulse.log"
        try:
            configure_logging("INFO", json_format=False, log_file=str(log_file))
            logging.getLogger("pulse.test").info("to file")
            for handler in root.handlers:
                handler.flush()

            assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "to file"
        finally:
            for handler in root.handlers:
                if handler not in saved[0]:
                    handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
