# tests/test_logging.py
"""
Tests for logger naming and context formatting.
"""

import logging

from noderpc.core.logging import (
    LoggingMixin,
    NodeRpcFormatter,
    NodeRpcLogger,
    log_with_context,
)


class Worker(LoggingMixin):
    pass


def make_record(**context):
    logger = NodeRpcLogger.get_logger('tests')
    record = logger.makeRecord(logger.name, logging.WARNING, "", 0, "Lower block number", (), None)
    record.__dict__.update(context)
    return record


class TestNodeRpcLogger:

    def test_names_are_prefixed(self):
        assert NodeRpcLogger.get_logger('api.registry').name == 'noderpc.api.registry'
        assert NodeRpcLogger.get_logger('noderpc.stream').name == 'noderpc.stream'

    def test_class_logger_name(self):
        assert Worker().logger.name == f'noderpc.{__name__}.Worker'

    def test_configure_once(self):
        NodeRpcLogger.configure(log_level="DEBUG")
        NodeRpcLogger.configure(log_level="ERROR")

        assert logging.getLogger('noderpc').level == logging.DEBUG
        assert len(logging.getLogger('noderpc').handlers) == 1

    def test_file_output(self, tmp_path):
        NodeRpcLogger.configure(log_dir=tmp_path, console_enabled=False, file_enabled=True)

        log_with_context(NodeRpcLogger.get_logger('tests'), logging.INFO, "Client created",
                         transport="http", method_count=3)
        for handler in logging.getLogger('noderpc').handlers:
            handler.flush()

        content = (tmp_path / 'noderpc.log').read_text()
        assert "Client created | transport=http method_count=3" in content


class TestNodeRpcFormatter:

    def test_plain_format_ignores_context(self):
        line = NodeRpcFormatter().format(make_record(observed=48, current=50))

        assert line.endswith("noderpc.tests - WARNING - Lower block number")

    def test_context_in_declared_order(self):
        line = NodeRpcFormatter(include_context=True).format(
            make_record(current=50, observed=48, mode="head", unrelated="x")
        )

        assert line.endswith("Lower block number | mode=head observed=48 current=50")
