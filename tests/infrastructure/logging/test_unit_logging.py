"""Tests for structured logging of worker units."""

import io
import json
import logging
from unittest.mock import patch

import pytest

from intmul.config import Config
from intmul.infrastructure.logging import (
    StructuredLogger, get_logger, node_context, unit_context, node_scope,
    child_node, setup_logging
)
from intmul.infrastructure.logging.formatters import HumanFormatter, JsonFormatter
from intmul.infrastructure.logging.handlers import FileHandler


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestStructuredLogger:
    """Test context injection."""

    def test_logger_creation(self):
        logger = get_logger("test.intmul.module")
        assert isinstance(logger, StructuredLogger)
        assert get_logger("test.intmul.module") is logger

    def test_context_injected(self):
        logger = get_logger("test.intmul.context")

        with node_scope('root/HL', unit='thread'):
            with patch.object(logging.Logger, '_log') as mock_log:
                logger.warning("splitting")

        extra = mock_log.call_args.kwargs['extra']
        assert extra['context']['node_id'] == 'root/HL'
        assert extra['context']['unit'] == 'thread'
        assert extra['context']['logger_name'] == 'test.intmul.context'

    def test_traceback_captured(self):
        logger = get_logger("test.intmul.errors")
        with patch.object(logging.Logger, '_log') as mock_log:
            try:
                raise ValueError("boom")
            except ValueError as e:
                logger.log_error_with_context(e, operation='multiply', digits=4)

        extra = mock_log.call_args.kwargs['extra']
        assert 'ValueError: boom' in extra['traceback']
        assert extra['context']['operation'] == 'multiply'
        assert extra['context']['digits'] == 4

    def test_log_performance(self):
        logger = get_logger("test.intmul.perf")
        logger.setLevel(logging.DEBUG)
        try:
            with patch.object(logging.Logger, '_log') as mock_log:
                logger.log_performance('multiply', 0.5, digits=8)
        finally:
            logger.setLevel(logging.NOTSET)

        level = mock_log.call_args.args[0]
        perf = mock_log.call_args.kwargs['extra']['performance']
        assert level == logging.DEBUG
        assert perf['digits_per_second'] == 16.0


class TestNodeScope:
    def test_scope_resets(self):
        assert node_context.get() is None
        with node_scope('root/HH'):
            assert node_context.get() == 'root/HH'
            with node_scope('root/HH/LL', unit='process'):
                assert node_context.get() == 'root/HH/LL'
                assert unit_context.get() == 'process'
            assert node_context.get() == 'root/HH'
        assert node_context.get() is None

    def test_child_node(self):
        assert child_node('root', 'HH') == 'root/HH'
        assert child_node(None, 'LL') == 'root/LL'


class TestFormatters:
    def make_record(self, **attrs):
        record = logging.LogRecord('intmul.core.worker', logging.INFO, __file__, 1,
                                   'combined %s', ('root',), None)
        for key, value in attrs.items():
            setattr(record, key, value)
        return record

    def test_human_formatter(self):
        record = self.make_record(context={'node_id': 'root/LH', 'unit': 'thread'},
                                  performance={'duration_seconds': 0.25, 'digits': 4})
        output = HumanFormatter(use_colors=False).format(record)
        assert 'combined root' in output
        assert '[node:root/LH | unit:thread]' in output
        assert '0.250s' in output
        assert '\033[' not in output

    def test_json_formatter_single_line(self):
        record = self.make_record(context={'node_id': 'root'})
        output = JsonFormatter().format(record)
        assert '\n' not in output
        data = json.loads(output)
        assert data['message'] == 'combined root'
        assert data['context'] == {'node_id': 'root'}
        assert data['level'] == 'INFO'


class TestSetup:
    def test_console_only(self):
        stream = io.StringIO()
        config = Config()
        setup_logging(config, log_level='INFO', stream=stream)

        get_logger('test.intmul.setup').info("hello")
        assert 'hello' in stream.getvalue()
        assert not any(isinstance(h, FileHandler) for h in logging.getLogger().handlers)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / 'logs' / 'intmul.log'
        config = Config()
        config.set('logging.file', str(log_file))
        setup_logging(config, stream=io.StringIO())

        get_logger('test.intmul.file').debug("to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text().splitlines()
        assert any(json.loads(line)['message'] == 'to file' for line in lines)
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, FileHandler)]
        assert file_handlers[0].baseFilename == str(log_file)
