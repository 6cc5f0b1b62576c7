"""Tests for the error taxonomy and structured error logging."""

import json
import logging

import pytest

from statement_parser.utils.error_handler import (
    ErrorCategory,
    ErrorHandler,
    FormatError,
    JSONFormatter,
    SchemaError,
    StatementParserError,
    handle_file_access_error,
    handle_statement_error,
)


@pytest.fixture
def handler(tmp_path):
    handler = ErrorHandler(log_directory=str(tmp_path / 'logs'), enable_console=False,
                           logger_name='statement_parser.test')
    yield handler
    for h in list(handler.logger.handlers):
        handler.logger.removeHandler(h)
        h.close()


class TestErrorTypes:
    """Test cases for the exception hierarchy"""

    def test_format_error(self):
        error = FormatError("unexpected end of input inside tag", line=3, tag='CODE')
        assert isinstance(error, StatementParserError)
        assert str(error) == "unexpected end of input inside tag (line 3)"
        assert error.line == 3
        assert error.tag == 'CODE'
        assert error.category is ErrorCategory.FILE_FORMAT
        assert error.error_code == 'F102'

    def test_format_error_without_line(self):
        error = FormatError("root marker not found: <OFX>", error_type="ROOT_MARKER_NOT_FOUND")
        assert str(error) == "root marker not found: <OFX>"
        assert error.line is None
        assert error.error_code == 'F103'

    def test_schema_error(self):
        error = SchemaError("expected a decimal amount", 'OFX/X/TRNAMT', 'abc',
                            error_type="AMOUNT_PARSE_ERROR")
        assert str(error) == "OFX/X/TRNAMT: expected a decimal amount"
        assert error.message == str(error)
        assert error.path == 'OFX/X/TRNAMT'
        assert error.raw_value == 'abc'
        assert error.category is ErrorCategory.DATA_PARSING
        assert error.error_code == 'D002'

    def test_error_type_default_is_per_class(self):
        assert SchemaError("bad", 'P').error_type == 'DATA_TYPE_MISMATCH'
        assert StatementParserError("boom").error_code == 'S999'
        assert StatementParserError("boom", error_type="NOT_A_CODE").error_code == 'S999'


class TestErrorHandler:
    """Test cases for ErrorHandler"""

    def test_log_error_records_detail(self, handler):
        detail = handler.log_error("bad file", "MALFORMED_FILE", ErrorCategory.FILE_FORMAT,
                                   file_path='a.qfx', line_number=4)
        assert detail.error_code == 'F102'
        assert detail.severity == 'error'
        assert detail.category == 'file_format'
        assert detail.line_number == 4
        assert handler.has_errors()
        assert handler.get_errors_for_file('a.qfx') == [detail]
        assert handler.get_errors_for_file('b.qfx') == []

    def test_stack_trace_only_for_unexpected_errors(self, handler):
        try:
            raise RuntimeError("unexpected")
        except RuntimeError as e:
            unexpected = handler.log_error("boom", "UNEXPECTED_ERROR", exception=e)
        expected = handler.log_error("bad", "MALFORMED_FILE", exception=FormatError("bad"))
        assert 'RuntimeError' in unexpected.stack_trace
        assert expected.stack_trace is None

    def test_warning(self, handler):
        detail = handler.log_warning("odd extension", "UNSUPPORTED_FORMAT", ErrorCategory.FILE_FORMAT)
        assert detail.error_code == 'F101'
        assert detail.severity == 'warning'
        assert not handler.has_errors()

    def test_summary(self, handler):
        handler.log_error("a", "FILE_NOT_FOUND", ErrorCategory.FILE_ACCESS, file_path='a.qfx')
        handler.log_error("b", "MALFORMED_FILE", ErrorCategory.FILE_FORMAT, file_path='a.qfx')
        handler.log_error("c", "MALFORMED_FILE", ErrorCategory.FILE_FORMAT, file_path='b.qfx')
        handler.log_warning("d", "UNSUPPORTED_FORMAT")

        summary = handler.get_error_summary()
        assert summary == {
            'total_errors': 3,
            'total_warnings': 1,
            'errors_by_category': {'file_access': 1, 'file_format': 2},
            'errors_by_code': {'F001': 1, 'F102': 2},
            'files_with_errors': 2,
        }

        handler.clear_errors()
        assert handler.get_error_summary()['total_errors'] == 0

    def test_json_log_files(self, handler, tmp_path):
        handler.log_info("starting")
        handler.log_error("bad file", "MALFORMED_FILE", ErrorCategory.FILE_FORMAT, file_path='a.qfx')
        for h in handler.logger.handlers:
            h.flush()

        logs = tmp_path / 'logs'
        all_file = next(logs.glob('parser_*.jsonl'))
        error_file = next(logs.glob('errors_*.jsonl'))

        entries = [json.loads(line) for line in all_file.read_text().splitlines()]
        assert [e['level'] for e in entries] == ['INFO', 'ERROR']
        errors = [json.loads(line) for line in error_file.read_text().splitlines()]
        assert len(errors) == 1
        assert errors[0]['error_code'] == 'F102'
        assert errors[0]['file_path'] == 'a.qfx'

    def test_no_log_directory(self):
        handler = ErrorHandler(enable_console=False, logger_name='statement_parser.test_nodir')
        assert handler.logger.handlers == []


class TestConvenienceFunctions:
    """Test cases for the handle_* helpers"""

    def test_file_not_found(self, handler):
        detail = handle_file_access_error(handler, 'a.qfx', FileNotFoundError('a.qfx'))
        assert detail.error_code == 'F001'

    def test_permission_denied(self, handler):
        detail = handle_file_access_error(handler, 'a.qfx', PermissionError('a.qfx'))
        assert detail.error_code == 'F002'

    def test_other_os_error(self, handler):
        detail = handle_file_access_error(handler, 'a.qfx', IsADirectoryError('a.qfx'))
        assert detail.error_code == 'S999'

    def test_statement_error(self, handler):
        error = SchemaError("required element missing", 'OFX/SIGNONMSGSRSV1/SONRS',
                            error_type="MISSING_REQUIRED_FIELD")
        detail = handle_statement_error(handler, 'a.qfx', error)
        assert detail.error_code == 'D004'
        assert detail.category == 'data_parsing'
        assert detail.field_name == 'OFX/SIGNONMSGSRSV1/SONRS'

    def test_format_error_line(self, handler):
        detail = handle_statement_error(handler, 'a.qfx', FormatError("bad", line=7, tag='A'))
        assert detail.line_number == 7
        assert detail.field_name == 'A'


def test_json_formatter():
    record = logging.LogRecord('statement_parser', logging.WARNING, __file__, 10,
                               'hello %s', ('world',), None)
    record.context = {'depth': 2}
    entry = json.loads(JSONFormatter().format(record))
    assert entry['message'] == 'hello world'
    assert entry['level'] == 'WARNING'
    assert entry['context'] == {'depth': 2}
    assert 'error_code' not in entry
