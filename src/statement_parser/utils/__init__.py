"""Utility functions and helpers"""

from .escaper import escape_text, is_in_character_range
from .diagnostics import (
    DiagnosticEvent,
    DiagnosticSink,
    EventKind,
    LoggingSink,
    NullSink,
    RecordingSink,
)
from .error_handler import (
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    FormatError,
    SchemaError,
    StatementParserError,
    handle_file_access_error,
    handle_statement_error,
)
from .config_manager import ConfigManager, get_default_config_manager
from .file_scanner import FileScanner

__all__ = [
    'escape_text',
    'is_in_character_range',
    'DiagnosticEvent',
    'DiagnosticSink',
    'EventKind',
    'LoggingSink',
    'NullSink',
    'RecordingSink',
    'ErrorCategory',
    'ErrorHandler',
    'ErrorSeverity',
    'FormatError',
    'SchemaError',
    'StatementParserError',
    'handle_file_access_error',
    'handle_statement_error',
    'ConfigManager',
    'get_default_config_manager',
    'FileScanner',
]
