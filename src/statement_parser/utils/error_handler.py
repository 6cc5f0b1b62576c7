"""Error taxonomy and structured error logging for the statement parser."""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    FILE_ACCESS = "file_access"
    FILE_FORMAT = "file_format"
    DATA_PARSING = "data_parsing"
    SYSTEM = "system"


ERROR_CODES: Dict[str, str] = {
    # File access errors
    "FILE_NOT_FOUND": "F001",
    "FILE_PERMISSION_DENIED": "F002",
    "DIRECTORY_NOT_FOUND": "F004",

    # File format errors
    "UNSUPPORTED_FORMAT": "F101",
    "MALFORMED_FILE": "F102",
    "ROOT_MARKER_NOT_FOUND": "F103",
    "NESTING_TOO_DEEP": "F106",

    # Data parsing errors
    "AMOUNT_PARSE_ERROR": "D002",
    "MISSING_REQUIRED_FIELD": "D004",
    "DATA_TYPE_MISMATCH": "D005",

    "UNEXPECTED_ERROR": "S999"
}


class StatementParserError(Exception):
    """Base class for errors raised while parsing a statement"""

    category = ErrorCategory.SYSTEM
    error_type = "UNEXPECTED_ERROR"

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type

    @property
    def error_code(self) -> str:
        return ERROR_CODES.get(self.error_type, "S999")


class FormatError(StatementParserError):
    """The input is not a usable OFX body.

    Raised for a missing root marker, a lexical error in a tag, or input
    that ends in the middle of a tag.
    """

    category = ErrorCategory.FILE_FORMAT
    error_type = "MALFORMED_FILE"

    def __init__(self, message: str, line: Optional[int] = None,
                 tag: Optional[str] = None, error_type: Optional[str] = None):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, error_type)
        self.line = line
        self.tag = tag


class SchemaError(StatementParserError):
    """The repaired markup does not fit the statement document shape"""

    category = ErrorCategory.DATA_PARSING
    error_type = "DATA_TYPE_MISMATCH"

    def __init__(self, message: str, path: str, raw_value: Optional[str] = None,
                 error_type: Optional[str] = None):
        super().__init__(f"{path}: {message}", error_type)
        self.path = path
        self.raw_value = raw_value


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    field_name: Optional[str] = None
    raw_value: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """Renders log records as single-line JSON objects"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        for key in ('error_code', 'file_path', 'category', 'context'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ErrorHandler:
    """Collects per-file errors and sets up structured logging"""

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = True,
                 console_level: int = logging.INFO, logger_name: str = 'statement_parser'):
        self.log_directory = Path(log_directory) if log_directory else None
        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []
        self._setup_logging(logger_name, enable_console, console_level)

    def _setup_logging(self, logger_name: str, enable_console: bool, console_level: int):
        """Set up console and JSON-lines logging"""
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(logging.DEBUG)

        # Clear existing handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(console_level)
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(console_handler)

        if self.log_directory is None:
            return

        self.log_directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime('%Y%m%d')

        file_handler = logging.FileHandler(self.log_directory / f"parser_{stamp}.jsonl")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        self.logger.addHandler(file_handler)

        # Errors only
        error_file_handler = logging.FileHandler(self.log_directory / f"errors_{stamp}.jsonl")
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(JSONFormatter())
        self.logger.addHandler(error_file_handler)

    def log_error(self,
                  message: str,
                  error_type: str,
                  category: ErrorCategory = ErrorCategory.SYSTEM,
                  file_path: Optional[str] = None,
                  line_number: Optional[int] = None,
                  field_name: Optional[str] = None,
                  raw_value: Optional[str] = None,
                  exception: Optional[BaseException] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an error with detailed information"""
        error_code = ERROR_CODES.get(error_type, "S999")
        stack_trace = None

        # Expected parse failures do not need a traceback
        if exception is not None and not isinstance(exception, StatementParserError):
            stack_trace = ''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=category.value,
            error_code=error_code,
            message=message,
            file_path=file_path,
            line_number=line_number,
            field_name=field_name,
            raw_value=raw_value,
            stack_trace=stack_trace,
            context=context or {}
        )
        self.errors.append(error_detail)

        self.logger.error(
            message,
            extra={
                'error_code': error_code,
                'category': category.value,
                'file_path': file_path,
                'context': context or {}
            }
        )
        return error_detail

    def log_warning(self,
                    message: str,
                    warning_type: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    file_path: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""
        warning_code = ERROR_CODES.get(warning_type, "W999")

        warning_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.WARNING.value,
            category=category.value,
            error_code=warning_code,
            message=message,
            file_path=file_path,
            context=context or {}
        )
        self.warnings.append(warning_detail)

        self.logger.warning(
            message,
            extra={
                'error_code': warning_code,
                'category': category.value,
                'file_path': file_path,
                'context': context or {}
            }
        )
        return warning_detail

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log informational message"""
        self.logger.info(message, extra={'context': context or {}})

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1

        errors_by_code: Dict[str, int] = {}
        for error in self.errors:
            errors_by_code[error.error_code] = errors_by_code.get(error.error_code, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'errors_by_code': errors_by_code,
            'files_with_errors': len(set(e.file_path for e in self.errors if e.file_path)),
        }

    def has_errors(self) -> bool:
        """Check if any errors have been logged"""
        return len(self.errors) > 0

    def get_errors_for_file(self, file_path: str) -> List[ErrorDetail]:
        """Get all errors for a specific file"""
        return [error for error in self.errors if error.file_path == file_path]

    def clear_errors(self):
        """Clear all accumulated errors and warnings"""
        self.errors.clear()
        self.warnings.clear()


# Convenience functions for common error scenarios
def handle_file_access_error(error_handler: ErrorHandler,
                             file_path: str,
                             exception: Exception) -> ErrorDetail:
    """Handle common file access errors"""
    if isinstance(exception, FileNotFoundError):
        return error_handler.log_error(
            f"File not found: {file_path}",
            "FILE_NOT_FOUND",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    elif isinstance(exception, PermissionError):
        return error_handler.log_error(
            f"Permission denied accessing file: {file_path}",
            "FILE_PERMISSION_DENIED",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )
    else:
        return error_handler.log_error(
            f"File access error: {str(exception)}",
            "UNEXPECTED_ERROR",
            ErrorCategory.FILE_ACCESS,
            file_path=file_path,
            exception=exception
        )


def handle_statement_error(error_handler: ErrorHandler,
                           file_path: str,
                           exception: StatementParserError) -> ErrorDetail:
    """Record a format or schema failure for a file"""
    line_number = getattr(exception, 'line', None)
    field_name = getattr(exception, 'path', None) or getattr(exception, 'tag', None)
    return error_handler.log_error(
        f"Failed to parse {file_path}: {exception.message}",
        exception.error_type,
        exception.category,
        file_path=file_path,
        line_number=line_number,
        field_name=field_name,
        raw_value=getattr(exception, 'raw_value', None),
        exception=exception
    )
