"""Recovery parser for SGML-style OFX/QFX bank statements."""

__version__ = "0.1.0"

from .models.core import (
    Amount,
    Balance,
    Document,
    ParserConfig,
    SignOnResponse,
    StatementResponseSet,
    StatementTransactionResponseSet,
    Transaction,
    TransactionType,
)
from .parsers.qfx_parser import QFXParser, parse, parse_file, repair_markup
from .utils.diagnostics import DiagnosticSink, LoggingSink, NullSink, RecordingSink
from .utils.error_handler import FormatError, SchemaError, StatementParserError

__all__ = [
    '__version__',
    'Amount',
    'Balance',
    'Document',
    'ParserConfig',
    'SignOnResponse',
    'StatementResponseSet',
    'StatementTransactionResponseSet',
    'Transaction',
    'TransactionType',
    'QFXParser',
    'parse',
    'parse_file',
    'repair_markup',
    'DiagnosticSink',
    'LoggingSink',
    'NullSink',
    'RecordingSink',
    'FormatError',
    'SchemaError',
    'StatementParserError',
]
