"""Data models and structures"""

from .core import (
    Amount,
    Balance,
    Document,
    ParserConfig,
    ProcessingResult,
    SignOnResponse,
    StatementResponseSet,
    StatementTransactionResponseSet,
    Transaction,
    TransactionType,
    parse_ofx_date,
)

__all__ = [
    'Amount',
    'Balance',
    'Document',
    'ParserConfig',
    'ProcessingResult',
    'SignOnResponse',
    'StatementResponseSet',
    'StatementTransactionResponseSet',
    'Transaction',
    'TransactionType',
    'parse_ofx_date',
]
