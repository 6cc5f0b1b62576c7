"""Projection of repaired OFX markup onto the statement document model."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from lxml import etree

from ..models.core import (
    Amount,
    Balance,
    Document,
    SignOnResponse,
    StatementResponseSet,
    StatementTransactionResponseSet,
    Transaction,
    TransactionType,
)
from ..utils.error_handler import FormatError, SchemaError


logger = logging.getLogger(__name__)

INTEGER_RE = re.compile(r'^[+-]?\d+$')
# OFX allows either a period or a comma as the decimal point
AMOUNT_RE = re.compile(r'^[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)$')

# Deepest element nesting libxml2 accepts, even with huge_tree enabled.
# QFXParser caps the repair engine at this depth.
XML_DEPTH_LIMIT = 2048


def to_text(value: str, path: str) -> str:
    return value


def to_int(value: str, path: str) -> int:
    if not INTEGER_RE.match(value):
        raise SchemaError(f"expected an integer, got {value!r}", path, value)
    return int(value)


def to_amount(value: str, path: str) -> Amount:
    if not AMOUNT_RE.match(value):
        raise SchemaError(
            f"expected a decimal amount, got {value!r}", path, value,
            error_type="AMOUNT_PARSE_ERROR"
        )
    return Amount(value.lstrip('+').replace(',', '.'))


def to_transaction_type(value: str, path: str) -> TransactionType:
    transaction_type = TransactionType.from_code(value)
    if transaction_type is TransactionType.OTHER and value.strip().upper() != 'OTHER':
        logger.debug(f"{path}: unknown transaction type {value!r}, using OTHER")
    return transaction_type


@dataclass(frozen=True)
class FieldSpec:
    """Binds a model attribute to an element path relative to its block"""
    attribute: str
    path: str
    coerce: Callable[[str, str], Any] = to_text
    required: bool = False


SIGNON_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec('code', 'STATUS/CODE', to_int, required=True),
    FieldSpec('severity', 'STATUS/SEVERITY', required=True),
    FieldSpec('server_date', 'DTSERVER'),
    FieldSpec('language', 'LANGUAGE'),
    FieldSpec('organization', 'FI/ORG'),
    FieldSpec('organization_id', 'FI/FID'),
    FieldSpec('intuit_bid', 'INTU.BID'),
)

STATEMENT_TRANSACTION_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec('transaction_uid', 'TRNUID', required=True),
    FieldSpec('code', 'STATUS/CODE', to_int, required=True),
    FieldSpec('severity', 'STATUS/SEVERITY', required=True),
)

STATEMENT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec('currency', 'CURDEF'),
    FieldSpec('bank_id', 'BANKACCTFROM/BANKID'),
    FieldSpec('account_id', 'BANKACCTFROM/ACCTID'),
    FieldSpec('account_type', 'BANKACCTFROM/ACCTTYPE'),
    FieldSpec('start_date', 'BANKTRANLIST/DTSTART'),
    FieldSpec('end_date', 'BANKTRANLIST/DTEND'),
)

TRANSACTION_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec('type', 'TRNTYPE', to_transaction_type, required=True),
    FieldSpec('posted', 'DTPOSTED', required=True),
    FieldSpec('amount', 'TRNAMT', to_amount, required=True),
    FieldSpec('id', 'FITID', required=True),
    FieldSpec('user_date', 'DTUSER'),
    FieldSpec('name', 'NAME'),
    FieldSpec('payee', 'PAYEE'),
    FieldSpec('memo', 'MEMO'),
)

BALANCE_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec('amount', 'BALAMT', to_amount, required=True),
    FieldSpec('as_of', 'DTASOF', required=True),
)

SIGNON_PATH = 'SIGNONMSGSRSV1/SONRS'
STATEMENT_TRANSACTION_PATH = 'BANKMSGSRSV1/STMTTRNRS'
TRANSACTION_LIST_PATH = 'BANKTRANLIST/STMTTRN'


class SchemaMapper:
    """Maps well-formed OFX markup to a Document"""

    def __init__(self, root: str = 'OFX'):
        self.root = root

    def map(self, markup: str) -> Document:
        """Parse markup and project it onto the document model.

        Raises:
            FormatError: If markup is not well-formed XML
            SchemaError: If a required element is missing or a value cannot
                be coerced
        """
        root = self._parse(markup)
        if root.tag != self.root:
            raise SchemaError(f"expected root element {self.root}", str(root.tag))

        signon_element = self._require(root, SIGNON_PATH, self.root)
        signon = SignOnResponse(**self._project(
            signon_element, SIGNON_FIELDS, f"{self.root}/{SIGNON_PATH}"
        ))

        statement = None
        statement_element = root.find(STATEMENT_TRANSACTION_PATH)
        if statement_element is not None:
            statement = self._statement_transaction(
                statement_element, f"{self.root}/{STATEMENT_TRANSACTION_PATH}"
            )

        return Document(signon=signon, statement=statement)

    def _parse(self, markup: str):
        # Parsers are not shared between threads, so build one per call
        parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            huge_tree=True,
            remove_comments=True,
            remove_pis=True,
        )
        try:
            return etree.fromstring(markup.encode('utf-8'), parser)
        except etree.XMLSyntaxError as e:
            raise FormatError(f"repaired markup is not well-formed: {e}") from e

    def _statement_transaction(self, element, path: str) -> StatementTransactionResponseSet:
        values = self._project(element, STATEMENT_TRANSACTION_FIELDS, path)

        response_element = element.find('STMTRS')
        if response_element is not None:
            values['response'] = self._statement(response_element, f"{path}/STMTRS")

        return StatementTransactionResponseSet(**values)

    def _statement(self, element, path: str) -> StatementResponseSet:
        values = self._project(element, STATEMENT_FIELDS, path)

        transactions = []
        for index, transaction_element in enumerate(element.iterfind(TRANSACTION_LIST_PATH), 1):
            transactions.append(Transaction(**self._project(
                transaction_element, TRANSACTION_FIELDS, f"{path}/{TRANSACTION_LIST_PATH}[{index}]"
            )))
        values['transactions'] = tuple(transactions)

        ledger = self._require(element, 'LEDGERBAL', path)
        values['ledger_balance'] = Balance(**self._project(ledger, BALANCE_FIELDS, f"{path}/LEDGERBAL"))

        available = element.find('AVAILBAL')
        if available is not None:
            values['available_balance'] = Balance(**self._project(
                available, BALANCE_FIELDS, f"{path}/AVAILBAL"
            ))

        logger.debug(f"{path}: mapped {len(transactions)} transactions")
        return StatementResponseSet(**values)

    @staticmethod
    def _require(element, path: str, parent_path: str):
        found = element.find(path)
        if found is None:
            raise SchemaError(
                "required element missing", f"{parent_path}/{path}",
                error_type="MISSING_REQUIRED_FIELD"
            )
        return found

    @staticmethod
    def _project(element, fields: Tuple[FieldSpec, ...], path: str) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for spec in fields:
            field_path = f"{path}/{spec.path}"
            node = element.find(spec.path)
            text: Optional[str] = node.text.strip() if node is not None and node.text else None

            if not text:
                if spec.required:
                    reason = "required element missing" if node is None else "required value empty"
                    raise SchemaError(reason, field_path, error_type="MISSING_REQUIRED_FIELD")
                values[spec.attribute] = None
                continue

            values[spec.attribute] = spec.coerce(text, field_path)
        return values


def map_document(markup: str, root: str = 'OFX') -> Document:
    """Map repaired markup to a Document"""
    return SchemaMapper(root).map(markup)
