#!/usr/bin/env python3
"""
Demonstration of closing-tag recovery on an SGML-style statement.

This script shows how to:
1. Repair an OFX body whose leaf elements are never closed
2. Trace what the repair engine did with a RecordingSink
3. Parse the same bytes into a Document
"""

import sys
from pathlib import Path

# Add the src directory to the path so we can import statement_parser
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from statement_parser import RecordingSink, parse, repair_markup
from statement_parser.utils.diagnostics import EventKind


SAMPLE = b"""OFXHEADER:100
DATA:OFXSGML
VERSION:102

<OFX>
<SIGNONMSGSRSV1><SONRS><STATUS><CODE>0<SEVERITY>INFO</STATUS>
<DTSERVER>20240131120000[-5:EST]</SONRS></SIGNONMSGSRSV1>
<BANKMSGSRSV1><STMTTRNRS><TRNUID>1<STATUS><CODE>0<SEVERITY>INFO</STATUS>
<STMTRS><CURDEF>USD
<BANKACCTFROM><BANKID>121000248<ACCTID>000123456789<ACCTTYPE>CHECKING</BANKACCTFROM>
<BANKTRANLIST><DTSTART>20240101<DTEND>20240131
<STMTTRN><TRNTYPE>DEBIT<DTPOSTED>20240110<TRNAMT>-50.00<FITID>1<NAME>AT&T Wireless</STMTTRN>
<STMTTRN><TRNTYPE>CREDIT<DTPOSTED>20240115<TRNAMT>1250<FITID>2<NAME>Payroll</STMTTRN>
</BANKTRANLIST>
<LEDGERBAL><BALAMT>1200.00<DTASOF>20240131</LEDGERBAL>
</STMTRS></STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""


def show_repair():
    """Print the repaired markup and a count of synthesized closing tags"""
    sink = RecordingSink()
    markup = repair_markup(SAMPLE, sink=sink)

    print("=== Repaired markup ===")
    print(markup)
    print()

    synthesized = sink.of_kind(EventKind.SYNTHESIZED_CLOSE)
    print(f"Synthesized {len(synthesized)} closing tags:")
    print(", ".join(event.name for event in synthesized))
    print()


def show_document():
    """Print the parsed statement"""
    document = parse(SAMPLE)
    response = document.statement.response

    print("=== Parsed statement ===")
    print(f"Account {response.account_id} ({response.account_type}), {response.currency}")
    for transaction in document.transactions:
        print(f"  {transaction.posted_at:%Y-%m-%d}  {transaction.type.name:<8} "
              f"{str(transaction.amount):>10}  {transaction.name}")
    print(f"Ledger balance: {response.ledger_balance.amount}")


def main():
    show_repair()
    show_document()


if __name__ == '__main__':
    main()
