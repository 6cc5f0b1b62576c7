"""Shared fixtures for statement parser tests."""

import pytest


SGML_STATEMENT = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
SECURITY:NONE
ENCODING:USASCII
CHARSET:1252
COMPRESSION:NONE
OLDFILEUID:NONE
NEWFILEUID:NONE

<OFX>
<SIGNONMSGSRSV1>
<SONRS>
<STATUS>
<CODE>0
<SEVERITY>INFO
</STATUS>
<DTSERVER>20240131120000.000[-5:EST]
<LANGUAGE>ENG
<FI>
<ORG>Example Bank
<FID>1234
</FI>
<INTU.BID>5678
</SONRS>
</SIGNONMSGSRSV1>
<BANKMSGSRSV1>
<STMTTRNRS>
<TRNUID>1
<STATUS>
<CODE>0
<SEVERITY>INFO
</STATUS>
<STMTRS>
<CURDEF>USD
<BANKACCTFROM>
<BANKID>121000248
<ACCTID>000123456789
<ACCTTYPE>CHECKING
</BANKACCTFROM>
<BANKTRANLIST>
<DTSTART>20240101
<DTEND>20240131
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20240105
<TRNAMT>12.34
<FITID>2024010501
<NAME>Interest &amp; Co
</STMTTRN>
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20240110120000
<DTUSER>20240109
<TRNAMT>-50.00
<FITID>2024011001
<NAME>AT&T Wireless
<MEMO>Monthly bill
</STMTTRN>
<STMTTRN>
<TRNTYPE>HOLD
<DTPOSTED>20240115
<TRNAMT>10.5
<FITID>2024011501
</STMTTRN>
</BANKTRANLIST>
<LEDGERBAL>
<BALAMT>1234.56
<DTASOF>20240131
</LEDGERBAL>
<AVAILBAL>
<BALAMT>1200.00
<DTASOF>20240131
</AVAILBAL>
</STMTRS>
</STMTTRNRS>
</BANKMSGSRSV1>
</OFX>
"""

SIGNON_ONLY = (
    "<OFX><SIGNONMSGSRSV1><SONRS><STATUS><CODE>0<SEVERITY>INFO"
    "</STATUS></SONRS></SIGNONMSGSRSV1></OFX>"
)


def statement_with_transactions(transactions: str) -> bytes:
    """Wrap STMTTRN blocks in a minimal SGML statement"""
    return (
        "<OFX><SIGNONMSGSRSV1><SONRS><STATUS><CODE>0<SEVERITY>INFO</STATUS>"
        "</SONRS></SIGNONMSGSRSV1><BANKMSGSRSV1><STMTTRNRS><TRNUID>1"
        "<STATUS><CODE>0<SEVERITY>INFO</STATUS><STMTRS><CURDEF>USD"
        "<BANKACCTFROM><BANKID>1<ACCTID>2<ACCTTYPE>SAVINGS</BANKACCTFROM>"
        "<BANKTRANLIST><DTSTART>20240101<DTEND>20240131"
        + transactions +
        "</BANKTRANLIST><LEDGERBAL><BALAMT>0<DTASOF>20240131</LEDGERBAL>"
        "</STMTRS></STMTTRNRS></BANKMSGSRSV1></OFX>"
    ).encode('utf-8')


@pytest.fixture
def sgml_statement() -> bytes:
    return SGML_STATEMENT.encode('utf-8')


@pytest.fixture
def signon_only() -> bytes:
    return SIGNON_ONLY.encode('utf-8')


@pytest.fixture
def statement_file(tmp_path, sgml_statement):
    path = tmp_path / 'checking.qfx'
    path.write_bytes(sgml_statement)
    return path


@pytest.fixture
def make_statement():
    return statement_with_transactions
