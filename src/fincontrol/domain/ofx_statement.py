"""OFX statement parser.

Flattens every banking and credit-card statement of an OFX response into
``OfxEntry`` records. Line numbers follow posted-date order inside each
statement so re-importing the same file always yields the same numbering.
"""

import logging
from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from io import BytesIO
from typing import Iterable, Optional

from ofxparse import AccountType, OfxParser

from fincontrol.domain.entities import TransactionSource, TransactionType
from fincontrol.domain.errors import ImportRejectedError
from fincontrol.domain.statement import OfxEntry, ParseResult
from fincontrol.utils.date_parser import to_zone

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# OFX TRNTYPE codes (ofxparse lower-cases them)
OFX_TYPE_CODES = {
    "credit": TransactionType.INCOME,
    "int": TransactionType.INCOME,
    "div": TransactionType.INCOME,
    "repeatpmt": TransactionType.INCOME,
    "in": TransactionType.INCOME,
    "other": TransactionType.INCOME,
    "debit": TransactionType.EXPENSE,
    "payment": TransactionType.EXPENSE,
    "atm": TransactionType.EXPENSE,
    "pos": TransactionType.EXPENSE,
    "directdebit": TransactionType.EXPENSE,
    "directdep": TransactionType.EXPENSE,
    "dep": TransactionType.EXPENSE,
    "check": TransactionType.EXPENSE,
    "fee": TransactionType.EXPENSE,
    "srvchg": TransactionType.EXPENSE,
    "xfer": TransactionType.EXPENSE,
    "cash": TransactionType.EXPENSE,
    "out": TransactionType.EXPENSE,
}

STATEMENT_SOURCES = (
    (AccountType.Bank, TransactionSource.BANK_TRANSACTION),
    (AccountType.CreditCard, TransactionSource.CREDIT_CARD),
)


def map_ofx_type(code: Optional[str], amount: Optional[Decimal]) -> TransactionType:
    """Map an OFX transaction type code, falling back to the amount's sign."""
    mapped = OFX_TYPE_CODES.get((code or "").strip().lower())
    if mapped is not None:
        return mapped
    if amount is not None and amount < 0:
        return TransactionType.EXPENSE
    return TransactionType.INCOME


def parse_ofx(content: bytes, zone: tzinfo) -> ParseResult:
    """Parse OFX bytes into statement entries.

    Args:
        content: Raw OFX file content (SGML or XML flavour)
        zone: Time zone posted dates are converted into

    Returns:
        ParseResult with one entry per statement transaction

    Raises:
        ImportRejectedError: If the file cannot be decoded as OFX
    """
    try:
        ofx = OfxParser.parse(BytesIO(content))
    except Exception as e:
        logger.warning("Rejected OFX statement: %s", e)
        raise ImportRejectedError(f"Unable to parse OFX file: {e}") from e

    accounts = list(getattr(ofx, "accounts", None) or [])
    result = ParseResult()
    line_number = 0

    # Banking statements are numbered before credit-card statements
    for account_type, source in STATEMENT_SOURCES:
        for account in accounts:
            if getattr(account, "type", None) != account_type:
                continue
            statement = getattr(account, "statement", None)
            transactions = getattr(statement, "transactions", None) if statement else None
            if not transactions:
                continue
            for txn in _sorted_by_posted_date(transactions):
                line_number += 1
                result.entries.append(_to_entry(txn, line_number, source, zone))

    result.total_records = len(result.entries)
    logger.debug("Parsed %d OFX transactions", result.total_records)
    return result


def _sorted_by_posted_date(transactions: Iterable) -> list:
    # sorted() is stable, so same-day transactions keep file order
    return sorted(transactions, key=lambda t: getattr(t, "date", None) or datetime.min)


def _to_entry(txn, line_number: int, source: TransactionSource, zone: tzinfo) -> OfxEntry:
    posted = getattr(txn, "date", None)
    raw_amount = getattr(txn, "amount", None)
    amount = _to_cents(raw_amount, line_number) if raw_amount is not None else None

    memo = (getattr(txn, "memo", None) or "").strip()
    name = (getattr(txn, "payee", None) or "").strip()
    external_id = (getattr(txn, "id", None) or "").strip() or None

    return OfxEntry(
        line_number=line_number,
        external_id=external_id,
        date=to_zone(posted, zone) if posted is not None else None,
        description=memo or name or None,
        amount=amount,
        type=map_ofx_type(getattr(txn, "type", None), amount),
        source=source,
    )


def _to_cents(raw_amount, line_number: int) -> Decimal:
    message = f"Unable to parse OFX file: transaction {line_number} has an invalid amount '{raw_amount}'"
    try:
        amount = Decimal(str(raw_amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ImportRejectedError(message) from e
    # quiet NaN passes through quantize
    if not amount.is_finite():
        raise ImportRejectedError(message)
    return amount
