"""Statement format detection."""

import re
from pathlib import PurePath
from typing import Optional

from fincontrol.domain.errors import ImportRejectedError
from fincontrol.domain.import_config import StatementFormat

OFX_SUFFIXES = {".ofx", ".qfx"}
CSV_SUFFIXES = {".csv", ".txt"}

# How much of the file is inspected when sniffing the content
SNIFF_BYTES = 4096

_OFX_SIGNATURE = re.compile(rb"OFXHEADER\s*:|<OFX>|<\?OFX\s", re.IGNORECASE)
_DELIMITERS = (";", ",", "\t", "|")


def detect_format(
    content: bytes,
    requested: StatementFormat = StatementFormat.AUTO,
    filename: Optional[str] = None,
) -> StatementFormat:
    """Decide which parser handles a statement.

    An explicit request wins. Under AUTO, a known file suffix decides first,
    then the content signature.

    Args:
        content: Raw statement bytes
        requested: Format requested by the caller
        filename: Original file name, if known

    Returns:
        StatementFormat.OFX or StatementFormat.CSV

    Raises:
        ImportRejectedError: If the format cannot be determined
    """
    if requested is not None and requested != StatementFormat.AUTO:
        return requested

    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix in OFX_SUFFIXES:
            return StatementFormat.OFX
        if suffix in CSV_SUFFIXES:
            return StatementFormat.CSV

    head = content[:SNIFF_BYTES].lstrip(b"\xef\xbb\xbf \t\r\n")
    if _OFX_SIGNATURE.search(head):
        return StatementFormat.OFX
    if _looks_delimited(head):
        return StatementFormat.CSV

    raise ImportRejectedError("Unable to detect statement format from file name or content")


def _looks_delimited(head: bytes) -> bool:
    if not head or b"\x00" in head:
        return False
    try:
        text = head.decode("utf-8")
    except UnicodeDecodeError:
        text = head.decode("latin-1")
    first_line = text.splitlines()[0] if text.splitlines() else ""
    return any(delimiter in first_line for delimiter in _DELIMITERS)
