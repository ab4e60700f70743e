"""
Turn uploaded report bytes into raw records.

Responsibilities:
- encoding detection (UTF-8 first, then Latin-1 family via charset-normalizer)
- newline and delimiter normalization
- greedy blank-line skipping
- header repair and de-duplication
- row width enforcement
"""

from __future__ import annotations

import csv
import io
from typing import Any, Dict, List, Set, Tuple

from charset_normalizer import from_bytes

from .errors import EmptyInputError, UnreadableInputError
from .logging_setup import get_logger
from .models import RawTable, ReportItem
from .rules import (
    DEFAULT_DELIMITER,
    FALLBACK_ENCODING,
    SNIFF_DELIMITERS,
    SOURCE_ENCODINGS,
)
from .text import repair_text

logger = get_logger("insightdeck.ingest")

EMPTY_INPUT_MESSAGE = "The file is empty or could not be read."


def decode_bytes(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode report bytes to text.

    Rules:
    - Valid UTF-8 (with or without BOM) is decoded as utf-8-sig.
    - Otherwise charset-normalizer picks among the Latin-1 family.
    - If that gives no answer or fails, decode as Latin-1, which accepts
      every byte string.
    """
    detected = None
    fallback = False

    try:
        text = raw.decode("utf-8-sig")
        decode_used = "utf-8-sig"
    except UnicodeDecodeError:
        match = from_bytes(raw, cp_isolation=list(SOURCE_ENCODINGS)).best()
        if match is not None:
            detected = match.encoding
        decode_used = detected or FALLBACK_ENCODING
        try:
            text = raw.decode(decode_used)
        except (UnicodeDecodeError, LookupError):
            decode_used = FALLBACK_ENCODING
            text = raw.decode(FALLBACK_ENCODING)
            fallback = True

    return text, {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": fallback,
    }


def sniff_delimiter(text: str) -> Tuple[str, bool]:
    # Blank lines skew the sniffer's consistency check.
    sample = "\n".join(line for line in text[:4096].split("\n") if line.strip())
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS)
    except csv.Error:
        return DEFAULT_DELIMITER, False
    return dialect.delimiter, True


def dedupe_headers(headers: List[str]) -> List[str]:
    """Suffix repeated header names with _1, _2, ... keeping the first as is."""
    used: Set[str] = set()
    out: List[str] = []
    for h in headers:
        name = h
        n = 0
        while name in used:
            n += 1
            name = f"{h}_{n}"
        used.add(name)
        out.append(name)
    return out


def _is_blank(row: List[str]) -> bool:
    return all(cell.strip() == "" for cell in row)


def read_table(raw: bytes) -> RawTable:
    """Decode and split a report into headers and header-keyed rows."""
    text, encoding_report = decode_bytes(raw)

    nl_before = {
        "crlf": text.count("\r\n"),
        "cr": text.count("\r") - text.count("\r\n"),
    }
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    delimiter, sniffed = sniff_delimiter(text)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    try:
        rows = [row for row in reader if not _is_blank(row)]
    except csv.Error as exc:
        raise UnreadableInputError(f"The file could not be read as CSV: {exc}") from exc
    if not rows:
        raise EmptyInputError(EMPTY_INPUT_MESSAGE)

    raw_headers = [repair_text(h) for h in rows[0]]
    headers = dedupe_headers(raw_headers)
    body = rows[1:]
    if not body:
        raise EmptyInputError(EMPTY_INPUT_MESSAGE)

    warnings: List[ReportItem] = []
    renamed = [(a, b) for a, b in zip(raw_headers, headers) if a != b]
    for original, new in renamed:
        warnings.append(ReportItem(
            row=1,
            column=original,
            issue="duplicate_header",
            value=original,
            action=f"renamed_to_{new}",
        ))

    width = len(headers)
    short_rows = 0
    long_rows = 0
    records = []

    for i, row in enumerate(body):
        line = i + 2
        if len(row) < width:
            short_rows += 1
            warnings.append(ReportItem(
                row=line,
                issue="row_too_short",
                value=str(len(row)),
                action=f"padded_to_{width}",
            ))
            row = row + [""] * (width - len(row))
        elif len(row) > width:
            long_rows += 1
            warnings.append(ReportItem(
                row=line,
                issue="row_too_long",
                value=str(len(row)),
                action=f"truncated_to_{width}",
            ))
            row = row[:width]
        records.append(dict(zip(headers, row)))

    if short_rows or long_rows:
        logger.warning(
            "rectangularized %d short and %d long rows", short_rows, long_rows
        )

    normalizations = {
        "encoding": encoding_report,
        "newlines": {
            "policy": "lf",
            "before": nl_before,
            "changed": nl_before["crlf"] > 0 or nl_before["cr"] > 0,
        },
        "delimiter": {
            "detected": delimiter,
            "sniffed": sniffed,
        },
        "row_width": {
            "expected_columns": width,
            "short_rows_padded": short_rows,
            "long_rows_truncated": long_rows,
            "total_rows": len(records),
        },
    }
    logger.debug(
        "read %d rows, %d columns, encoding=%s delimiter=%r",
        len(records), width, encoding_report["decode_used"], delimiter,
    )
    return RawTable(
        headers=headers,
        rows=records,
        normalizations=normalizations,
        warnings=warnings,
    )
