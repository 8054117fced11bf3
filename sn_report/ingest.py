"""
File-level ingestion: tries each candidate delimiter in priority order and
keeps the first one that yields at least one valid row.

Selection is first-success: a later delimiter that would
produce more rows is never tried once an earlier one has produced any.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from . import settings
from .detector import describe_delimiter, detect_columns, positional_mapping, split_row
from .errors import EmptyInputError, NoValidRowsError
from .parsers import parse_row
from .schemas import ColumnMapping, IngestResult, RecordKind
from .utils import split_lines, strip_bom

logger = logging.getLogger(__name__)


class Attempt(BaseModel):
    """One strategy in the fallback chain."""

    delimiter: str
    blind: bool = False


def _build_attempts(kind: RecordKind) -> list[Attempt]:
    attempts = [Attempt(delimiter=d) for d in settings.CANDIDATE_DELIMITERS]
    if kind == RecordKind.DISTRIBUTION:
        attempts += [Attempt(delimiter=d, blind=True) for d in settings.BLIND_DELIMITERS]
    return attempts


def _parse_rows(kind, lines, delimiter, mapping, now) -> list:
    records = []
    # Row 0 is the header in every mode.
    for line_no, line in enumerate(lines[1:], start=2):
        record = parse_row(kind, split_row(line, delimiter), mapping, now, line_no)
        if record is not None:
            records.append(record)
    return records


def _run_attempt(
    attempt: Attempt, kind: RecordKind, lines: list[str], now: datetime, warn: Callable[[str], None]
) -> tuple[list, Optional[ColumnMapping]]:
    label = describe_delimiter(attempt.delimiter)

    if attempt.blind:
        warn(f"Fallback: blind positional parse with delimiter {label}.")
        mapping = positional_mapping(kind)
    else:
        header = split_row(lines[0], attempt.delimiter)
        mapping = detect_columns(header, kind)
        if mapping is None and len(header) < 2:
            # A header that does not split is not a candidate for positional columns.
            warn(f"Delimiter {label}: header does not split into columns, skipped.")
            return [], None
        if mapping is None:
            warn(
                f"Delimiter {label}: key column not found in header, "
                f"falling back to positional columns."
            )
            mapping = positional_mapping(kind)

    records = _parse_rows(kind, lines, attempt.delimiter, mapping, now)
    mode = "positional" if mapping.positional else "named"
    warn(f"Delimiter {label} ({mode} columns): {len(records)} valid rows.")
    return records, mapping


def ingest(text: str, kind: RecordKind, now: Optional[datetime] = None) -> IngestResult:
    """
    Detects the delimiter and columns of `text` and normalizes every row into
    `kind` records, in file order.

    Raises EmptyInputError for a file without content and NoValidRowsError when
    no strategy yields a valid row (the error carries the attempt log).
    """
    kind = RecordKind(kind)
    now = now or datetime.now()

    if not text:
        raise EmptyInputError()
    lines = split_lines(strip_bom(text))
    if not lines:
        raise EmptyInputError()

    warnings: list[str] = []

    def warn(message: str):
        warnings.append(message)
        logger.info(f"  > {message}")

    logger.info(f"🔎 Detecting format for '{kind.value}' upload ({len(lines)} lines).")

    for attempt in _build_attempts(kind):
        records, mapping = _run_attempt(attempt, kind, lines, now, warn)
        if records:
            logger.info(
                f"✅ Parsed {len(records)} records using delimiter {describe_delimiter(attempt.delimiter)}."
            )
            return IngestResult(
                kind=kind,
                records=records,
                delimiter=attempt.delimiter,
                mapping=mapping,
                warnings=warnings,
            )

    logger.error(f"❌ No valid data found for '{kind.value}' upload.")
    raise NoValidRowsError(warnings)
