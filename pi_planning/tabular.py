"""
Tracker CSV parsing.

Exports from issue trackers repeat column names (one "Sprint" column per
sprint, several "Labels" columns, ...). Rows come back as plain dicts keyed by
column name with duplicates coalesced: the first non-blank value wins.
"""

import csv
import io
from contextlib import contextmanager

from pi_planning import config
from pi_planning._utils import is_blank, log_event, warn


def _header_names(fields):
    names = []
    for i, name in enumerate(fields):
        clean = name.replace("\ufeff", "").strip()
        names.append(clean or f"Column {i + 1}")
    return names


def coalesce_row(header, fields):
    """Merge *fields* into one dict keyed by *header* names.

    For repeated column names the first non-blank value is kept and later
    values are ignored, even when they differ. Missing trailing fields read
    as blank; surplus fields beyond the header are dropped.
    """
    row = {}
    for i, name in enumerate(header):
        value = fields[i].strip() if i < len(fields) else ""
        if name not in row or (is_blank(row[name]) and value):
            row[name] = value
    return row


def _iter_records(text):
    """Yield lists of fields, skipping records the csv module rejects."""
    reader = csv.reader(io.StringIO(text, newline=""))
    line = 0
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            log_event("CSV", event="record_rejected", line=reader.line_num, error=str(e))
            warn(f"Skipping malformed CSV record near line {reader.line_num}: {e}")
            if reader.line_num == line:
                return
            line = reader.line_num
            continue
        line = reader.line_num
        yield fields


@contextmanager
def _field_size_limit(limit):
    """Raise the csv module's field size limit to *limit* for the block."""
    previous = csv.field_size_limit()
    if previous < limit:
        csv.field_size_limit(limit)
    try:
        yield
    finally:
        csv.field_size_limit(previous)


def parse_csv(text):
    """Parse tracker CSV text into a list of row dicts.

    Quoted fields may span lines and use "" for a literal quote. A row is
    dropped when its first field or every field is blank. Blank input gives
    an empty list; malformed input never raises, bad records are skipped.
    """
    if text is None or not text.strip():
        return []
    with _field_size_limit(config.MAX_CSV_BYTES):
        return _parse_records(_iter_records(text))


def _parse_records(records):
    header = None
    for fields in records:
        if any(f.strip() for f in fields):
            header = _header_names(fields)
            break
    if header is None:
        return []

    rows = []
    for fields in records:
        if not fields or not fields[0].strip():
            continue
        if all(not f.strip() for f in fields):
            continue
        rows.append(coalesce_row(header, fields))
    log_event("CSV", event="parsed", columns=len(header), rows=len(rows))
    return rows
