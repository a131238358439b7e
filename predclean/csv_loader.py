"""Tabular ingestion: delimited text, CSV files and in-memory records.

Every entry point yields a ``pd.DataFrame`` with one row per input record,
role columns renamed to ``timestamp``/``prediction``/``actual`` and the row
index holding the 0-based input row number.
"""

from __future__ import annotations

import csv
import logging
import os
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

import chardet
import pandas as pd

from predclean.config import DEFAULT_DELIMITER, SUPPORTED_DELIMITERS
from predclean.models import ACTUAL, PREDICTION, TIMESTAMP, ColumnRoles
from predclean.parsing import parse_number
from predclean.roles import (
    PREDICTION_FALLBACK_INDEX,
    infer_roles,
    with_prediction_fallback,
)

logger = logging.getLogger(__name__)

Records = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


def _now() -> str:
    """Return the ingestion wall-clock time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def _header_name(header: str, index: int) -> str:
    return header if header else f"column_{index}"


def _empty_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=[TIMESTAMP, PREDICTION])


def _build_record(
    cells: list[Any],
    roles: ColumnRoles,
    names: list[str],
    ingested_at: str,
    parse_features: bool,
) -> dict[str, Any]:
    """Map one row of cells onto canonical role names and feature columns."""

    def cell(index: int) -> Any:
        return cells[index] if 0 <= index < len(cells) else None

    pred_idx = roles.prediction if roles.prediction >= 0 else PREDICTION_FALLBACK_INDEX

    record: dict[str, Any] = {
        TIMESTAMP: cell(roles.timestamp) if roles.timestamp >= 0 else ingested_at,
        PREDICTION: cell(pred_idx),
    }
    if roles.timestamp >= 0 and record[TIMESTAMP] is None:
        record[TIMESTAMP] = ""
    if roles.actual >= 0:
        record[ACTUAL] = cell(roles.actual)

    for i in roles.feature_indices:
        name = names[i]
        if name in record:
            # Canonical role names and duplicate headers keep their first value
            continue
        raw = cell(i)
        if parse_features:
            number = parse_number(raw)
            record[name] = number if number is not None else raw
        else:
            record[name] = raw
    return record


def ingest_text(text: str, delimiter: str = DEFAULT_DELIMITER) -> pd.DataFrame:
    """Parse delimited text with a header row into raw records.

    Blank lines are dropped and the first remaining line is the header. Input
    with no data line yields an empty frame rather than an error. Rows shorter
    than the header leave their trailing cells absent; extra cells are ignored.

    Args:
        text: Raw delimited text.
        delimiter: Single-character cell delimiter.

    Returns:
        DataFrame of raw records (empty when there is no data line).
    """
    lines = [line for line in (text or "").splitlines() if line.strip()]
    if len(lines) < 2:
        logger.debug("No data lines in input text (%d line(s))", len(lines))
        return _empty_frame()

    rows = list(csv.reader(lines, delimiter=delimiter))
    header = [h.strip() for h in rows[0]]
    names = [_header_name(h, i) for i, h in enumerate(header)]
    roles = with_prediction_fallback(infer_roles(names))
    ingested_at = _now()

    records = [
        _build_record(cells, roles, names, ingested_at, parse_features=True)
        for cells in rows[1:]
    ]
    logger.debug(
        "Ingested %d record(s) with roles ts=%d pred=%d actual=%d",
        len(records),
        roles.timestamp,
        roles.prediction,
        roles.actual,
    )
    return pd.DataFrame.from_records(records)


def ingest_records(records: Records) -> pd.DataFrame:
    """Turn an in-memory record list into the same raw-record frame.

    Records already keyed by the canonical ``prediction`` name pass through
    unchanged (a missing ``timestamp`` is filled with the ingestion time).
    Otherwise role inference runs over the union of keys in first-seen order
    and the same positional fallbacks as text ingestion apply.
    """
    if isinstance(records, pd.DataFrame):
        rows = records.to_dict(orient="records")
    else:
        rows = [dict(r) for r in records]
    if not rows:
        return _empty_frame()

    keys: list[str] = []
    for row in rows:
        for key in row:
            if key not in keys:
                keys.append(key)

    ingested_at = _now()
    if PREDICTION in keys:
        out = []
        for row in rows:
            record = dict(row)
            if TIMESTAMP not in record:
                record[TIMESTAMP] = ingested_at
            out.append(record)
        df = pd.DataFrame.from_records(out)
        ordered = [c for c in (TIMESTAMP, PREDICTION, ACTUAL) if c in df.columns]
        return df[ordered + [c for c in df.columns if c not in ordered]]

    names = [_header_name(str(k), i) for i, k in enumerate(keys)]
    roles = with_prediction_fallback(infer_roles(names))
    out = [
        _build_record(
            [row.get(k) for k in keys], roles, names, ingested_at, parse_features=False
        )
        for row in rows
    ]
    return pd.DataFrame.from_records(out)


def _detect_encoding(file_path: str) -> str:
    """Detect file encoding using chardet, falling back to utf-8."""
    try:
        with open(file_path, "rb") as f:
            raw = f.read()
    except OSError:
        return "utf-8"
    if not raw:
        return "utf-8"
    encoding = chardet.detect(raw).get("encoding")
    return encoding or "utf-8"


def _detect_delimiter(text: str) -> str:
    """Detect CSV delimiter using csv.Sniffer, falling back to comma."""
    try:
        sample = text[:8192]
        dialect = csv.Sniffer().sniff(sample, delimiters=SUPPORTED_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        return DEFAULT_DELIMITER


def _read_with_encoding(file_path: str, encoding: str) -> Optional[str]:
    """Try reading a file with the given encoding. Returns text or None."""
    try:
        with open(file_path, "r", encoding=encoding) as f:
            return f.read()
    except (UnicodeDecodeError, LookupError):
        return None


def load_csv(file_path: str, delimiter: Optional[str] = None) -> dict:
    """Load a CSV file into raw records with encoding/delimiter detection.

    Args:
        file_path: Path to the CSV file.
        delimiter: Cell delimiter; sniffed from the content when None.

    Returns:
        dict with keys:
            - "df": pd.DataFrame or None
            - "error": Optional[str] error message if loading failed
            - "encoding": the encoding used to decode the file
            - "delimiter": the delimiter used to split cells
    """
    result: dict = {"df": None, "error": None, "encoding": None, "delimiter": None}

    if not os.path.exists(file_path):
        result["error"] = f"File not found: {file_path}"
        return result

    if not os.path.isfile(file_path):
        result["error"] = f"Path is not a file: {file_path}"
        return result

    try:
        if os.path.getsize(file_path) == 0:
            result["error"] = "File is empty"
            return result
    except OSError as e:
        result["error"] = f"Cannot read file: {e}"
        return result

    # Detect encoding with fallback chain
    encoding = _detect_encoding(file_path)
    text = None
    for candidate in (encoding, "utf-8", "latin-1"):
        try:
            text = _read_with_encoding(file_path, candidate)
        except OSError as e:
            result["error"] = f"Cannot read file: {e}"
            return result
        if text is not None:
            encoding = candidate
            break
    if text is None:
        result["error"] = "Failed to decode file with any supported encoding"
        return result
    result["encoding"] = encoding

    if not text.strip():
        result["error"] = "File is empty"
        return result

    delimiter = delimiter or _detect_delimiter(text)
    result["delimiter"] = delimiter

    df = ingest_text(text, delimiter=delimiter)
    if len(df) == 0:
        result["error"] = "File contains only headers with no data rows"
        return result

    logger.info(
        "Loaded %d record(s) from %s (encoding=%s, delimiter=%r)",
        len(df),
        file_path,
        encoding,
        delimiter,
    )
    result["df"] = df
    return result
