"""Column role inference from header names."""

from __future__ import annotations

import re
from typing import Iterable

from predclean.models import ColumnRoles

TIMESTAMP_PATTERN = re.compile(r"time|date|timestamp|时间", re.IGNORECASE)
PREDICTION_PATTERN = re.compile(r"pred|prediction|预测", re.IGNORECASE)
ACTUAL_PATTERN = re.compile(r"actual|target|value|真实|值", re.IGNORECASE)

# Positional column used for the prediction when no header matches
PREDICTION_FALLBACK_INDEX = 1


def _first_match(
    headers: list[str], pattern: re.Pattern, claimed: set[int]
) -> int:
    for i, header in enumerate(headers):
        if i not in claimed and pattern.search(header):
            return i
    return -1


def infer_roles(headers: Iterable[str]) -> ColumnRoles:
    """Map header names to the timestamp, prediction and actual columns.

    Each role takes the first header (in header order) matching its pattern.
    Roles are claimed in the order timestamp, prediction, actual and a header
    claimed by an earlier role is not considered for a later one, so a header
    such as ``actual_prediction`` becomes the prediction column.

    Unmatched roles are reported as -1; the positional fallbacks are applied
    by the ingestor.
    """
    names = [str(h).strip() for h in headers]
    claimed: set[int] = set()

    ts_idx = _first_match(names, TIMESTAMP_PATTERN, claimed)
    if ts_idx >= 0:
        claimed.add(ts_idx)
    pred_idx = _first_match(names, PREDICTION_PATTERN, claimed)
    if pred_idx >= 0:
        claimed.add(pred_idx)
    actual_idx = _first_match(names, ACTUAL_PATTERN, claimed)

    return ColumnRoles(
        headers=tuple(names),
        timestamp=ts_idx,
        prediction=pred_idx,
        actual=actual_idx,
    )


def with_prediction_fallback(roles: ColumnRoles) -> ColumnRoles:
    """Return roles with the positional prediction column filled in.

    The fallback column is claimed only when no other role already owns it,
    so a header row such as ``time,actual`` keeps ``actual`` as the actual
    column and reads the prediction from the same cell.
    """
    if roles.prediction >= 0:
        return roles
    fallback = PREDICTION_FALLBACK_INDEX
    if fallback >= len(roles.headers) or fallback in (roles.timestamp, roles.actual):
        return roles
    return ColumnRoles(
        headers=roles.headers,
        timestamp=roles.timestamp,
        prediction=fallback,
        actual=roles.actual,
    )
