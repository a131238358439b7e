"""Generated sample dataset used when no readable input is available."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np
import pandas as pd

from predclean.config import DEFAULT_SAMPLE_ROWS

SAMPLE_INTERVAL = timedelta(hours=6)
SAMPLE_SPAN = timedelta(days=30)


def generate_sample_data(
    n_rows: int = DEFAULT_SAMPLE_ROWS,
    seed: Optional[int] = None,
    start: Optional[datetime] = None,
) -> pd.DataFrame:
    """Generate a prediction/actual series with three synthetic features.

    Records are spaced every 6 hours starting 30 days before now (or at
    ``start``). ``actual`` follows a sine around 100 with uniform noise,
    ``prediction`` tracks the same base with smaller noise, and the features
    are a noisy function of actual, the row counter and a faster sine.

    Args:
        n_rows: Number of records.
        seed: Seed for the random generator.
        start: Timestamp of the first record.

    Returns:
        DataFrame with timestamp, actual, prediction, featureA, featureB and
        featureC columns.
    """
    rng = np.random.default_rng(seed)
    if start is None:
        start = datetime.now(timezone.utc) - SAMPLE_SPAN

    i = np.arange(n_rows)
    base = 100 + 20 * np.sin(i / 6)
    actual = base + rng.uniform(-4, 4, size=n_rows)
    prediction = base + rng.uniform(-3, 3, size=n_rows)

    return pd.DataFrame(
        {
            "timestamp": [(start + k * SAMPLE_INTERVAL).isoformat() for k in range(n_rows)],
            "actual": actual,
            "prediction": prediction,
            "featureA": actual * 0.3 + rng.uniform(0, 10, size=n_rows),
            "featureB": i.astype("float64"),
            "featureC": np.sin(i / 3) * 50,
        }
    )
