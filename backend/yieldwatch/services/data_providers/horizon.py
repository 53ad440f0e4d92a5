"""
Horizon resolution over a fetched time series.

Feeds such as central-bank CSV downloads return many dated rows in one
fetch. The requested horizon picks which row is reported:

- today: the latest row
- 1w:    first row (walking back from the latest) at least 7 days older
- 1m:    first row (walking back from the latest) at least 30 days older

Horizons are best effort: when the series is too short, the latest row
is returned instead of failing.
"""

from datetime import timedelta
from typing import Optional, Sequence, Union

from .interfaces import Horizon, SeriesPoint


def select_observation(
    series: Sequence[SeriesPoint],
    horizon: Union[Horizon, str],
) -> Optional[SeriesPoint]:
    """
    Select the observation for ``horizon`` from a chronologically ordered series.

    Args:
        series: observations ordered oldest first (latest last)
        horizon: Horizon or its string value

    Returns:
        The selected observation, or None only when the series is empty.
    """
    if not series:
        return None

    horizon = Horizon(horizon)
    latest = series[-1]
    min_age = horizon.min_age_days
    if min_age == 0:
        return latest

    cutoff = latest.t - timedelta(days=min_age)
    for point in reversed(series):
        if point.t <= cutoff:
            return point

    return latest
