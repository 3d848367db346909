"""
Collapse sub-daily forecast samples into one DailyForecast per calendar day.
"""

from typing import Iterable, List

from src.weather.models import DailyForecast
from src.weather.provider import RawWeatherSample

DEFAULT_HORIZON_DAYS = 5


def normalize(
    samples: Iterable[RawWeatherSample],
    horizon: int = DEFAULT_HORIZON_DAYS,
) -> List[DailyForecast]:
    """
    Group samples by their local calendar date.

    For each date, high/low are the max/min temperature across its samples;
    description, icon and precipitation come from the first sample seen for
    that date in stream order (not the earliest by wall clock). Entries are
    returned ascending by date. The scan stops at the first sample
    of a new date once ``horizon`` dates are open.

    Args:
        samples: Raw samples in provider stream order.
        horizon: Maximum number of days to return.

    Returns:
        At most ``horizon`` DailyForecast entries; empty for empty input.
    """
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")

    # date -> [first sample, high, low]
    days = {}
    for sample in samples:
        day = sample.timestamp.date()
        entry = days.get(day)
        if entry is None:
            if len(days) >= horizon:
                break
            days[day] = [sample, sample.temperature, sample.temperature]
            continue
        entry[1] = max(entry[1], sample.temperature)
        entry[2] = min(entry[2], sample.temperature)

    return [
        DailyForecast(
            date=day,
            high=high,
            low=low,
            description=first.description,
            icon=first.icon,
            precipitation_pct=first.precipitation_pct,
        )
        for day, (first, high, low) in sorted(days.items())
    ]
