"""
Market chart payload parsers.

Converts the provider's ``market_chart`` response into PriceSample objects
and reduces intraday points to one sample per UTC calendar day.

Expected payload format:
    {
        "prices": [[1700000000000, 2034.51], [1700003600000, 2041.07], ...],
        "market_caps": [...],
        "total_volumes": [...]
    }
"""

import math
from typing import Any

from ..errors import MalformedDataError
from ..utils.time import from_epoch_ms, utc_date
from .models import PriceSample


def parse_market_chart(payload: Any) -> list[PriceSample]:
    """
    Parse a market chart payload into time-ordered price samples.

    Args:
        payload: Decoded JSON response body

    Returns:
        Samples sorted by timestamp, duplicates of a timestamp dropped

    Raises:
        MalformedDataError: If the payload or any point is malformed
    """
    if not isinstance(payload, dict):
        raise MalformedDataError(
            f"Market chart payload must be an object, got {type(payload).__name__}",
            raw_data=str(payload)[:100],
            expected_format="{'prices': [[ms, price], ...]}",
        )

    points = payload.get("prices")
    if not isinstance(points, list):
        raise MalformedDataError(
            "Market chart payload missing 'prices' list",
            raw_data=str(payload)[:100],
            expected_format="{'prices': [[ms, price], ...]}",
        )

    samples = []
    for index, point in enumerate(points):
        samples.append(_parse_point(point, index))

    samples.sort(key=lambda s: s.ts)

    unique = []
    for sample in samples:
        if unique and unique[-1].ts == sample.ts:
            continue
        unique.append(sample)
    return unique


def _parse_point(point: Any, index: int) -> PriceSample:
    if not isinstance(point, (list, tuple)) or len(point) < 2:
        raise MalformedDataError(
            f"Price point {index} must be a [timestamp_ms, price] pair",
            raw_data=str(point)[:100],
            expected_format="[ms, price]",
        )

    try:
        epoch_ms = float(point[0])
        price = float(point[1])
    except (TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Price point {index} is not numeric: {e}",
            raw_data=str(point)[:100],
            expected_format="[ms, price]",
        ) from e

    if not math.isfinite(epoch_ms) or not math.isfinite(price) or price <= 0:
        raise MalformedDataError(
            f"Price point {index} has an invalid value",
            raw_data=str(point)[:100],
            expected_format="finite timestamp, positive price",
        )

    return PriceSample(ts=from_epoch_ms(epoch_ms), price=price)


def downsample_daily(samples: list[PriceSample]) -> list[PriceSample]:
    """Keep the first sample of each UTC calendar day."""
    daily = []
    last_day = None

    for sample in samples:
        day = utc_date(sample.ts)
        if day != last_day:
            daily.append(sample)
            last_day = day

    return daily
