"""
Canonical data models for normalized price history.

This module defines the immutable price series the playback engine reads
from. A series is validated once at construction and never mutated, so it
can be shared by reference between the engine and the sinks.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from ..errors import (
    IndexOutOfRangeError,
    InsufficientDataError,
    MalformedDataError,
    TemporalDataError,
)
from ..utils.time import ensure_utc, from_epoch_ms

MIN_SERIES_LENGTH = 2


@dataclass(frozen=True)
class PriceSample:
    """Single historical price observation with a UTC timestamp."""
    ts: datetime        # UTC market timestamp
    price: float        # Quote currency price


@dataclass(frozen=True)
class PriceSeries:
    """Ordered, validated price history for one asset."""

    asset_id: str
    samples: tuple[PriceSample, ...]

    def __post_init__(self):
        samples = tuple(self.samples)
        object.__setattr__(self, "samples", samples)

        if len(samples) < MIN_SERIES_LENGTH:
            raise InsufficientDataError(
                f"Price series for {self.asset_id} needs at least "
                f"{MIN_SERIES_LENGTH} samples, got {len(samples)}",
                required_count=MIN_SERIES_LENGTH,
                available_count=len(samples),
                asset_id=self.asset_id,
            )

        previous = None
        for index, sample in enumerate(samples):
            if not math.isfinite(sample.price) or sample.price <= 0:
                raise MalformedDataError(
                    f"Invalid price at index {index}: {sample.price}",
                    raw_data=repr(sample),
                    expected_format="finite positive price",
                    context={"asset_id": self.asset_id, "index": index},
                )
            if previous is not None and sample.ts <= previous.ts:
                raise TemporalDataError(
                    f"Timestamps must be strictly increasing (index {index})",
                    timestamp=sample.ts,
                    previous_timestamp=previous.ts,
                    context={"asset_id": self.asset_id, "index": index},
                )
            previous = sample

    @classmethod
    def from_pairs(
        cls,
        asset_id: str,
        pairs: Iterable[tuple[Union[datetime, int, float], float]]
    ) -> "PriceSeries":
        """Build a series from (timestamp, price) pairs; numeric timestamps are epoch ms."""
        samples = []
        for ts, price in pairs:
            if isinstance(ts, datetime):
                ts = ensure_utc(ts)
            else:
                ts = from_epoch_ms(ts)
            samples.append(PriceSample(ts=ts, price=float(price)))
        return cls(asset_id=asset_id, samples=tuple(samples))

    def __len__(self) -> int:
        return len(self.samples)

    def length(self) -> int:
        """Number of samples in the series."""
        return len(self.samples)

    def sample_at(self, index: int) -> PriceSample:
        """Sample at ``index``; raises IndexOutOfRangeError outside [0, length)."""
        if index < 0 or index >= len(self.samples):
            raise IndexOutOfRangeError(
                f"Sample index {index} outside series of length {len(self.samples)}",
                index=index,
                length=len(self.samples),
                context={"asset_id": self.asset_id},
            )
        return self.samples[index]

    def delta_at(self, index: int) -> float:
        """Price change from the previous sample; undefined (error) at index 0."""
        if index == 0:
            raise IndexOutOfRangeError(
                "No price delta at index 0: there is no previous sample",
                index=index,
                length=len(self.samples),
                context={"asset_id": self.asset_id},
            )
        return self.sample_at(index).price - self.sample_at(index - 1).price

    def net_change(self, index: int, window: int = 1) -> float:
        """Price change across the last ``window`` samples ending at ``index``."""
        start = max(0, index - window)
        return self.sample_at(index).price - self.sample_at(start).price

    def pct_change_at(self, index: int) -> float:
        """Relative change from the previous sample, in percent."""
        delta = self.delta_at(index)
        return delta / self.sample_at(index - 1).price * 100.0

    @property
    def prices(self) -> tuple[float, ...]:
        return tuple(sample.price for sample in self.samples)

    @property
    def min_price(self) -> float:
        return min(self.prices)

    @property
    def max_price(self) -> float:
        return max(self.prices)

    @property
    def price_range(self) -> float:
        """Observed max - min; 0.0 for a constant series."""
        return self.max_price - self.min_price
