"""
Historical price fetch from the CoinGecko market chart API.

One-shot request performed before playback starts. Every failure mode
(network, HTTP status, JSON decoding, payload shape, too few samples)
surfaces as DataUnavailableError so the session never reaches RUNNING.
"""

import json
import socket
import time
from datetime import datetime
from typing import Any, Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

import structlog

from ..config.defaults import FetchParams
from ..errors import DataUnavailableError, MalformedDataError
from ..utils.time import history_window, to_epoch_seconds
from .models import PriceSeries
from .parsers import downsample_daily, parse_market_chart

logger = structlog.get_logger(__name__)


class FetchRetryableError(Exception):
    """Transient fetch failure worth another attempt."""
    pass


class FetchPermanentError(Exception):
    """Fetch failure that retrying cannot fix."""
    pass


class CoinGeckoPriceSource:
    """Fetches a trailing window of daily prices for an asset."""

    def __init__(
        self,
        params: Optional[FetchParams] = None,
        sleep: Callable[[float], None] = time.sleep
    ) -> None:
        self.params = params or FetchParams()
        self.logger = logger
        self._sleep = sleep

    def build_url(
        self,
        asset_id: str,
        now: Optional[datetime] = None,
        params: Optional[FetchParams] = None
    ) -> str:
        """Range query URL covering the configured window ending at ``now``."""
        params = params or self.params
        start, end = history_window(params.window_days, now)
        query = urlencode({
            "vs_currency": params.vs_currency,
            "from": to_epoch_seconds(start),
            "to": to_epoch_seconds(end),
        })
        return (
            f"{params.base_url.rstrip('/')}/coins/"
            f"{quote(asset_id, safe='')}/market_chart/range?{query}"
        )

    def fetch(
        self,
        asset_id: str,
        params: Optional[FetchParams] = None,
        now: Optional[datetime] = None
    ) -> PriceSeries:
        """
        Fetch and normalize the price history of ``asset_id``.

        Args:
            asset_id: Provider coin id, e.g. "bitcoin"
            params: Per-session fetch parameters, defaults to the source's own
            now: End of the history window, defaults to the current time

        Returns:
            Daily PriceSeries spanning the configured window

        Raises:
            DataUnavailableError: If the history cannot be obtained
        """
        params = params or self.params
        url = self.build_url(asset_id, now, params)
        payload = self._fetch_with_retry(asset_id, url, params)

        try:
            samples = downsample_daily(parse_market_chart(payload))
        except MalformedDataError as e:
            self.logger.warning(
                "Price history payload malformed",
                asset_id=asset_id,
                error=str(e)
            )
            raise DataUnavailableError(
                f"Malformed price history for {asset_id}: {e}",
                asset_id=asset_id,
                cause="parse",
                context=e.context,
            ) from e

        series = PriceSeries(asset_id=asset_id, samples=tuple(samples))

        self.logger.info(
            "Fetched price history",
            asset_id=asset_id,
            samples=len(series),
            first_ts=series.samples[0].ts.isoformat(),
            last_ts=series.samples[-1].ts.isoformat()
        )
        return series

    def _fetch_with_retry(self, asset_id: str, url: str, params: FetchParams) -> Any:
        attempt = 0
        last_error: Optional[Exception] = None

        while attempt <= params.max_retries:
            try:
                return self._request_json(url, params)
            except FetchPermanentError as e:
                raise DataUnavailableError(
                    f"Price history unavailable for {asset_id}: {e}",
                    asset_id=asset_id,
                    cause="permanent",
                ) from e
            except FetchRetryableError as e:
                last_error = e

            attempt += 1
            if attempt <= params.max_retries:
                self.logger.warning(
                    f"Fetch attempt {attempt} failed, retrying in {params.retry_delay_seconds}s",
                    asset_id=asset_id,
                    error=str(last_error)
                )
                self._sleep(params.retry_delay_seconds)

        self.logger.error(
            "Price history fetch failed after retries",
            asset_id=asset_id,
            attempts=attempt,
            error=str(last_error)
        )
        raise DataUnavailableError(
            f"Price history unavailable for {asset_id} after {attempt} attempts: {last_error}",
            asset_id=asset_id,
            cause="retries_exhausted",
        ) from last_error

    def _request_json(self, url: str, params: FetchParams) -> Any:
        req = Request(url, headers={
            "Accept": "application/json",
            "User-Agent": params.user_agent,
        })

        try:
            with urlopen(req, timeout=params.timeout_seconds) as response:
                body = response.read().decode("utf-8")
        except HTTPError as e:
            error_msg = f"HTTP {e.code}: {e.reason}"
            # Rate limiting and server errors are transient
            if e.code == 429 or e.code >= 500:
                raise FetchRetryableError(error_msg) from e
            raise FetchPermanentError(error_msg) from e
        except (URLError, socket.timeout, OSError) as e:
            raise FetchRetryableError(f"Network error: {e}") from e

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise FetchPermanentError(f"Invalid JSON response: {e}") from e
