# history.py
"""Historical Bitcoin price lookup for a date range."""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence

import numpy as np
import requests

from config import ASSET_ID, COINGECKO_API_BASE, HISTORY_TIMEOUT, QUOTE_CURRENCY
from exceptions import HistoryFetchError, RateLimitedError, ValidationError
from validation import validate_date_range


@dataclass(frozen=True)
class PriceRangeSummary:
    start: date
    end: date
    high: float
    low: float
    mean: float
    samples: int


def range_bounds(start_date: date, end_date: date) -> tuple[int, int]:
    """UNIX-second bounds covering both dates completely (UTC)."""
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return int(start.timestamp()), int(end.timestamp()) - 1


def fetch_price_range(start_date, end_date, session=None, today=None):
    """Fetch ``(datetime, price)`` pairs between two dates, end date inclusive.

    The range is validated before any request is made.

    Raises:
        ValidationError: Dates are missing, out of order or in the future.
        RateLimitedError: The API answered with HTTP 429.
        HistoryFetchError: Any other network or payload problem.
    """
    errors = validate_date_range(start_date, end_date, today=today)
    if errors:
        raise ValidationError(errors)

    from_ts, to_ts = range_bounds(start_date, end_date)
    url = f"{COINGECKO_API_BASE}/coins/{ASSET_ID}/market_chart/range"
    params = {"vs_currency": QUOTE_CURRENCY, "from": from_ts, "to": to_ts}

    owns_session = session is None
    if owns_session:
        session = requests.Session()
    try:
        response = session.get(url, params=params, timeout=HISTORY_TIMEOUT)
        if response.status_code == 429:
            logging.warning("Price history request was rate limited")
            raise RateLimitedError()
        response.raise_for_status()
        raw_prices = response.json()["prices"]
        prices = [
            (datetime.fromtimestamp(ts / 1000, tz=timezone.utc), float(price))
            for ts, price in raw_prices
        ]
    except requests.exceptions.RequestException as e:
        logging.warning(f"Price history request failed: {e}")
        raise HistoryFetchError(
            "Could not load historical prices from the server. Please try again."
        ) from e
    except (ValueError, KeyError, TypeError, OverflowError, OSError, json.JSONDecodeError) as e:
        logging.warning(f"Price history response was malformed: {e}")
        raise HistoryFetchError("The price history response could not be read.") from e
    finally:
        if owns_session:
            session.close()

    return prices


def summarize_prices(start_date: date, end_date: date, prices: Sequence) -> PriceRangeSummary:
    """Reduce a ``(timestamp, price)`` series to high, low and mean."""
    if not prices:
        raise HistoryFetchError("No price data is available for this date range.")

    values = np.asarray([price for _, price in prices], dtype=float)
    return PriceRangeSummary(
        start=start_date,
        end=end_date,
        high=float(values.max()),
        low=float(values.min()),
        mean=float(values.mean()),
        samples=int(values.size),
    )
