# pricing.py
"""Current Bitcoin price resolution with an ordered provider fallback chain."""

import json
import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Sequence

import requests

from config import (
    ASSET_ID,
    BINANCE_API_BASE,
    COINGECKO_API_BASE,
    DEFAULT_FALLBACK_PRICE,
    MARKET_CHART_DAYS,
    PRICE_REFRESH_INTERVAL,
    PROVIDER_TIMEOUT,
    QUOTE_CURRENCY,
    TRADING_PAIR,
)
from exceptions import ProviderFailure


class PriceSource(str, Enum):
    COINGECKO_SIMPLE = "coingecko_simple"
    COINGECKO_MARKET_CHART = "coingecko_market_chart"
    BINANCE_TICKER = "binance_ticker"
    STATIC_ESTIMATE = "static_estimate"

    @property
    def label(self) -> str:
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    PriceSource.COINGECKO_SIMPLE: "CoinGecko",
    PriceSource.COINGECKO_MARKET_CHART: "CoinGecko market chart",
    PriceSource.BINANCE_TICKER: "Binance",
    PriceSource.STATIC_ESTIMATE: "static estimate",
}


@dataclass(frozen=True)
class PriceQuote:
    """A single resolved price observation tagged with where it came from."""

    value: float
    source: PriceSource
    is_estimated: bool
    fetched_at: datetime = field(default_factory=datetime.now)


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _require_price(raw) -> float:
    price = float(raw)
    if not math.isfinite(price) or price <= 0:
        raise ValueError(f"price {raw!r} is not a positive number")
    return price


def fetch_coingecko_simple(session, timeout: float) -> float:
    """Read ``{asset: {currency: price}}`` from the simple price endpoint."""
    response = session.get(
        f"{COINGECKO_API_BASE}/simple/price",
        params={"ids": ASSET_ID, "vs_currencies": QUOTE_CURRENCY},
        timeout=timeout,
    )
    response.raise_for_status()
    data = response.json()
    return _require_price(data[ASSET_ID][QUOTE_CURRENCY])


def fetch_coingecko_market_chart(session, timeout: float) -> float:
    """Take the chronologically last ``[timestamp_ms, price]`` pair of a short market chart."""
    response = session.get(
        f"{COINGECKO_API_BASE}/coins/{ASSET_ID}/market_chart",
        params={"vs_currency": QUOTE_CURRENCY, "days": MARKET_CHART_DAYS},
        timeout=timeout,
    )
    response.raise_for_status()
    prices = response.json()["prices"]
    if not prices:
        raise KeyError("market chart returned no prices")
    latest = max(prices, key=lambda entry: entry[0])
    return _require_price(latest[1])


def fetch_binance_ticker(session, timeout: float) -> float:
    response = session.get(
        f"{BINANCE_API_BASE}/ticker/price",
        params={"symbol": TRADING_PAIR},
        timeout=timeout,
    )
    response.raise_for_status()
    return _require_price(response.json()["price"])


@dataclass(frozen=True)
class PriceProvider:
    source: PriceSource
    fetch: Callable[..., float]


DEFAULT_PROVIDERS = (
    PriceProvider(PriceSource.COINGECKO_SIMPLE, fetch_coingecko_simple),
    PriceProvider(PriceSource.COINGECKO_MARKET_CHART, fetch_coingecko_market_chart),
    PriceProvider(PriceSource.BINANCE_TICKER, fetch_binance_ticker),
)

# Anything a misbehaving provider can produce while we parse its answer.
PROVIDER_ERRORS = (
    requests.exceptions.RequestException,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    OverflowError,
    json.JSONDecodeError,
)


class PriceCache:
    """Holds the current quote. Writers replace it whole; last write wins."""

    def __init__(self, quote: Optional[PriceQuote] = None):
        self._quote = quote

    def get(self) -> Optional[PriceQuote]:
        return self._quote

    def update(self, quote: PriceQuote) -> None:
        self._quote = quote


class PriceOracle:
    """Resolve the current price from an ordered list of providers.

    Each provider gets its own ``timeout``. The first provider returning a
    usable price wins and the rest are skipped. When every provider fails
    the oracle answers with ``fallback_price`` flagged as estimated, so
    :meth:`resolve_current_price` never raises.

    Failures from the latest resolution are kept in :attr:`failures`.
    """

    def __init__(
        self,
        providers: Sequence[PriceProvider] = DEFAULT_PROVIDERS,
        timeout: float = PROVIDER_TIMEOUT,
        fallback_price: float = DEFAULT_FALLBACK_PRICE,
        cache: Optional[PriceCache] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.providers = tuple(providers)
        self.timeout = timeout
        self.fallback_price = fallback_price
        self.cache = cache if cache is not None else PriceCache()
        self.failures: list[ProviderFailure] = []
        self._clock = clock
        self._resolved_at: Optional[float] = None

    def resolve_current_price(self) -> PriceQuote:
        failures = []
        quote = None

        with requests.Session() as session:
            for provider in self.providers:
                try:
                    price = provider.fetch(session, self.timeout)
                except PROVIDER_ERRORS as e:
                    failure = ProviderFailure(
                        source=provider.source.value,
                        reason=str(e) or type(e).__name__,
                        timestamp=_timestamp(),
                    )
                    logging.warning(str(failure))
                    failures.append(failure)
                    continue
                quote = PriceQuote(value=price, source=provider.source, is_estimated=False)
                break

        if quote is None:
            logging.warning(
                f"[{_timestamp()}] All {len(self.providers)} price providers failed. "
                f"Using fallback price of ${self.fallback_price:,}"
            )
            quote = PriceQuote(
                value=float(self.fallback_price),
                source=PriceSource.STATIC_ESTIMATE,
                is_estimated=True,
            )
        else:
            logging.info(
                f"[{_timestamp()}] Bitcoin price {quote.value:,.2f} from {quote.source.label}"
            )

        self.failures = failures
        self.cache.update(quote)
        self._resolved_at = self._clock()
        return quote

    def current(self) -> PriceQuote:
        """Return the cached quote, resolving once if nothing is cached yet."""
        quote = self.cache.get()
        if quote is None:
            quote = self.resolve_current_price()
        return quote

    def is_stale(self, max_age: float = PRICE_REFRESH_INTERVAL) -> bool:
        if self.cache.get() is None or self._resolved_at is None:
            return True
        return self._clock() - self._resolved_at >= max_age

    def refresh_if_stale(self, max_age: float = PRICE_REFRESH_INTERVAL) -> PriceQuote:
        if self.is_stale(max_age):
            return self.resolve_current_price()
        return self.cache.get()

    def failure_messages(self) -> list[str]:
        return [str(f) for f in self.failures]
