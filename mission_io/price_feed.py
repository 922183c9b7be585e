"""
Live spot price feed.

Sources:
- HTTP backend: GET {api_base_url}/stock/{ticker} -> {"price": ...}
- Yahoo Finance via yfinance

The first failed fetch latches the feed as unavailable; from then on the
configured fallback price is returned and the poller stops. No retries.
"""

import logging
import math
import threading
from typing import Any, Optional

import requests
import yfinance as yf

from mission_config.settings import FeedConfig

logger = logging.getLogger(__name__)

# Backends disagree on the field name; first positive number wins
PRICE_FIELDS = ('price', 'current_price', 'last_price', 'close', 'last', 'value')


class PriceFeedError(RuntimeError):
    """A price source could not produce a usable price."""


def extract_price(payload: Any) -> Optional[float]:
    """First positive finite number among PRICE_FIELDS, else None."""
    if not isinstance(payload, dict):
        return None
    for name in PRICE_FIELDS:
        value = payload.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isfinite(value) and value > 0:
            return float(value)
    return None


class HttpPriceSource:
    """Price from the companion REST backend."""

    def __init__(self, api_base_url: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, ticker: str) -> float:
        url = f"{self.api_base_url}/stock/{ticker}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise PriceFeedError(f"{url}: {e}") from e

        price = extract_price(payload)
        if price is None:
            raise PriceFeedError(f"{url}: price not found in API response")
        return price


class YahooPriceSource:
    """Latest daily close from Yahoo Finance."""

    def fetch(self, ticker: str) -> float:
        try:
            history = yf.Ticker(ticker).history(period="1d")
        except Exception as e:
            raise PriceFeedError(f"yfinance {ticker}: {e}") from e

        if history is None or history.empty or 'Close' not in history.columns:
            raise PriceFeedError(f"yfinance {ticker}: no price data")

        price = float(history['Close'].iloc[-1])
        if not math.isfinite(price) or price <= 0:
            raise PriceFeedError(f"yfinance {ticker}: unusable price {price}")
        return price


def make_price_source(config: FeedConfig):
    if config.source == 'yfinance':
        return YahooPriceSource()
    if config.source == 'http':
        return HttpPriceSource(config.api_base_url, config.request_timeout)
    raise ValueError(f"Unknown price source: {config.source!r}")


class SpotPriceFeed:
    """
    Fetches spot prices, falling back permanently after the first failure.
    """

    def __init__(self, config: Optional[FeedConfig] = None, source=None):
        self.config = config or FeedConfig()
        self.source = source or make_price_source(self.config)
        self.service_unavailable = False

    def fetch(self, ticker: Optional[str] = None) -> float:
        ticker = ticker or self.config.ticker
        if self.service_unavailable:
            return self.config.fallback_price

        try:
            price = self.source.fetch(ticker)
        except PriceFeedError as e:
            self.service_unavailable = True
            logger.warning(
                f"Price service unavailable ({e}). Using default price "
                f"${self.config.fallback_price:.2f}; price updates disabled."
            )
            return self.config.fallback_price

        logger.debug(f"Fetched {ticker} price: ${price:.2f}")
        return price

    def initial_spot(self, ticker: Optional[str] = None) -> float:
        """Spot to launch with: live price if reachable, else the fallback."""
        return self.fetch(ticker)


class SpotPricePoller(threading.Thread):
    """
    Background thread posting feed prices into an UpdateMailbox every
    poll interval. Exits when the feed latches unavailable or on stop().
    """

    def __init__(self, feed: SpotPriceFeed, mailbox, ticker: Optional[str] = None,
                 interval: Optional[float] = None):
        super().__init__(name="spot-price-poller", daemon=True)
        self.feed = feed
        self.mailbox = mailbox
        self.ticker = ticker or feed.config.ticker
        self.interval = interval if interval is not None else feed.config.poll_interval
        self.polls = 0
        self._stop_event = threading.Event()

    def run(self) -> None:
        if self.feed.service_unavailable:
            logger.info("Price service unavailable, periodic updates not started")
            return

        while not self._stop_event.wait(self.interval):
            price = self.feed.fetch(self.ticker)
            if self.feed.service_unavailable:
                logger.info("Periodic price updates stopped")
                return
            self.mailbox.post_spot(self.ticker, price)
            self.polls += 1

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
