"""
Tests for the spot price feed and background poller.
"""

import logging
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mission_config.settings import FeedConfig
from mission_io.price_feed import (
    HttpPriceSource,
    PriceFeedError,
    SpotPriceFeed,
    SpotPricePoller,
    YahooPriceSource,
    extract_price,
    make_price_source
)
from rocket_engine.mailbox import UpdateMailbox


class FakeSource:
    """Returns queued prices, raising PriceFeedError once exhausted."""

    def __init__(self, prices):
        self.prices = list(prices)
        self.calls = 0

    def fetch(self, ticker):
        self.calls += 1
        if not self.prices:
            raise PriceFeedError("service down")
        return self.prices.pop(0)


class TestExtractPrice:
    """Tests for response field fallbacks."""

    @pytest.mark.parametrize("payload,expected", [
        ({'price': 601.5}, 601.5),
        ({'current_price': 602}, 602.0),
        ({'last_price': 603.0}, 603.0),
        ({'price': 0, 'close': 604.0}, 604.0),
        ({'value': 605.0, 'last': 606.0}, 606.0),
    ])
    def test_field_order(self, payload, expected):
        assert extract_price(payload) == expected

    @pytest.mark.parametrize("payload", [
        {},
        {'price': None},
        {'price': -1},
        {'price': True},
        {'price': "600"},
        [600.0],
    ])
    def test_unusable(self, payload):
        assert extract_price(payload) is None


class TestHttpPriceSource:
    """Tests for the REST backend source."""

    def test_fetch(self):
        session = MagicMock()
        session.get.return_value.json.return_value = {'price': 612.3}
        source = HttpPriceSource("http://localhost:5001/api/", timeout=3.0, session=session)

        assert source.fetch("SPY") == 612.3
        session.get.assert_called_once_with("http://localhost:5001/api/stock/SPY", timeout=3.0)

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(PriceFeedError):
            HttpPriceSource("http://x", session=session).fetch("SPY")

    def test_http_error(self):
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        with pytest.raises(PriceFeedError):
            HttpPriceSource("http://x", session=session).fetch("SPY")

    def test_price_missing(self):
        session = MagicMock()
        session.get.return_value.json.return_value = {'symbol': 'SPY'}
        with pytest.raises(PriceFeedError, match="price not found"):
            HttpPriceSource("http://x", session=session).fetch("SPY")


class TestYahooPriceSource:
    """Tests for the yfinance source."""

    def test_latest_close(self):
        with patch("mission_io.price_feed.yf.Ticker") as ticker_cls:
            ticker_cls.return_value.history.return_value = pd.DataFrame({'Close': [600.0, 601.25]})
            assert YahooPriceSource().fetch("SPY") == 601.25
            ticker_cls.assert_called_once_with("SPY")

    def test_empty_history(self):
        with patch("mission_io.price_feed.yf.Ticker") as ticker_cls:
            ticker_cls.return_value.history.return_value = pd.DataFrame()
            with pytest.raises(PriceFeedError):
                YahooPriceSource().fetch("SPY")

    def test_download_failure(self):
        with patch("mission_io.price_feed.yf.Ticker") as ticker_cls:
            ticker_cls.return_value.history.side_effect = RuntimeError("rate limited")
            with pytest.raises(PriceFeedError):
                YahooPriceSource().fetch("SPY")

    def test_source_selection(self):
        assert isinstance(make_price_source(FeedConfig(source='yfinance')), YahooPriceSource)
        assert isinstance(make_price_source(FeedConfig()), HttpPriceSource)
        with pytest.raises(ValueError):
            make_price_source(FeedConfig(source='carrier-pigeon'))


class TestSpotPriceFeed:
    """Tests for fallback latching."""

    def test_live_price(self):
        feed = SpotPriceFeed(FeedConfig(), source=FakeSource([650.0]))
        assert feed.initial_spot() == 650.0
        assert not feed.service_unavailable

    def test_failure_latches_fallback(self, caplog):
        source = FakeSource([])
        feed = SpotPriceFeed(FeedConfig(), source=source)

        with caplog.at_level(logging.WARNING, logger='mission_io.price_feed'):
            assert feed.fetch() == 680.0
            assert feed.fetch() == 680.0

        assert feed.service_unavailable
        assert source.calls == 1
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1

    def test_custom_fallback(self):
        feed = SpotPriceFeed(FeedConfig(fallback_price=500.0), source=FakeSource([]))
        assert feed.fetch() == 500.0


class TestSpotPricePoller:
    """Tests for the background poller."""

    def test_posts_then_stops_after_failure(self):
        feed = SpotPriceFeed(FeedConfig(ticker='SPY'), source=FakeSource([600.0, 601.0]))
        mailbox = UpdateMailbox()
        poller = SpotPricePoller(feed, mailbox, interval=0.01)

        poller.start()
        poller.join(timeout=5.0)

        assert not poller.is_alive()
        assert poller.polls == 2
        assert feed.service_unavailable
        assert mailbox.drain().spot == {'SPY': 601.0}

    def test_not_started_when_unavailable(self):
        source = FakeSource([])
        feed = SpotPriceFeed(FeedConfig(), source=source)
        feed.fetch()

        poller = SpotPricePoller(feed, UpdateMailbox(), interval=0.01)
        poller.start()
        poller.join(timeout=5.0)

        assert not poller.is_alive()
        assert poller.polls == 0
        assert source.calls == 1

    def test_stop(self):
        feed = SpotPriceFeed(FeedConfig(), source=FakeSource([600.0] * 1000))
        poller = SpotPricePoller(feed, UpdateMailbox(), interval=60.0)
        poller.start()
        poller.stop(timeout=5.0)
        assert not poller.is_alive()
        assert poller.polls == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
