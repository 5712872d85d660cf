"""Unit tests for market data clients and the client factory."""
import json
import os
import tempfile
from datetime import date, datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from strategy_engine.config.models import EngineConfig, LoggingConfig, MarketDataCredentials
from strategy_engine.market_data import (
    MarketDataClient,
    MarketDataClientFactory,
    MarketDataError,
    SnapshotMarketDataClient,
)


def expiration_epoch(year, month, day):
    # MarketData reports expirations as 4pm Eastern in epoch seconds
    return int(datetime(year, month, day, 21, 0, tzinfo=timezone.utc).timestamp())


def mock_response(payload, status_code=200, text=''):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    return response


class TestMarketDataClient:
    """Test cases for MarketDataClient."""

    @pytest.fixture
    def client(self, mock_logger):
        return MarketDataClient(api_token="test_token", base_url="https://api.example.com/", logger=mock_logger)

    def test_initialization(self, client):
        """Test client initialization."""
        assert client.base_url == "https://api.example.com"
        assert client.session.headers['Authorization'] == "Bearer test_token"
        assert client.session.headers['Accept'] == "application/json"
        assert client.get_provider_name() == "MarketData"

    def test_get_stock_quote(self, client, mock_logger):
        with patch.object(client.session, 'get', return_value=mock_response({'s': 'ok', 'last': [451.23]})) as get:
            price = client.get_stock_quote('SPY')

        assert price == 451.23
        get.assert_called_once_with(
            'https://api.example.com/v1/stocks/quotes/SPY/', params=None, timeout=15.0
        )
        mock_logger.log_info.assert_called_once()

    def test_get_stock_quote_no_data(self, client):
        with patch.object(client.session, 'get', return_value=mock_response({'s': 'no_data'})):
            with pytest.raises(MarketDataError, match="No quote available for SPY"):
                client.get_stock_quote('SPY')

    def test_http_error(self, client, mock_logger):
        """Test non-success status codes raise MarketDataError."""
        response = mock_response({}, status_code=401, text='Unauthorized')

        with patch.object(client.session, 'get', return_value=response):
            with pytest.raises(MarketDataError, match="MarketData API error: 401 - Unauthorized"):
                client.get_stock_quote('SPY')

        mock_logger.log_error.assert_called_once()

    def test_cached_response_accepted(self, client):
        response = mock_response({'s': 'ok', 'last': [100.0]}, status_code=203)

        with patch.object(client.session, 'get', return_value=response):
            assert client.get_stock_quote('SPY') == 100.0

    def test_request_exception(self, client, mock_logger):
        """Test transport failures surface as MarketDataError."""
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("refused")):
            with pytest.raises(MarketDataError, match="failed"):
                client.get_stock_quote('SPY')

        mock_logger.log_error.assert_called_once()

    def test_get_options_chain(self, client):
        """Test the columnar response is parsed, clamped and sorted."""
        payload = {
            's': 'ok',
            'optionSymbol': ['SPY241227C00105000', 'SPY241220P00095000', 'SPY241220C00105000'],
            'side': ['call', 'put', 'call'],
            'strike': [105, 95, 105],
            'expiration': [
                expiration_epoch(2024, 12, 27),
                expiration_epoch(2024, 12, 20),
                expiration_epoch(2024, 12, 20),
            ],
            'bid': [1.0, 0, 0.5],
            'ask': [1.2, 0, None],
            'last': [None, 0.4, 0.55],
            'volume': [10, None, 3],
            'openInterest': [100, 20, None],
            'delta': [0.35, -0.2, 0.25],
        }

        with patch.object(client.session, 'get', return_value=mock_response(payload)) as get:
            chain = client.get_options_chain('SPY', 100.0, today=date(2024, 12, 10))

        assert get.call_args.kwargs['params'] == {
            'from': '2024-12-09',
            'to': '2025-02-08',
            'strikeLimit': 1000,
        }
        assert chain.symbol == 'SPY'
        assert chain.underlying_price == 100.0
        assert [(o.expiration_date, o.strike, o.option_type) for o in chain.options] == [
            (date(2024, 12, 20), 95.0, 'put'),
            (date(2024, 12, 20), 105.0, 'call'),
            (date(2024, 12, 27), 105.0, 'call'),
        ]

        put, near_call, far_call = chain.options
        # No quotes at all: bid clamped, ask falls back to last
        assert put.bid == 0.01
        assert put.ask == 0.4
        assert put.last == 0.4
        assert put.volume == 0
        # Missing ask falls back to bid
        assert near_call.ask == 0.5
        assert near_call.open_interest == 0
        # Missing last falls back to the midpoint
        assert far_call.last == pytest.approx(1.1)
        assert far_call.premium == pytest.approx(1.1)
        assert far_call.delta == 0.35

    def test_get_options_chain_fetches_quote(self, client):
        responses = [
            mock_response({'s': 'ok', 'last': [99.5]}),
            mock_response({'s': 'no_data'}),
        ]

        with patch.object(client.session, 'get', side_effect=responses):
            chain = client.get_options_chain('SPY')

        assert chain.underlying_price == 99.5

    def test_get_options_chain_no_data(self, client, mock_logger):
        """Test a no_data response yields an empty chain."""
        with patch.object(client.session, 'get', return_value=mock_response({'s': 'no_data'})):
            chain = client.get_options_chain('XYZ', 20.0)

        assert chain.is_empty()
        assert chain.symbol == 'XYZ'
        mock_logger.log_warning.assert_called_once()


class TestSnapshotMarketDataClient:
    """Test cases for SnapshotMarketDataClient."""

    @pytest.fixture
    def snapshot_path(self, options_chain):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump(options_chain.to_dict(), f)
            path = f.name
        yield path
        os.unlink(path)

    def test_get_options_chain(self, snapshot_path, options_chain):
        client = SnapshotMarketDataClient(snapshot_path)

        chain = client.get_options_chain('test', 102.0)

        assert chain.underlying_price == 102.0
        assert len(chain.options) == len(options_chain.options)
        assert chain.expirations() == options_chain.expirations()
        assert client.get_provider_name() == "Snapshot"

    def test_get_stock_quote(self, snapshot_path):
        assert SnapshotMarketDataClient(snapshot_path).get_stock_quote('TEST') == 100.0

    def test_symbol_mismatch(self, snapshot_path):
        with pytest.raises(MarketDataError, match="Snapshot holds TEST, not SPY"):
            SnapshotMarketDataClient(snapshot_path).get_options_chain('SPY')

    def test_missing_file(self):
        with pytest.raises(MarketDataError, match="Snapshot file not found"):
            SnapshotMarketDataClient('does/not/exist.json').get_stock_quote('TEST')

    def test_invalid_file(self, mock_logger):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{ invalid json }")
            path = f.name

        try:
            client = SnapshotMarketDataClient(path, logger=mock_logger)
            with pytest.raises(MarketDataError, match="Invalid snapshot file"):
                client.get_options_chain('TEST')
            mock_logger.log_error.assert_called_once()
        finally:
            os.unlink(path)


class TestMarketDataClientFactory:
    """Test cases for MarketDataClientFactory."""

    def test_create_marketdata_client(self):
        client = MarketDataClientFactory.create_client(
            "MarketData", {'api_token': 'abc', 'timeout_seconds': 5.0}
        )

        assert isinstance(client, MarketDataClient)
        assert client.timeout_seconds == 5.0
        assert client.base_url == 'https://api.marketdata.app'

    def test_create_snapshot_client(self):
        client = MarketDataClientFactory.create_client("snapshot", {'path': 'chain.json'})
        assert isinstance(client, SnapshotMarketDataClient)

    def test_unsupported_provider(self):
        with pytest.raises(ValueError, match="Unsupported market data provider: polygon"):
            MarketDataClientFactory.create_client("polygon", {})

    def test_from_config(self):
        config = EngineConfig(
            market_data_provider='marketdata',
            logging_config=LoggingConfig(level='INFO', file_path='logs/test.log'),
            marketdata_credentials=MarketDataCredentials(api_token='abc', timeout_seconds=7.0)
        )

        client = MarketDataClientFactory.from_config(config)

        assert isinstance(client, MarketDataClient)
        assert client.api_token == 'abc'
        assert client.timeout_seconds == 7.0

    def test_supported_providers(self):
        assert MarketDataClientFactory.get_supported_providers() == ["marketdata", "snapshot"]
