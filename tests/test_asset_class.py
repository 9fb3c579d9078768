"""Asset classification and instrument lookup."""

import pytest

from core.asset_class import (
    detect_asset_class,
    futures_root,
    get_instrument,
    get_multiplier,
    get_quantity_label,
    is_option_symbol,
    normalize_symbol,
)
from core.models.asset import AssetClass


class TestNormalizeSymbol:
    @pytest.mark.parametrize("raw,expected", [
        (" aapl ", "AAPL"),
        ("CME_MINI:NQ1!", "NQ1!"),
        ("/ESZ4", "ESZ4"),
        ("CL=F", "CL"),
        (None, ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_symbol(raw) == expected


class TestDetectAssetClass:
    @pytest.mark.parametrize("symbol,expected", [
        ("NQ", AssetClass.FUTURES),
        ("MNQZ4", AssetClass.FUTURES),
        ("ESH25", AssetClass.FUTURES),
        ("NQ 12-24", AssetClass.FUTURES),
        ("BTCUSDT", AssetClass.CRYPTO),
        ("ETH-USD", AssetClass.CRYPTO),
        ("SOL/USDC", AssetClass.CRYPTO),
        ("EURUSD", AssetClass.FX),
        ("GBP/JPY", AssetClass.FX),
        ("AAPL  240119C00150000", AssetClass.OPTIONS),
        ("AAPL", AssetClass.STOCKS),
        ("PLTR", AssetClass.STOCKS),
    ])
    def test_detect(self, symbol, expected):
        assert detect_asset_class(symbol) is expected

    def test_empty_is_unknown(self):
        assert detect_asset_class("") is None
        assert detect_asset_class(None) is None

    def test_option_symbol(self):
        assert is_option_symbol("SPY240315P00500000")
        assert not is_option_symbol("SPY")


class TestInstruments:
    def test_futures_root_prefers_longest(self):
        assert futures_root("MNQZ4") == "MNQ"
        assert futures_root("NQZ4") == "NQ"
        assert futures_root("AAPL") is None

    def test_instrument_lookup(self):
        es = get_instrument("ESZ4")
        assert es is not None
        assert es.multiplier == 50
        assert es.ticks(1.0) == pytest.approx(4.0)
        assert get_instrument("EUR/USD").symbol == "EURUSD"
        assert get_instrument("ZZZZ") is None

    @pytest.mark.parametrize("symbol,asset_class,expected", [
        ("NQ", None, 20.0),
        ("MESH5", None, 5.0),
        ("CL", None, 1000.0),
        ("AAPL", None, 1.0),
        ("XYZ", AssetClass.OPTIONS, 100.0),
        ("XYZ", "option", 100.0),
        ("UNKNOWN", None, 1.0),
    ])
    def test_multiplier(self, symbol, asset_class, expected):
        assert get_multiplier(symbol, asset_class) == expected

    def test_quantity_label(self):
        assert get_quantity_label(AssetClass.FUTURES) == "Contracts"
        assert get_quantity_label("forex") == "Lots"
        assert get_quantity_label(None) == "Shares"


class TestAssetClassFromValue:
    @pytest.mark.parametrize("raw,expected", [
        ("Stocks", AssetClass.STOCKS),
        ("EQUITY", AssetClass.STOCKS),
        ("Equity Option", AssetClass.OPTIONS),
        ("Future", AssetClass.FUTURES),
        ("Cryptocurrency", AssetClass.CRYPTO),
        ("forex", AssetClass.FX),
        ("", None),
        ("bond", None),
    ])
    def test_from_value(self, raw, expected):
        assert AssetClass.from_value(raw) is expected

    def test_commission_keys(self):
        assert AssetClass.FX.commission_key == "forex"
        assert AssetClass.STOCKS.commission_key == "stocks"
