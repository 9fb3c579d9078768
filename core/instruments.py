"""Static instrument table: tick size, tick value, point multiplier.

Futures entries are keyed by root symbol; contract codes such as ``NQZ4``
resolve to their root through ``core.asset_class``.
"""

from typing import Dict

from core.models.asset import AssetClass, Instrument

_F = AssetClass.FUTURES
_C = AssetClass.CRYPTO
_X = AssetClass.FX
_S = AssetClass.STOCKS


def _build(*rows: tuple) -> Dict[str, Instrument]:
    table = {}
    for symbol, asset_class, tick_size, tick_value, multiplier, decimals in rows:
        table[symbol] = Instrument(
            symbol=symbol,
            asset_class=asset_class,
            tick_size=tick_size,
            tick_value=tick_value,
            multiplier=multiplier,
            decimals=decimals,
        )
    return table


INSTRUMENTS: Dict[str, Instrument] = _build(
    # Equity index
    ("NQ", _F, 0.25, 5.0, 20.0, 2),
    ("MNQ", _F, 0.25, 0.5, 2.0, 2),
    ("ES", _F, 0.25, 12.5, 50.0, 2),
    ("MES", _F, 0.25, 1.25, 5.0, 2),
    ("YM", _F, 1.0, 5.0, 5.0, 0),
    ("MYM", _F, 1.0, 0.5, 0.5, 0),
    ("RTY", _F, 0.1, 5.0, 50.0, 1),
    ("M2K", _F, 0.1, 0.5, 5.0, 1),
    # Energy
    ("CL", _F, 0.01, 10.0, 1000.0, 2),
    ("MCL", _F, 0.01, 1.0, 100.0, 2),
    ("QM", _F, 0.025, 12.5, 500.0, 3),
    ("NG", _F, 0.001, 10.0, 10000.0, 3),
    ("QG", _F, 0.005, 12.5, 2500.0, 3),
    # Metals
    ("GC", _F, 0.1, 10.0, 100.0, 1),
    ("MGC", _F, 0.1, 1.0, 10.0, 1),
    ("SI", _F, 0.005, 25.0, 5000.0, 3),
    ("SIL", _F, 0.005, 5.0, 1000.0, 3),
    # Rates
    ("ZB", _F, 0.03125, 31.25, 1000.0, 5),
    ("ZN", _F, 0.015625, 15.625, 1000.0, 6),
    ("ZF", _F, 0.0078125, 7.8125, 1000.0, 7),
    ("ZT", _F, 0.00390625, 7.8125, 2000.0, 8),
    # Currency futures
    ("6E", _F, 0.00005, 6.25, 125000.0, 5),
    ("M6E", _F, 0.0001, 1.25, 12500.0, 4),
    # Crypto futures
    ("BTC", _F, 5.0, 25.0, 5.0, 0),
    ("MBT", _F, 5.0, 0.5, 0.1, 0),
    ("ETH", _F, 0.5, 25.0, 50.0, 1),
    ("MET", _F, 0.5, 0.05, 0.1, 1),
    # Crypto spot
    ("BTCUSDT", _C, 0.01, 0.01, 1.0, 2),
    ("ETHUSDT", _C, 0.01, 0.01, 1.0, 2),
    ("SOLUSDT", _C, 0.01, 0.01, 1.0, 2),
    ("BTCUSD", _C, 0.01, 0.01, 1.0, 2),
    ("ETHUSD", _C, 0.01, 0.01, 1.0, 2),
    ("SOLUSD", _C, 0.01, 0.01, 1.0, 2),
    # FX (multiplier = units per standard lot)
    ("EURUSD", _X, 0.00001, 1.0, 100000.0, 5),
    ("GBPUSD", _X, 0.00001, 1.0, 100000.0, 5),
    ("AUDUSD", _X, 0.00001, 1.0, 100000.0, 5),
    ("NZDUSD", _X, 0.00001, 1.0, 100000.0, 5),
    ("USDCAD", _X, 0.00001, 1.0, 100000.0, 5),
    ("USDCHF", _X, 0.00001, 1.0, 100000.0, 5),
    ("USDJPY", _X, 0.001, 1.0, 100000.0, 3),
    ("EURJPY", _X, 0.001, 1.0, 100000.0, 3),
    ("GBPJPY", _X, 0.001, 1.0, 100000.0, 3),
    ("XAUUSD", _X, 0.01, 1.0, 100.0, 2),
    # Stocks
    ("AAPL", _S, 0.01, 0.01, 1.0, 2),
    ("MSFT", _S, 0.01, 0.01, 1.0, 2),
    ("NVDA", _S, 0.01, 0.01, 1.0, 2),
    ("TSLA", _S, 0.01, 0.01, 1.0, 2),
    ("AMZN", _S, 0.01, 0.01, 1.0, 2),
    ("META", _S, 0.01, 0.01, 1.0, 2),
    ("SPY", _S, 0.01, 0.01, 1.0, 2),
    ("QQQ", _S, 0.01, 0.01, 1.0, 2),
)

FUTURES_ROOTS = frozenset(
    symbol for symbol, inst in INSTRUMENTS.items() if inst.asset_class is AssetClass.FUTURES
)

CRYPTO_BASES = frozenset({
    "BTC", "ETH", "SOL", "XRP", "ADA", "DOGE", "DOT", "AVAX", "LINK", "LTC",
    "BCH", "MATIC", "UNI", "ATOM", "SHIB", "TRX", "BNB", "XLM", "ARB", "OP",
    "NEAR", "APT", "PEPE", "SUI", "TON",
})

CRYPTO_QUOTES = ("USDT", "USDC", "BUSD")

FX_CURRENCIES = frozenset({
    "USD", "EUR", "GBP", "JPY", "AUD", "NZD", "CAD", "CHF", "SEK", "NOK",
    "DKK", "HKD", "SGD", "MXN", "ZAR", "TRY", "PLN", "CNH",
})

# Standard equity option contract size
OPTIONS_MULTIPLIER = 100.0
