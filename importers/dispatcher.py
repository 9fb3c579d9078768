"""
Broker CSV dispatcher.

Parsers are asked in priority order whether they recognize the file's
header; the first one that does parses it. Nothing is guessed: a file no
parser recognizes comes back as a single "Unrecognized CSV format" error.
"""

import uuid
from typing import Dict, List, Optional

from core.logging_utils import get_logger
from core.models.trade import ParserResult
from importers.base import BrokerParser
from importers.csv_utils import decode_bytes, looks_like_header, read_rows
from importers.etrade import ETradeParser
from importers.fidelity import FidelityParser
from importers.ibkr import IBKRParser
from importers.journals import journal_parsers
from importers.ninjatrader import NinjaTraderParser
from importers.robinhood import RobinhoodParser
from importers.schwab import SchwabParser
from importers.tastytrade import TastytradeParser
from importers.tradestation import TradeStationParser
from importers.tradovate import TradovateParser
from importers.webull import WebullParser

logger = get_logger(__name__)

# Preamble lines brokers put above the header
HEADER_SCAN_ROWS = 30


def _build_parsers() -> List[BrokerParser]:
    parsers: List[BrokerParser] = [
        IBKRParser(),
        NinjaTraderParser(),
        TradovateParser(),
        TradeStationParser(),
        TastytradeParser(),
        SchwabParser(),
        FidelityParser(),
        ETradeParser(),
        RobinhoodParser(),
        WebullParser(),
    ]
    parsers.extend(journal_parsers())
    return sorted(parsers, key=lambda p: p.priority)


PARSERS: List[BrokerParser] = _build_parsers()
_BY_NAME: Dict[str, BrokerParser] = {p.name: p for p in PARSERS}


def available_brokers() -> List[str]:
    return [p.name for p in PARSERS]


def get_parser(name: str) -> BrokerParser:
    """Parser registered under ``name``; KeyError for unknown names."""
    key = (name or "").strip().lower()
    if key not in _BY_NAME:
        raise KeyError(f"Unknown broker {name!r}; expected one of {', '.join(available_brokers())}")
    return _BY_NAME[key]


def candidate_headers(text: str) -> List[List[str]]:
    """Rows near the top of the file that could be a header."""
    rows = read_rows(text)[:HEADER_SCAN_ROWS]
    return [row for row in rows if looks_like_header(row)]


def detect_parser(text: str) -> Optional[BrokerParser]:
    headers = candidate_headers(text)
    for parser in PARSERS:
        if any(parser.can_parse(header) for header in headers):
            return parser
    return None


def parse_broker_csv(
    text: str,
    broker: Optional[str] = None,
    batch_id: Optional[str] = None,
) -> ParserResult:
    """Parse a broker or journal CSV export into ParsedTrade records.

    Args:
        text: decoded file contents
        broker: parser name to force, skipping header detection
        batch_id: import batch id stamped on every trade (generated when omitted)
    """
    if not text or not text.strip():
        return ParserResult(errors=["Empty CSV file"])

    batch_id = batch_id or uuid.uuid4().hex
    if broker:
        parser = get_parser(broker)
    else:
        parser = detect_parser(text)
        if parser is None:
            headers = candidate_headers(text)
            seen = ", ".join(headers[0][:8]) if headers else "no header row"
            logger.warning("[IMPORT] Unrecognized CSV format (header: %s)", seen)
            return ParserResult(errors=[f"Unrecognized CSV format: {seen}"])

    logger.info("[IMPORT] Parsing with %s (batch %s)", parser.label, batch_id)
    return parser.parse(text, batch_id=batch_id)


def parse_broker_csv_bytes(
    data: bytes,
    broker: Optional[str] = None,
    batch_id: Optional[str] = None,
) -> ParserResult:
    """Same as parse_broker_csv for raw uploaded bytes."""
    return parse_broker_csv(decode_bytes(data), broker=broker, batch_id=batch_id)
