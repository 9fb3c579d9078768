"""
Broker and journal CSV importers.

Each broker lives in its own module as a BrokerParser subclass; the
dispatcher asks them in priority order which one recognizes a file.
"""

from .base import BrokerParser, FillParser, RoundTripParser, backfill, make_external_id
from .dispatcher import (
    PARSERS,
    available_brokers,
    detect_parser,
    get_parser,
    parse_broker_csv,
    parse_broker_csv_bytes,
)
from .fills import FillMatcher, match_fills
from .journals import JOURNAL_LAYOUTS, JournalLayout, JournalParser

__all__ = [
    "BrokerParser",
    "FillParser",
    "RoundTripParser",
    "backfill",
    "make_external_id",
    "PARSERS",
    "available_brokers",
    "detect_parser",
    "get_parser",
    "parse_broker_csv",
    "parse_broker_csv_bytes",
    "FillMatcher",
    "match_fills",
    "JOURNAL_LAYOUTS",
    "JournalLayout",
    "JournalParser",
]
