"""CSV reading helpers shared by the broker parsers.

Broker exports differ in encoding, delimiter, preamble lines above the
header and date formats; everything here smooths those differences out so
parsers can work with normalized header names and plain string cells.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from core.helpers.validation import parse_number

ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")
DELIMITERS = ",;\t"

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %I:%M:%S %p",
    "%Y%m%d %H%M%S",
    "%Y%m%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%y %H:%M:%S",
    "%m/%d/%y %I:%M:%S %p",
    "%m/%d/%y %H:%M",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y",
)

_US_EASTERN = ZoneInfo("America/New_York")
_US_CENTRAL = ZoneInfo("America/Chicago")
_US_PACIFIC = ZoneInfo("America/Los_Angeles")
_ZONE_SUFFIXES = {
    "EST": _US_EASTERN, "EDT": _US_EASTERN, "ET": _US_EASTERN,
    "CST": _US_CENTRAL, "CDT": _US_CENTRAL, "CT": _US_CENTRAL,
    "PST": _US_PACIFIC, "PDT": _US_PACIFIC, "PT": _US_PACIFIC,
    "UTC": timezone.utc, "GMT": timezone.utc, "Z": timezone.utc,
}
_ZONE_SUFFIX_RE = re.compile(r"\s+([A-Z]{1,3})$")
_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")


def decode_bytes(data: bytes) -> str:
    """Decode an uploaded file, trying the encodings brokers actually use."""
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def normalize_header(name: Optional[str]) -> str:
    """Lower-case, trimmed, single-spaced header name ('Entry  Price ' -> 'entry price')."""
    text = (name or "").replace("\ufeff", "").strip().strip('"').lower()
    return " ".join(text.split())


def normalize_headers(names: Iterable[str]) -> List[str]:
    return [normalize_header(n) for n in names]


def sniff_delimiter(text: str) -> str:
    sample = "\n".join(text.splitlines()[:20])
    try:
        return csv.Sniffer().sniff(sample, delimiters=DELIMITERS).delimiter
    except csv.Error:
        counts = {d: sample.count(d) for d in DELIMITERS}
        best = max(counts, key=counts.get)
        return best if counts[best] else ","


def read_rows(text: str, delimiter: Optional[str] = None) -> List[List[str]]:
    """All rows of a CSV document as lists of stripped cells."""
    if not text:
        return []
    delimiter = delimiter or sniff_delimiter(text)
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    return [[cell.strip() for cell in row] for row in reader]


def looks_like_header(cells: Sequence[str]) -> bool:
    filled = [c for c in cells if c]
    if len(filled) < 3:
        return False
    return all(parse_number(c) is None for c in filled)


def find_header_index(rows: Sequence[Sequence[str]], required: Optional[Iterable[str]] = None) -> int:
    """Index of the header row, skipping broker preamble lines.

    With ``required`` the first row containing all those normalized names
    wins; otherwise the first row of three or more non-numeric cells.
    Returns -1 when no row qualifies.
    """
    wanted = set(required or ())
    for index, cells in enumerate(rows):
        if wanted:
            if wanted <= set(normalize_headers(cells)):
                return index
        elif looks_like_header(cells):
            return index
    return -1


@dataclass
class CsvRow:
    """One data row keyed by normalized header; ``number`` is the 1-based file line."""
    number: int
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, *names: str) -> str:
        """First non-empty value among candidate column names."""
        for name in names:
            value = self.values.get(name, "")
            if value:
                return value
        return ""

    def number_of(self, *names: str) -> Optional[float]:
        return parse_number(self.get(*names))


@dataclass
class CsvTable:
    header: List[str]
    rows: List[CsvRow]
    original_header: List[str] = field(default_factory=list)

    def has(self, *names: str) -> bool:
        return all(name in self.header for name in names)


def read_table(text: str, required: Optional[Iterable[str]] = None) -> CsvTable:
    """Parse a CSV document into a header plus keyed rows.

    Blank rows are dropped; short rows are padded with empty cells.
    """
    rows = read_rows(text)
    index = find_header_index(rows, required)
    if index < 0:
        return CsvTable(header=[], rows=[])

    original = rows[index]
    header = normalize_headers(original)
    data = []
    for offset, cells in enumerate(rows[index + 1:], start=index + 2):
        if not any(cells):
            continue
        padded = list(cells) + [""] * (len(header) - len(cells))
        values = {}
        for name, cell in zip(header, padded):
            if name and name not in values:
                values[name] = cell
        data.append(CsvRow(number=offset, values=values))
    return CsvTable(header=header, rows=data, original_header=list(original))


def _split_zone(text: str):
    match = _ZONE_SUFFIX_RE.search(text)
    if match and match.group(1) in _ZONE_SUFFIXES:
        return text[:match.start()].strip(), _ZONE_SUFFIXES[match.group(1)]
    return text, None


def parse_datetime(value: Optional[str], default_tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a broker timestamp into an aware UTC datetime.

    Accepts ISO 8601, US and European date layouts, IBKR's
    ``'2024-01-05, 09:31:12'`` and ``'20240105;093112'``, Schwab's
    ``'01/05/2024 as of 01/04/2024'`` and trailing zone names (EST, ET, ...).
    Naive values are read in ``default_tz`` (DEFAULT_TIMEZONE when omitted).
    """
    text = (value or "").strip()
    if not text:
        return None
    text = text.split(" as of ")[0].strip()
    text = text.replace(", ", " ").replace(";", " ")
    text, zone = _split_zone(text)
    if text.endswith("Z"):
        text, zone = text[:-1], timezone.utc
    text = _OFFSET_RE.sub(r"\1:\2", text) if "T" in text else text

    parsed = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None

    if parsed.tzinfo is None:
        if zone is None:
            if default_tz is None:
                from core.config import settings
                default_tz = settings.tzinfo()
            zone = default_tz
        parsed = parsed.replace(tzinfo=zone)
    return parsed.astimezone(timezone.utc)
