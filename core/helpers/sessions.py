"""Trading session buckets by UTC hour."""

from datetime import datetime, timezone
from typing import Optional

ASIA = "ASIA"
LONDON = "LONDON"
NY_AM = "NY_AM"
NY_PM = "NY_PM"
OVERNIGHT = "OVERNIGHT"


def detect_session(ts: Optional[datetime]) -> Optional[str]:
    """Bucket a timestamp into ASIA/LONDON/NY_AM/NY_PM/OVERNIGHT.

    Naive timestamps are treated as UTC.
    """
    if ts is None:
        return None
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    hour = ts.hour
    if hour >= 23 or hour < 8:
        return ASIA
    if hour < 13:
        return LONDON
    if hour < 17:
        return NY_AM
    if hour < 21:
        return NY_PM
    return OVERNIGHT
