import os
import sys
from datetime import timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def utc_default_timezone(monkeypatch):
    """Read naive broker timestamps as UTC regardless of the local .env."""
    from core.config import settings

    monkeypatch.setattr(settings, "default_timezone", "UTC")
    yield timezone.utc
