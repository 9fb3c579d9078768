"""Per-asset-class commission schedule."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Mapping, Optional

from core.helpers.validation import finite_float

CommissionType = Literal["percentage", "flat"]

COMMISSION_KEYS = ("stocks", "crypto", "futures", "forex", "commodities", "options")


@dataclass(frozen=True)
class CommissionSetting:
    value: str
    type: CommissionType = "percentage"

    @property
    def amount(self) -> float:
        """Numeric value; unparseable strings count as zero."""
        return finite_float(self.value)

    def to_dict(self) -> dict:
        return {"value": self.value, "type": self.type}

    @classmethod
    def from_dict(cls, data: Mapping) -> "CommissionSetting":
        kind = str(data.get("type", "percentage")).strip().lower()
        if kind not in ("percentage", "flat"):
            kind = "percentage"
        return cls(value=str(data.get("value", "0")), type=kind)


DEFAULT_COMMISSIONS: Dict[str, CommissionSetting] = {
    "stocks": CommissionSetting("0.1", "percentage"),
    "crypto": CommissionSetting("0.2", "percentage"),
    "futures": CommissionSetting("2.0", "flat"),
    "forex": CommissionSetting("0.0", "percentage"),
    "commodities": CommissionSetting("0.3", "percentage"),
    "options": CommissionSetting("0.65", "flat"),
}


@dataclass(frozen=True)
class CommissionSettings:
    """Mapping from asset-class key to its commission setting.

    Read-only input to the fee estimator; edits produce a new instance via
    ``with_setting``.
    """
    entries: Dict[str, CommissionSetting] = field(
        default_factory=lambda: dict(DEFAULT_COMMISSIONS)
    )

    def get(self, key: str) -> Optional[CommissionSetting]:
        return self.entries.get(key.strip().lower())

    def __getitem__(self, key: str) -> CommissionSetting:
        return self.entries[key.strip().lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.strip().lower() in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def with_setting(self, key: str, setting: CommissionSetting) -> "CommissionSettings":
        updated = dict(self.entries)
        updated[key.strip().lower()] = setting
        return CommissionSettings(entries=updated)

    def to_dict(self) -> dict:
        return {key: setting.to_dict() for key, setting in self.entries.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping], base_defaults: bool = True) -> "CommissionSettings":
        """Build from a stored mapping, layering it over the defaults."""
        entries = dict(DEFAULT_COMMISSIONS) if base_defaults else {}
        for key, value in (data or {}).items():
            if isinstance(value, Mapping):
                entries[str(key).strip().lower()] = CommissionSetting.from_dict(value)
        return cls(entries=entries)

    @classmethod
    def empty(cls) -> "CommissionSettings":
        return cls(entries={})
