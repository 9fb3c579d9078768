"""Account risk settings (the dollar value of 1R)."""

from dataclasses import dataclass
from typing import Literal, Mapping

from core.helpers.validation import finite_float

RiskMode = Literal["percentage", "fixed"]


@dataclass(frozen=True)
class RiskSettings:
    portfolio_size: float = 10000.0
    risk_mode: RiskMode = "percentage"
    risk_per_trade: float = 1.0  # percent of portfolio, or dollars when fixed

    @property
    def one_r(self) -> float:
        """Dollar amount a single R represents."""
        if self.risk_per_trade <= 0:
            return 0.0
        if self.risk_mode == "percentage":
            return max(self.portfolio_size, 0.0) * self.risk_per_trade / 100
        return self.risk_per_trade

    @property
    def configured(self) -> bool:
        return self.portfolio_size > 0 and self.risk_per_trade > 0

    def position_size(self, entry: float, stop: float, multiplier: float = 1.0) -> float:
        """Quantity whose entry-to-stop loss equals one R (0 when undefined)."""
        per_unit = abs(entry - stop) * multiplier
        if per_unit <= 0 or self.one_r <= 0:
            return 0.0
        return self.one_r / per_unit

    def to_dict(self) -> dict:
        return {
            "portfolio_size": self.portfolio_size,
            "risk_mode": self.risk_mode,
            "risk_per_trade": self.risk_per_trade,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "RiskSettings":
        mode = data.get("risk_mode", "percentage")
        if mode not in ("percentage", "fixed"):
            mode = "percentage"
        return cls(
            portfolio_size=finite_float(data.get("portfolio_size"), 10000.0),
            risk_mode=mode,
            risk_per_trade=finite_float(data.get("risk_per_trade"), 1.0),
        )
