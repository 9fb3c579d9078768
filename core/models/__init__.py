"""Typed data models for the trade journal."""

from core.models.asset import AssetClass, Instrument
from core.models.commission import (
    COMMISSION_KEYS,
    DEFAULT_COMMISSIONS,
    CommissionSetting,
    CommissionSettings,
)
from core.models.risk import RiskSettings
from core.models.side import Confidence, Outcome, Side
from core.models.trade import (
    DirectionAssessment,
    Fill,
    ParsedTrade,
    ParserResult,
    RiskReward,
    RRResult,
)

__all__ = [
    "AssetClass",
    "COMMISSION_KEYS",
    "CommissionSetting",
    "CommissionSettings",
    "Confidence",
    "DEFAULT_COMMISSIONS",
    "DirectionAssessment",
    "Fill",
    "Instrument",
    "Outcome",
    "ParsedTrade",
    "ParserResult",
    "RiskReward",
    "RiskSettings",
    "RRResult",
    "Side",
]
