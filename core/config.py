"""Library configuration."""

import json
import logging
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Broker timestamps without an explicit offset are read in this zone
    default_timezone: str = Field(default="UTC", alias="DEFAULT_TIMEZONE")
    money_decimals: int = Field(default=2, alias="MONEY_DECIMALS")

    # Risk defaults (1R = portfolio_size * risk_per_trade% or a fixed amount)
    portfolio_size: float = Field(default=10000.0, alias="PORTFOLIO_SIZE")
    risk_mode: Literal["percentage", "fixed"] = Field(default="percentage", alias="RISK_MODE")
    risk_per_trade: float = Field(default=1.0, alias="RISK_PER_TRADE")

    # Optional JSON override of the commission schedule, e.g.
    # {"futures": {"value": "1.25", "type": "flat"}}
    commissions_json: str = Field(default="", alias="COMMISSIONS_JSON")

    settings_path: str = Field(default="data/journal_settings.json", alias="SETTINGS_PATH")

    def commission_overrides(self) -> dict:
        """Parsed COMMISSIONS_JSON, empty when unset or malformed."""
        if not self.commissions_json.strip():
            return {}
        try:
            data = json.loads(self.commissions_json)
        except json.JSONDecodeError as e:
            logger.warning("[CONFIG] COMMISSIONS_JSON ignored: %s", e)
            return {}
        if not isinstance(data, dict):
            logger.warning("[CONFIG] COMMISSIONS_JSON must be an object, got %s", type(data).__name__)
            return {}
        return data

    def default_commissions(self):
        """Commission schedule with environment overrides applied."""
        from core.models.commission import CommissionSettings

        return CommissionSettings.from_dict(self.commission_overrides())

    def default_risk_settings(self):
        from core.models.risk import RiskSettings

        return RiskSettings(
            portfolio_size=self.portfolio_size,
            risk_mode=self.risk_mode,
            risk_per_trade=self.risk_per_trade,
        )

    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.default_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("[CONFIG] Unknown timezone %r, falling back to UTC", self.default_timezone)
            return ZoneInfo("UTC")


settings = Settings()
