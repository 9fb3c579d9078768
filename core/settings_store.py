"""Journal settings persistence: commission schedule, risk settings, strategies.

Callers load settings through a repository and pass them explicitly to the
calculators; nothing in the calculation layer reads stored state itself.
"""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from core.logging_utils import get_logger
from core.models.commission import CommissionSettings
from core.models.risk import RiskSettings

logger = get_logger(__name__)


class ISettingsRepository(Protocol):
    """Settings persistence abstraction."""

    def load_commissions(self) -> CommissionSettings:
        ...

    def save_commissions(self, commissions: CommissionSettings) -> bool:
        ...

    def load_risk_settings(self) -> RiskSettings:
        ...

    def save_risk_settings(self, risk: RiskSettings) -> bool:
        ...

    def load_strategies(self) -> List[str]:
        ...

    def save_strategies(self, strategies: List[str]) -> bool:
        ...


def _clean_strategies(strategies) -> List[str]:
    seen = []
    for name in strategies or []:
        text = str(name).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


class InMemorySettingsRepository:
    """Process-local repository, used by tests and one-shot tools."""

    def __init__(
        self,
        commissions: Optional[CommissionSettings] = None,
        risk: Optional[RiskSettings] = None,
        strategies: Optional[List[str]] = None,
    ):
        self._commissions = commissions or CommissionSettings()
        self._risk = risk or RiskSettings()
        self._strategies = _clean_strategies(strategies)

    def load_commissions(self) -> CommissionSettings:
        return self._commissions

    def save_commissions(self, commissions: CommissionSettings) -> bool:
        self._commissions = commissions
        return True

    def load_risk_settings(self) -> RiskSettings:
        return self._risk

    def save_risk_settings(self, risk: RiskSettings) -> bool:
        self._risk = risk
        return True

    def load_strategies(self) -> List[str]:
        return list(self._strategies)

    def save_strategies(self, strategies: List[str]) -> bool:
        self._strategies = _clean_strategies(strategies)
        return True


class JsonSettingsRepository:
    """
    Settings stored in a single JSON document with:
    - Atomic writes (write to temp, then rename)
    - Backup of the previous file before each write
    - Recovery from backup when the main file is corrupt
    - Defaults for anything missing or unreadable
    """

    def __init__(
        self,
        path: Path,
        default_commissions: Optional[CommissionSettings] = None,
        default_risk: Optional[RiskSettings] = None,
    ):
        self.path = Path(path)
        self.backup_path = self.path.with_suffix(self.path.suffix + ".bak")
        self.default_commissions = default_commissions or CommissionSettings()
        self.default_risk = default_risk or RiskSettings()

    @classmethod
    def from_settings(cls, config=None) -> "JsonSettingsRepository":
        """Repository at SETTINGS_PATH with environment-provided defaults."""
        if config is None:
            from core.config import settings as config
        return cls(
            Path(config.settings_path),
            default_commissions=config.default_commissions(),
            default_risk=config.default_risk_settings(),
        )

    def _create_backup(self) -> None:
        if self.path.exists():
            try:
                shutil.copy2(self.path, self.backup_path)
            except OSError as e:
                logger.warning("[SETTINGS] Failed to create backup: %s", e)

    def _atomic_write(self, data: dict) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._create_backup()

        temp_path = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=".settings_", suffix=".tmp"
            )
            with os.fdopen(temp_fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.path)
            temp_path = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("[SETTINGS] Atomic write failed: %s", e)
            return False
        finally:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass

    def _read_file(self, path: Path) -> Optional[dict]:
        try:
            content = path.read_text().strip()
        except OSError as e:
            logger.error("[SETTINGS] Failed to read %s: %s", path, e)
            return None
        if not content:
            logger.warning("[SETTINGS] %s is empty", path)
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("[SETTINGS] %s corrupted: %s", path, e)
            return None
        if not isinstance(data, dict):
            logger.error("[SETTINGS] %s does not hold an object", path)
            return None
        return data

    def _load(self) -> Dict:
        if self.path.exists():
            data = self._read_file(self.path)
            if data is not None:
                return data

        if self.backup_path.exists():
            logger.info("[SETTINGS] Attempting recovery from backup")
            data = self._read_file(self.backup_path)
            if data is not None:
                self._atomic_write(data)
                return data
        return {}

    def _update(self, section: str, value) -> bool:
        data = self._load()
        data[section] = value
        if self._atomic_write(data):
            logger.debug("[SETTINGS] Saved %s", section)
            return True
        logger.error("[SETTINGS] FAILED to save %s", section)
        return False

    def load_commissions(self) -> CommissionSettings:
        stored = self._load().get("commissions")
        if not isinstance(stored, dict):
            return self.default_commissions
        merged = self.default_commissions.to_dict()
        merged.update(stored)
        return CommissionSettings.from_dict(merged, base_defaults=False)

    def save_commissions(self, commissions: CommissionSettings) -> bool:
        return self._update("commissions", commissions.to_dict())

    def load_risk_settings(self) -> RiskSettings:
        stored = self._load().get("risk")
        if not isinstance(stored, dict):
            return self.default_risk
        merged = self.default_risk.to_dict()
        merged.update(stored)
        return RiskSettings.from_dict(merged)

    def save_risk_settings(self, risk: RiskSettings) -> bool:
        return self._update("risk", risk.to_dict())

    def load_strategies(self) -> List[str]:
        stored = self._load().get("strategies")
        if not isinstance(stored, list):
            return []
        return _clean_strategies(stored)

    def save_strategies(self, strategies: List[str]) -> bool:
        return self._update("strategies", _clean_strategies(strategies))
