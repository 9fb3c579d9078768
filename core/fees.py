"""Commission estimates from a per-asset-class schedule."""

from dataclasses import dataclass
from typing import Any, Optional, Union

from core.helpers.validation import coerce_number
from core.models.asset import AssetClass
from core.models.commission import COMMISSION_KEYS, CommissionSettings
from core.models.side import Side


@dataclass(frozen=True)
class SellSideFees:
    """Regulatory fees charged on sells only (US equities).

    sec_fee_rate: fraction of sale proceeds (e.g. 0.0000278)
    taf_per_share: FINRA trading activity fee per share sold
    taf_max: cap on the TAF per trade
    """
    sec_fee_rate: float = 0.0
    taf_per_share: float = 0.0
    taf_max: float = 0.0

    def on_sale(self, price: float, quantity: float, multiplier: float = 1.0) -> float:
        if price <= 0 or quantity <= 0:
            return 0.0
        sec = price * quantity * multiplier * self.sec_fee_rate
        taf = quantity * self.taf_per_share
        if self.taf_max > 0:
            taf = min(taf, self.taf_max)
        return sec + taf


def commission_key(asset_class: Union[AssetClass, str, None]) -> str:
    if asset_class is None:
        return ""
    if isinstance(asset_class, AssetClass):
        return asset_class.commission_key
    text = str(asset_class).strip().lower()
    if text in COMMISSION_KEYS:
        return text
    # Serialized enum values ("FX", "Futures") and loose spellings
    resolved = AssetClass.from_value(text)
    return resolved.commission_key if resolved is not None else text


def estimate_fees(
    commission_settings: Optional[CommissionSettings],
    entry_price: Any,
    quantity: Any,
    asset_class: Union[AssetClass, str, None],
    multiplier: Any = 1,
) -> float:
    """Single-sided commission for one fill.

    percentage: price * qty * multiplier * value / 100
    flat:       value * qty
    Unknown asset class, missing schedule or non-positive price/quantity -> 0.
    """
    price = coerce_number(entry_price)
    qty = coerce_number(quantity)
    if price <= 0 or qty <= 0 or commission_settings is None:
        return 0.0

    setting = commission_settings.get(commission_key(asset_class))
    if setting is None:
        return 0.0

    value = setting.amount
    if setting.type == "percentage":
        mult = coerce_number(multiplier) or 1.0
        return price * qty * mult * (value / 100)
    return value * qty


def estimate_total_fees(
    commission_settings: Optional[CommissionSettings],
    entry_price: Any,
    exit_price: Any,
    quantity: Any,
    asset_class: Union[AssetClass, str, None],
    multiplier: Any = 1,
    sell_side_fees: Optional[SellSideFees] = None,
    side: Union[Side, str, None] = Side.LONG,
) -> float:
    """Round-trip estimate: the entry leg plus the exit leg.

    Both legs use the same schedule. ``sell_side_fees``, when given, is
    added to the selling leg only (exit for LONG, entry for SHORT).
    """
    entry_leg = estimate_fees(commission_settings, entry_price, quantity, asset_class, multiplier)
    exit_leg = estimate_fees(commission_settings, exit_price, quantity, asset_class, multiplier)
    total = entry_leg + exit_leg

    if sell_side_fees is not None:
        resolved = Side.from_value(side) or Side.LONG
        sale_price = exit_price if resolved is Side.LONG else entry_price
        total += sell_side_fees.on_sale(
            coerce_number(sale_price),
            coerce_number(quantity),
            coerce_number(multiplier) or 1.0,
        )
    return total
