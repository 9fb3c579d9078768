"""
Risk/reward and P&L calculations - single source of truth.

All trade metrics shown in the journal (risk, reward, R:R, realized R,
dollar P&L) come from here so manual entries and imported trades agree.

Every function is pure and never raises on bad numbers: inputs are coerced
with ``coerce_number`` and degenerate setups produce zeros / None.
"""

import math
from typing import Any, Mapping, Optional, Union

from core.asset_class import get_multiplier
from core.direction import assess_direction, infer_side
from core.helpers.validation import (
    coerce_number,
    is_present,
    round_money,
    safe_ratio,
)
from core.models.asset import AssetClass
from core.models.side import Outcome, Side
from core.models.trade import RiskReward, RRResult

MONEY_DECIMALS = 2


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value + 0.0  # normalize -0.0


def resolve_multiplier(
    multiplier: Any = None,
    symbol: Optional[str] = None,
    asset_class: Union[AssetClass, str, None] = None,
) -> float:
    """Explicit multiplier if positive, else instrument default, else 1."""
    explicit = abs(coerce_number(multiplier))
    if explicit > 0:
        return explicit
    if symbol or asset_class:
        return get_multiplier(symbol, asset_class)
    return 1.0


def compute_rr(
    entry: Any,
    sl: Any,
    tp: Any = None,
    qty: Any = None,
    fees: Any = 0,
    multiplier: Any = None,
    side: Union[Side, str, None] = None,
    asset_class: Union[AssetClass, str, None] = None,
    exit: Any = None,
    one_r: Any = None,
    symbol: Optional[str] = None,
    decimals: int = MONEY_DECIMALS,
) -> RRResult:
    """Risk, reward, R:R and realized result for one trade.

    Risk is measured entry-to-stop; reward entry-to-target, but only when the
    target lies on the profitable side for the resolved direction. A target
    on the wrong side zeroes the reward and sets ``conflict``.

    ``result_r`` needs entry, stop, exit and quantity and a non-zero stop
    distance; otherwise it is None. Fees reduce ``net_pnl_usd`` only.
    """
    entry_f = coerce_number(entry)
    sl_f = coerce_number(sl)
    tp_f = coerce_number(tp)
    qty_f = abs(coerce_number(qty))
    fees_f = coerce_number(fees)
    exit_f = coerce_number(exit)
    mult = resolve_multiplier(multiplier, symbol, asset_class)

    assessment = assess_direction(entry_f, sl_f, tp_f, side)
    resolved = assessment.side
    sgn = resolved.sign
    conflict = assessment.conflict

    risk_pts = abs(entry_f - sl_f) if is_present(entry_f) and is_present(sl_f) else 0.0
    risk_usd = risk_pts * qty_f * mult
    if not math.isfinite(risk_usd):
        risk_pts = risk_usd = 0.0  # overflow

    reward_pts = 0.0
    if is_present(entry_f) and is_present(tp_f) and tp_f != entry_f:
        if (tp_f - entry_f) * sgn > 0:
            reward_pts = abs(tp_f - entry_f)
        else:
            conflict = True
    reward_usd = reward_pts * qty_f * mult
    if not math.isfinite(reward_usd):
        reward_pts = reward_usd = 0.0

    rr = safe_ratio(reward_usd, risk_usd) if risk_usd > 0 else 0.0

    result_r = None
    pnl_usd = None
    net_pnl_usd = None
    if is_present(entry_f) and is_present(exit_f):
        per_unit_pnl = (exit_f - entry_f) * sgn
        if qty_f > 0:
            pnl_usd = per_unit_pnl * qty_f * mult
            net_pnl_usd = pnl_usd - fees_f
            if risk_pts > 0:
                result_r = _finite_or_none(per_unit_pnl / risk_pts)

    user_risk_r = user_reward_r = user_actual_r = None
    one_r_f = coerce_number(one_r)
    if one_r_f > 0:
        user_risk_r = risk_usd / one_r_f
        user_reward_r = reward_usd / one_r_f
        if net_pnl_usd is not None:
            user_actual_r = net_pnl_usd / one_r_f

    return RRResult(
        side=resolved,
        rr=rr,
        risk_usd=round_money(risk_usd, decimals),
        reward_usd=round_money(reward_usd, decimals),
        risk_pts=risk_pts,
        reward_pts=reward_pts,
        conflict=conflict,
        confidence=assessment.confidence,
        result_r=result_r,
        pnl_usd=round_money(pnl_usd, decimals),
        net_pnl_usd=round_money(net_pnl_usd, decimals),
        user_risk_r=_finite_or_none(user_risk_r),
        user_reward_r=_finite_or_none(user_reward_r),
        user_actual_r=_finite_or_none(user_actual_r),
    )


def compute_risk_reward(
    side: Union[Side, str, None],
    entry: Any,
    stop: Any,
    tp: Any,
    qty: Any,
) -> RiskReward:
    """Quantity-scaled risk/reward without multiplier or fees."""
    entry_f = coerce_number(entry)
    stop_f = coerce_number(stop)
    tp_f = coerce_number(tp)
    qty_f = abs(coerce_number(qty))

    resolved = Side.from_value(side) or infer_side(entry_f, tp_f) or Side.LONG
    stop_distance = abs(entry_f - stop_f) if is_present(entry_f) and is_present(stop_f) else 0.0
    target_distance = abs(tp_f - entry_f) if is_present(entry_f) and is_present(tp_f) else 0.0

    risk = stop_distance * qty_f
    reward = target_distance * qty_f
    if not math.isfinite(risk):
        stop_distance = risk = 0.0  # overflow
    if not math.isfinite(reward):
        target_distance = reward = 0.0
    rr = safe_ratio(reward, risk) if risk > 0 else 0.0

    result_r = None
    if all(is_present(v) for v in (entry_f, stop_f, tp_f, qty_f)) and stop_distance > 0:
        result_r = _finite_or_none((tp_f - entry_f) * resolved.sign / stop_distance)

    return RiskReward(risk=risk, reward=reward, rr=rr, result_r=result_r)


def calculate_planned_rr(entry: Any, stop: Any, tp: Any, side: Union[Side, str]) -> float:
    """Planned R:R; 0 when stop or target contradicts the side."""
    entry_f, stop_f, tp_f = coerce_number(entry), coerce_number(stop), coerce_number(tp)
    if tp_f <= 0 or entry_f <= 0 or stop_f <= 0:
        return 0.0
    resolved = Side.from_value(side) or Side.LONG
    if resolved is Side.LONG and (stop_f >= entry_f or tp_f <= entry_f):
        return 0.0
    if resolved is Side.SHORT and (stop_f <= entry_f or tp_f >= entry_f):
        return 0.0
    return safe_ratio(abs(entry_f - tp_f), abs(entry_f - stop_f))


def calculate_actual_r(
    entry: Any,
    stop: Any,
    exit: Any,
    qty: Any,
    multiplier: Any,
    side: Union[Side, str],
    fees: Any = 0,
) -> float:
    """Net dollar P&L divided by dollar risk (fees included, unlike result_r)."""
    entry_f, stop_f, exit_f = coerce_number(entry), coerce_number(stop), coerce_number(exit)
    if exit_f <= 0:
        return 0.0
    qty_f = abs(coerce_number(qty))
    mult = resolve_multiplier(multiplier)
    risk_usd = abs(entry_f - stop_f) * qty_f * mult
    if risk_usd == 0:
        return 0.0
    resolved = Side.from_value(side) or Side.LONG
    gross = (exit_f - entry_f) * resolved.sign * qty_f * mult
    return safe_ratio(gross - coerce_number(fees), risk_usd)


def _field(trade: Any, name: str) -> Any:
    if isinstance(trade, Mapping):
        return trade.get(name)
    return getattr(trade, name, None)


def calculate_pnl(trade: Any) -> float:
    """Net P&L of a trade record (ParsedTrade or mapping).

    A stored ``pnl`` wins; open trades are 0.
    """
    stored = _field(trade, "pnl")
    if stored is not None and stored != "":
        return coerce_number(stored)
    exit_f = coerce_number(_field(trade, "exit_price"))
    if exit_f <= 0:
        return 0.0
    entry_f = coerce_number(_field(trade, "entry_price"))
    qty_f = abs(coerce_number(_field(trade, "quantity")))
    mult = resolve_multiplier(
        _field(trade, "multiplier"), _field(trade, "symbol"), _field(trade, "asset_class")
    )
    resolved = Side.from_value(_field(trade, "side")) or Side.LONG
    gross = (exit_f - entry_f) * resolved.sign * qty_f * mult
    return gross - coerce_number(_field(trade, "fees"))


def trade_outcome(pnl: Any, has_exit: bool = True) -> Outcome:
    if not has_exit:
        return Outcome.OPEN
    value = coerce_number(pnl)
    if value > 0:
        return Outcome.WIN
    if value < 0:
        return Outcome.LOSS
    return Outcome.BE
