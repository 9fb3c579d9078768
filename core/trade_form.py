"""Manual trade entry state and its single update path.

Every edit to a trade form is a command handed to ``reduce``; the reducer
returns a new ``TradeFormState`` with symbol-driven defaults (asset class,
multiplier) and the risk/reward metrics recomputed.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional, Union

from core.asset_class import detect_asset_class, get_multiplier, normalize_symbol
from core.fees import estimate_fees, estimate_total_fees
from core.helpers.sessions import detect_session
from core.helpers.validation import coerce_number, round_money
from core.models.asset import AssetClass
from core.models.commission import CommissionSettings
from core.models.side import Side
from core.models.trade import RRResult
from core.risk_reward import MONEY_DECIMALS, compute_rr, trade_outcome

# Fields SetField may touch; side and asset class have their own commands
FORM_FIELDS = frozenset({
    "symbol",
    "entry_price",
    "stop_price",
    "take_profit",
    "exit_price",
    "quantity",
    "fees",
    "multiplier",
    "one_r",
    "notes",
    "setup",
    "open_at",
    "close_at",
})


@dataclass(frozen=True)
class TradeFormState:
    symbol: str = ""
    side: Optional[Side] = None  # None: inferred from prices
    asset_class: Optional[AssetClass] = None
    multiplier: Any = None
    entry_price: Any = None
    stop_price: Any = None
    take_profit: Any = None
    exit_price: Any = None
    quantity: Any = None
    fees: Any = None
    one_r: Any = None
    notes: str = ""
    setup: str = ""
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None

    # True once the user set the value, so symbol edits stop overriding it
    asset_class_manual: bool = False
    multiplier_manual: bool = False

    metrics: Optional[RRResult] = None


@dataclass(frozen=True)
class SetField:
    name: str
    value: Any


@dataclass(frozen=True)
class SetSide:
    side: Union[Side, str, None]


@dataclass(frozen=True)
class SetAssetClass:
    asset_class: Union[AssetClass, str, None]


@dataclass(frozen=True)
class ApplyCommissions:
    """Replace ``fees`` with the schedule estimate for the current form."""
    commissions: CommissionSettings


@dataclass(frozen=True)
class Reset:
    pass


TradeFormCommand = Union[SetField, SetSide, SetAssetClass, ApplyCommissions, Reset]


def _with_defaults(state: TradeFormState) -> TradeFormState:
    changes = {}
    if not state.asset_class_manual:
        changes["asset_class"] = detect_asset_class(state.symbol)
    asset_class = changes.get("asset_class", state.asset_class)
    if not state.multiplier_manual:
        changes["multiplier"] = get_multiplier(state.symbol, asset_class) if state.symbol else None
    return replace(state, **changes) if changes else state


def _with_metrics(state: TradeFormState) -> TradeFormState:
    metrics = compute_rr(
        entry=state.entry_price,
        sl=state.stop_price,
        tp=state.take_profit,
        qty=state.quantity,
        fees=state.fees,
        multiplier=state.multiplier,
        side=state.side,
        asset_class=state.asset_class,
        exit=state.exit_price,
        one_r=state.one_r,
        symbol=state.symbol,
    )
    return replace(state, metrics=metrics)


def _estimate_fees(state: TradeFormState, commissions: CommissionSettings) -> float:
    if state.asset_class is None:
        return 0.0
    multiplier = coerce_number(state.multiplier) or 1.0
    if coerce_number(state.exit_price) > 0:
        side = state.metrics.side if state.metrics else state.side
        return estimate_total_fees(
            commissions,
            state.entry_price,
            state.exit_price,
            state.quantity,
            state.asset_class,
            multiplier,
            side=side,
        )
    return estimate_fees(commissions, state.entry_price, state.quantity, state.asset_class, multiplier)


def reduce(state: TradeFormState, command: TradeFormCommand) -> TradeFormState:
    """Apply one command and return the recomputed state."""
    if isinstance(command, Reset):
        return _with_metrics(TradeFormState())

    if isinstance(command, SetField):
        if command.name not in FORM_FIELDS:
            raise ValueError(f"Unknown trade form field: {command.name!r}")
        changes = {command.name: command.value}
        if command.name == "symbol":
            changes["symbol"] = normalize_symbol(command.value)
        elif command.name == "multiplier":
            changes["multiplier_manual"] = command.value not in (None, "")
        state = replace(state, **changes)

    elif isinstance(command, SetSide):
        state = replace(state, side=Side.from_value(command.side))

    elif isinstance(command, SetAssetClass):
        asset_class = AssetClass.from_value(command.asset_class)
        state = replace(state, asset_class=asset_class, asset_class_manual=asset_class is not None)

    elif isinstance(command, ApplyCommissions):
        state = _with_metrics(_with_defaults(state))
        fees = round_money(_estimate_fees(state, command.commissions), MONEY_DECIMALS)
        state = replace(state, fees=fees)

    else:
        raise TypeError(f"Unsupported trade form command: {type(command).__name__}")

    return _with_metrics(_with_defaults(state))


def to_trade_payload(state: TradeFormState) -> dict:
    """Canonical trade record plus derived metrics for persistence."""
    metrics = state.metrics or _with_metrics(_with_defaults(state)).metrics
    has_exit = coerce_number(state.exit_price) > 0
    return {
        "symbol": state.symbol,
        "side": metrics.side.value,
        "asset_class": state.asset_class.value if state.asset_class else None,
        "quantity": abs(coerce_number(state.quantity)),
        "multiplier": coerce_number(state.multiplier) or 1.0,
        "entry_price": coerce_number(state.entry_price),
        "stop_price": coerce_number(state.stop_price) or None,
        "take_profit": coerce_number(state.take_profit) or None,
        "exit_price": coerce_number(state.exit_price) or None,
        "fees": coerce_number(state.fees),
        "open_at": state.open_at.isoformat() if state.open_at else None,
        "close_at": state.close_at.isoformat() if state.close_at else None,
        "session": detect_session(state.open_at) if state.open_at else None,
        "setup": state.setup,
        "notes": state.notes,
        "rr": metrics.rr,
        "risk_usd": metrics.risk_usd,
        "reward_usd": metrics.reward_usd,
        "result_r": metrics.result_r,
        "pnl": metrics.net_pnl_usd if has_exit else None,
        "outcome": trade_outcome(metrics.net_pnl_usd, has_exit).value,
        "conflict": metrics.conflict,
        "confidence": metrics.confidence.value,
    }
