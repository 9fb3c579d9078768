"""Trade direction inference from entry / stop / target prices."""

from typing import Optional, Union

from core.helpers.validation import coerce_number, is_present
from core.models.side import Confidence, Side
from core.models.trade import DirectionAssessment


def _signal(entry: float, level: float, favorable: bool) -> Optional[Side]:
    """Side implied by one price level relative to entry.

    A target above entry means LONG; a stop above entry means SHORT.
    """
    if not is_present(level) or level == entry:
        return None
    above = level > entry
    if favorable:
        return Side.LONG if above else Side.SHORT
    return Side.SHORT if above else Side.LONG


def infer_direction(entry, stop, tp) -> Side:
    """LONG when the target is above entry, SHORT when below.

    Without a usable target the stop decides; with neither the result is
    the LONG default (see ``assess_direction`` for the confidence flag).
    """
    entry, stop, tp = coerce_number(entry), coerce_number(stop), coerce_number(tp)
    return (
        _signal(entry, tp, favorable=True)
        or _signal(entry, stop, favorable=False)
        or Side.LONG
    )


def assess_direction(
    entry,
    stop,
    tp,
    side: Union[Side, str, None] = None,
) -> DirectionAssessment:
    """Resolve the side and report conflicts and confidence.

    Confidence describes how firmly the prices imply the side: HIGH when
    target and stop agree (or the side was given), LOW when only one of
    them carries a signal or they disagree, AMBIGUOUS when neither does.

    ``conflict`` is set when the stop sits on the profitable side of entry
    for the resolved direction, or when an explicit side contradicts the
    target. Conflicts are reported, never corrected.
    """
    entry, stop, tp = coerce_number(entry), coerce_number(stop), coerce_number(tp)
    from_target = _signal(entry, tp, favorable=True)
    from_stop = _signal(entry, stop, favorable=False)

    if from_target and from_stop:
        confidence = Confidence.HIGH if from_target is from_stop else Confidence.LOW
    elif from_target or from_stop:
        confidence = Confidence.LOW
    else:
        confidence = Confidence.AMBIGUOUS

    explicit = Side.from_value(side)
    resolved = explicit or from_target or from_stop or Side.LONG

    conflict = False
    if from_stop is not None and from_stop is not resolved:
        conflict = True
    if explicit is not None and from_target is not None and from_target is not explicit:
        conflict = True
    if explicit is not None:
        # Stated side; disagreement is reported through conflict
        confidence = Confidence.HIGH

    return DirectionAssessment(side=resolved, conflict=conflict, confidence=confidence)


def infer_side(entry, exit) -> Optional[Side]:
    """Side of a closed trade from its prices; None when either is missing."""
    entry, exit = coerce_number(entry), coerce_number(exit)
    if not entry or not exit:
        return None
    return Side.LONG if exit > entry else Side.SHORT
