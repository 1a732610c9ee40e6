"""Irrigation urgency classification as ordered (predicate, outcome) tables."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from fieldsense.agronomy.types import CropParameters
from fieldsense.agronomy.water_balance import WaterBalance
from fieldsense.models.enums import IrrigationAction, IrrigationUrgency


@dataclass(frozen=True, slots=True)
class Urgency:
	level: IrrigationUrgency
	score: int


Rule = Callable[[float, WaterBalance, CropParameters], Urgency | None]


def _within_band(vwc: float, _balance: WaterBalance, crop: CropParameters) -> Urgency | None:
	if not crop.vwc_min <= vwc <= crop.vwc_max:
		return None
	distance = abs(vwc - crop.vwc_optimal)
	half_range = (crop.vwc_max - crop.vwc_min) / 2.0
	if distance < 0.3 * half_range:
		return Urgency(IrrigationUrgency.NONE, 0)
	if distance < 0.7 * half_range:
		return Urgency(IrrigationUrgency.LOW, 20)
	return Urgency(IrrigationUrgency.LOW, 30)


def _below_band(vwc: float, _balance: WaterBalance, crop: CropParameters) -> Urgency | None:
	if not vwc < crop.vwc_min:
		return None
	deficit = crop.vwc_min - vwc
	if deficit > 5:
		return Urgency(IrrigationUrgency.CRITICAL, 95)
	if deficit > 2:
		return Urgency(IrrigationUrgency.HIGH, 80)
	return Urgency(IrrigationUrgency.MODERATE, 60)


def _above_band(vwc: float, _balance: WaterBalance, crop: CropParameters) -> Urgency | None:
	if vwc > crop.vwc_max:
		return Urgency(IrrigationUrgency.NONE, 0)
	return None


def depletion_fallback(balance: WaterBalance) -> Urgency:
	"""MAD-relative ladder, consulted only when no band rule matched."""
	threshold = balance.mad * 100.0
	if balance.depletion_percent > threshold:
		return Urgency(IrrigationUrgency.HIGH, 80)
	if balance.depletion_percent > threshold * 0.8:
		return Urgency(IrrigationUrgency.MODERATE, 60)
	if balance.depletion_percent > threshold * 0.5:
		return Urgency(IrrigationUrgency.LOW, 30)
	return Urgency(IrrigationUrgency.NONE, 0)


URGENCY_RULES: tuple[Rule, ...] = (_within_band, _below_band, _above_band)


def classify_urgency(vwc: float, balance: WaterBalance, crop: CropParameters) -> Urgency:
	for rule in URGENCY_RULES:
		outcome = rule(vwc, balance, crop)
		if outcome is not None:
			return outcome
	# Only a NaN reading gets here: every real VWC satisfies one band rule.
	return depletion_fallback(balance)


# ── Weather downgrade ───────────────────────────────────────────────────────

_RAIN_DOWNGRADE: dict[IrrigationUrgency, Callable[[int], Urgency]] = {
	IrrigationUrgency.HIGH: lambda score: Urgency(IrrigationUrgency.MODERATE, max(50, score - 30)),
	IrrigationUrgency.MODERATE: lambda score: Urgency(IrrigationUrgency.LOW, max(20, score - 30)),
	IrrigationUrgency.LOW: lambda _score: Urgency(IrrigationUrgency.NONE, 0),
}


def downgrade_for_rain(urgency: Urgency) -> Urgency:
	"""CRITICAL and NONE pass through unchanged."""
	step = _RAIN_DOWNGRADE.get(urgency.level)
	return step(urgency.score) if step is not None else urgency


# ── Decision mapping ────────────────────────────────────────────────────────

ACTION_FOR_URGENCY: dict[IrrigationUrgency, IrrigationAction] = {
	IrrigationUrgency.CRITICAL: IrrigationAction.irrigate_now,
	IrrigationUrgency.HIGH: IrrigationAction.irrigate_now,
	IrrigationUrgency.MODERATE: IrrigationAction.irrigate_soon,
	IrrigationUrgency.LOW: IrrigationAction.do_not_irrigate,
	IrrigationUrgency.NONE: IrrigationAction.do_not_irrigate,
}

NEXT_CHECK_HOURS: dict[IrrigationAction, int] = {
	IrrigationAction.irrigate_now: 6,
	IrrigationAction.irrigate_soon: 12,
	IrrigationAction.do_not_irrigate: 24,
}

SCORE_BASIS: dict[IrrigationUrgency, str] = {
	IrrigationUrgency.NONE: "Soil moisture within ideal or acceptable range for the crop.",
	IrrigationUrgency.LOW: "Soil moisture within crop range but near the edge of the optimal band.",
	IrrigationUrgency.MODERATE: "Moisture slightly below the crop minimum or depletion near the MAD threshold.",
	IrrigationUrgency.HIGH: "Moisture clearly below the crop minimum or depletion beyond MAD.",
	IrrigationUrgency.CRITICAL: "Severe deficit well below the crop minimum moisture.",
}
