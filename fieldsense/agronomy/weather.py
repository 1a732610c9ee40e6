"""Forecast aggregation, rain window totals and Hargreaves reference ET."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from fieldsense.agronomy.types import ForecastDay

MIN_ET0_MM_PER_DAY = 1.0


@dataclass(frozen=True, slots=True)
class RainCheck:
	expected: bool
	total_mm: float
	description: str


def aggregate_daily(entries: Iterable[dict[str, Any]], forecast_days: int) -> tuple[ForecastDay, ...]:
	"""Fold OpenWeatherMap 3-hourly entries into per-day rows.

	Days keep the order in which they first appear (UTC dates); only the
	first ``forecast_days`` are returned.
	"""
	buckets: dict[date, dict[str, Any]] = {}
	for entry in entries:
		day_key = datetime.fromtimestamp(int(entry["dt"]), tz=UTC).date()
		main = entry.get("main") or {}
		bucket = buckets.setdefault(
			day_key,
			{
				"temps": [],
				"humidity": [],
				"precipitation": 0.0,
				"description": ((entry.get("weather") or [{}])[0]).get("description", ""),
			},
		)
		bucket["temps"].append(float(main["temp"]))
		bucket["humidity"].append(float(main.get("humidity", 0.0)))
		bucket["precipitation"] += float((entry.get("rain") or {}).get("3h", 0.0))

	days: list[ForecastDay] = []
	for day_key, bucket in list(buckets.items())[:forecast_days]:
		temps = bucket["temps"]
		humidity = bucket["humidity"]
		days.append(
			ForecastDay(
				date=day_key,
				temp_max=round(max(temps), 1),
				temp_min=round(min(temps), 1),
				temp_avg=round(sum(temps) / len(temps), 1),
				humidity=float(round(sum(humidity) / len(humidity))),
				precipitation_mm=round(bucket["precipitation"], 1),
				description=bucket["description"],
			)
		)
	return tuple(days)


def rain_within(
	days: Sequence[ForecastDay],
	hours_ahead: int,
	threshold_mm: float,
	now: datetime | None = None,
) -> RainCheck:
	cutoff = ((now or datetime.now(UTC)) + timedelta(hours=hours_ahead)).date()
	total = round(sum(day.precipitation_mm for day in days if day.date <= cutoff), 1)
	expected = total >= threshold_mm
	if expected:
		description = f"{total:.1f}mm rain expected in next {hours_ahead}h"
	else:
		description = f"No significant rain expected ({total:.1f}mm)"
	return RainCheck(expected=expected, total_mm=total, description=description)


def hargreaves_et0(day: ForecastDay) -> float:
	"""Simplified Hargreaves ET0 (mm/day) from a daily temperature summary."""
	spread = max(day.temp_max - day.temp_min, 1.0)
	et0 = 0.0135 * (day.temp_avg + 17.8) * spread
	return round(max(et0, MIN_ET0_MM_PER_DAY), 2)
