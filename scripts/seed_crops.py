"""Seed the crop catalog table from the built-in regional catalog.

Usage:
    python -m scripts.seed_crops            # upsert every crop
    python -m scripts.seed_crops --region   # only crops valid for the region
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import structlog

from fieldsense.agronomy.catalog import DEFAULT_CROP_CATALOG
from fieldsense.agronomy.types import CropParameters
from fieldsense.middleware.logging import configure_structured_logging

logger = structlog.get_logger("fieldsense.seed")


def select_crops(catalog: Sequence[CropParameters], region_only: bool) -> list[CropParameters]:
	if not region_only:
		return list(catalog)
	return [crop for crop in catalog if crop.valid_for_region]


def _duplicate_names(catalog: Sequence[CropParameters]) -> set[str]:
	seen: set[str] = set()
	duplicates: set[str] = set()
	for crop in catalog:
		if crop.name in seen:
			duplicates.add(crop.name)
		seen.add(crop.name)
	return duplicates


async def seed(region_only: bool = False) -> int:
	# Imported lazily so the helpers above stay usable without a database driver.
	from fieldsense.database import async_session_factory, engine
	from fieldsense.repositories.sql import SQLCropCatalogRepository

	crops = select_crops(DEFAULT_CROP_CATALOG, region_only)
	duplicates = _duplicate_names(crops)
	if duplicates:
		raise ValueError(f"duplicate crop names in catalog: {sorted(duplicates)}")

	try:
		written = await SQLCropCatalogRepository(async_session_factory).upsert_many(crops)
	finally:
		await engine.dispose()
	logger.info("crop_catalog_seeded", crops=written, region_only=region_only)
	return written


def main(argv: Sequence[str] | None = None) -> None:
	parser = argparse.ArgumentParser(description="Seed the FieldSense crop catalog")
	parser.add_argument("--region", action="store_true", help="only seed crops valid for the operating region")
	args = parser.parse_args(argv)

	configure_structured_logging()
	asyncio.run(seed(region_only=args.region))


if __name__ == "__main__":
	main()
