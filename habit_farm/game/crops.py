import logging
from datetime import datetime
from typing import Optional

from ..core.exceptions import Conflict, InvalidState, NotFound
from ..core.models import CropInstance, UserRecord
from .catalog import Catalog, CropDefinition

logger = logging.getLogger(__name__)


def grow_active_crop(record: UserRecord, now: datetime, catalog: Catalog) -> Optional[CropInstance]:
    """Adds one growth unit to the active crop, marking it mature at its growth time.

    A crop that matures here is flagged as harvested but its storage payout is
    only granted by harvest().
    """
    crop = record.crop
    if crop is None or crop.harvested:
        return None

    crop.current_growth += 1
    definition = catalog.get_crop(crop.id)
    if definition is not None and crop.current_growth >= definition.growth_time:
        crop.harvested = True
        crop.harvested_at = now
    return crop


def plant(record: UserRecord, crop_id: str, now: datetime, catalog: Catalog) -> CropInstance:
    if record.crop is not None and not record.crop.harvested:
        raise Conflict("A crop is already growing")
    if catalog.get_crop(crop_id) is None:
        raise NotFound("Crop does not exist")

    # Only the newest planting is kept
    record.crop = CropInstance(id=crop_id, planted_at=now)
    return record.crop


def abandon(record: UserRecord, now: datetime) -> CropInstance:
    crop = record.crop
    if crop is None:
        raise InvalidState("No crop is growing")
    if crop.harvested:
        raise InvalidState("Crop is already harvested")

    crop.harvested = True
    crop.abandoned = True
    crop.harvested_at = now
    return crop


def harvest(record: UserRecord, now: datetime, catalog: Catalog) -> CropDefinition:
    crop = record.crop
    if crop is None:
        raise InvalidState("No crop to harvest")
    if crop.abandoned or crop.collected:
        raise InvalidState("Crop is already harvested")

    definition = catalog.get_crop(crop.id)
    if definition is None:
        raise NotFound("Crop data does not exist")
    if crop.current_growth < definition.growth_time:
        raise InvalidState("Crop is not ripe yet")

    crop.harvested = True
    crop.collected = True
    if crop.harvested_at is None:
        crop.harvested_at = now

    record.storage[crop.id] = record.storage.get(crop.id, 0) + definition.harvest_amount
    record.total_harvests += 1
    logger.info("%s harvested %d %s", record.username, definition.harvest_amount, crop.id)
    return definition
