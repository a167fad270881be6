"""Tests for planting, abandoning and harvesting the crop slot."""

from datetime import timedelta

import pytest

from habit_farm.core import Conflict, CropInstance, InvalidState, NotFound
from habit_farm.game import abandon, add_habit, check_in, harvest, plant

from ..conftest import NOW


class TestPlant:

    def test_plants_fresh_crop(self, record, catalog):
        crop = plant(record, "wheat", NOW, catalog)

        assert record.crop is crop
        assert crop.id == "wheat"
        assert crop.current_growth == 0
        assert crop.harvested is False
        assert crop.planted_at == NOW

    def test_occupied_slot(self, record, catalog):
        plant(record, "wheat", NOW, catalog)

        with pytest.raises(Conflict):
            plant(record, "egg", NOW, catalog)

    def test_unknown_crop(self, record, catalog):
        with pytest.raises(NotFound):
            plant(record, "banana", NOW, catalog)

    def test_replaces_resolved_crop(self, record, catalog):
        plant(record, "wheat", NOW, catalog)
        abandon(record, NOW)

        crop = plant(record, "egg", NOW, catalog)

        assert record.crop is crop
        assert crop.abandoned is False


class TestAbandon:

    def test_marks_abandoned_without_payout(self, record, catalog):
        plant(record, "wheat", NOW, catalog)

        crop = abandon(record, NOW)

        assert crop.harvested is True
        assert crop.abandoned is True
        assert crop.harvested_at == NOW
        assert record.storage == {}

    def test_nothing_planted(self, record):
        with pytest.raises(InvalidState):
            abandon(record, NOW)

    def test_already_harvested(self, record):
        record.crop = CropInstance(id="wheat", planted_at=NOW, harvested=True)

        with pytest.raises(InvalidState):
            abandon(record, NOW)


class TestHarvest:

    def test_three_check_ins_then_harvest(self, record, catalog):
        habit = add_habit(record, "Read", NOW)
        plant(record, "wheat", NOW, catalog)
        for day in range(3):
            check_in(record, habit.id, NOW + timedelta(days=day), catalog)

        assert record.crop.current_growth == 3

        harvest(record, NOW + timedelta(days=3), catalog)

        assert record.storage["wheat"] == 5
        assert record.total_harvests == 1
        assert record.crop.collected is True
        # Maturity time is kept
        assert record.crop.harvested_at == NOW + timedelta(days=2)

    def test_immature_crop(self, record, catalog):
        plant(record, "wheat", NOW, catalog)
        record.crop.current_growth = 2

        with pytest.raises(InvalidState, match="not ripe"):
            harvest(record, NOW, catalog)

    def test_second_harvest_grants_nothing(self, record, catalog):
        record.crop = CropInstance(id="wheat", planted_at=NOW, current_growth=3)
        record.storage["wheat"] = 1

        harvest(record, NOW, catalog)
        with pytest.raises(InvalidState):
            harvest(record, NOW, catalog)

        assert record.storage["wheat"] == 6
        assert record.total_harvests == 1

    def test_abandoned_crop(self, record, catalog):
        record.crop = CropInstance(id="wheat", planted_at=NOW, current_growth=3)
        abandon(record, NOW)

        with pytest.raises(InvalidState):
            harvest(record, NOW, catalog)

    def test_nothing_planted(self, record, catalog):
        with pytest.raises(InvalidState):
            harvest(record, NOW, catalog)

    def test_crop_definition_removed(self, record, catalog):
        record.crop = CropInstance(id="pumpkin", planted_at=NOW, current_growth=30)

        with pytest.raises(NotFound):
            harvest(record, NOW, catalog)
