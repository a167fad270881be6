import json
import logging
import pathlib
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropDefinition:
    """A plantable crop from crops.json."""
    id: str
    name: str
    growth_time: int
    harvest_amount: int
    icon: str = ""
    description: str = ""


@dataclass(frozen=True)
class Ingredient:
    crop_id: str
    quantity: int


@dataclass(frozen=True)
class RecipeDefinition:
    """A researchable recipe from recipes.json."""
    id: str
    name: str
    icon: str
    difficulty: int
    ingredients: Tuple[Ingredient, ...]
    hints: Tuple[str, ...] = field(default_factory=tuple)
    clues: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def required_crops(self) -> Tuple[str, ...]:
        return tuple(ing.crop_id for ing in self.ingredients)

    @property
    def total_quantity(self) -> int:
        return sum(ing.quantity for ing in self.ingredients)


@dataclass(frozen=True)
class Catalog:
    """Read-only crop and recipe tables, loaded once at startup."""
    crops: Mapping[str, CropDefinition]
    recipes: Mapping[str, RecipeDefinition]

    def get_crop(self, crop_id: str) -> Optional[CropDefinition]:
        return self.crops.get(crop_id)

    def get_recipe(self, recipe_id: str) -> Optional[RecipeDefinition]:
        return self.recipes.get(recipe_id)

    def crop_name(self, crop_id: str) -> str:
        crop = self.crops.get(crop_id)
        return crop.name if crop else crop_id

    def crops_payload(self) -> List[Dict[str, Any]]:
        return [_camel_dict(asdict(c)) for c in self.crops.values()]

    def recipes_payload(self) -> List[Dict[str, Any]]:
        return [_camel_dict(asdict(r)) for r in self.recipes.values()]


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_dict(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camel_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camel_dict(v) for v in value]
    return value


def build_catalog(crop_entries: List[Dict[str, Any]], recipe_entries: List[Dict[str, Any]]) -> Catalog:
    """Builds a catalog from raw (camelCase) JSON entries."""
    crops: Dict[str, CropDefinition] = {}
    for entry in crop_entries:
        crop = CropDefinition(
            id=entry["id"],
            name=entry.get("name", entry["id"]),
            growth_time=int(entry["growthTime"]),
            harvest_amount=int(entry["harvestAmount"]),
            icon=entry.get("icon", ""),
            description=entry.get("description", ""),
        )
        crops[crop.id] = crop

    recipes: Dict[str, RecipeDefinition] = {}
    for entry in recipe_entries:
        ingredients = tuple(
            Ingredient(crop_id=ing["cropId"], quantity=int(ing["quantity"]))
            for ing in entry.get("ingredients", [])
        )
        unknown = [ing.crop_id for ing in ingredients if ing.crop_id not in crops]
        if unknown:
            logger.warning("Recipe %s uses unknown crops: %s", entry["id"], ", ".join(unknown))
        recipe = RecipeDefinition(
            id=entry["id"],
            name=entry.get("name", entry["id"]),
            icon=entry.get("icon", ""),
            difficulty=int(entry.get("difficulty", 1)),
            ingredients=ingredients,
            hints=tuple(entry.get("hints") or ()),
            clues=tuple(entry.get("clues") or ()),
        )
        recipes[recipe.id] = recipe

    return Catalog(crops=MappingProxyType(crops), recipes=MappingProxyType(recipes))


def _load_json_file(file_path: pathlib.Path) -> List[Dict[str, Any]]:
    log_prefix = f"Data Load ({file_path.name}): "
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error("%sFile not found. Using an empty table.", log_prefix)
        return []
    except json.JSONDecodeError as e:
        logger.error("%sFailed to parse: %s. Using an empty table.", log_prefix, e)
        return []

    if not isinstance(data, list):
        logger.error("%sFile does not contain a JSON list. Using an empty table.", log_prefix)
        return []
    logger.info("%sSuccessfully loaded %d entries.", log_prefix, len(data))
    return data


def load_catalog(data_dir: pathlib.Path) -> Catalog:
    """Loads crops.json and recipes.json from the data directory."""
    return build_catalog(
        _load_json_file(data_dir / "crops.json"),
        _load_json_file(data_dir / "recipes.json"),
    )
