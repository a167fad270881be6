from .catalog import Catalog, CropDefinition, Ingredient, RecipeDefinition, build_catalog, load_catalog
from .crops import abandon, grow_active_crop, harvest, plant
from .habits import add_habit, check_in
from .research import ResearchOutcome, research_recipe

__all__ = [
    "Catalog",
    "CropDefinition",
    "Ingredient",
    "RecipeDefinition",
    "ResearchOutcome",
    "abandon",
    "add_habit",
    "build_catalog",
    "check_in",
    "grow_active_crop",
    "harvest",
    "load_catalog",
    "plant",
    "research_recipe",
]
