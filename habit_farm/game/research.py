"""Recipe research: guess a recipe's ingredients, get a clue on every miss.

Clues follow a fixed ladder keyed by the attempt number. Each rule takes the
recipe and the number of clues revealed so far and returns the clue text with
the new revealed count.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.exceptions import AlreadyUnlocked, NotFound, StorageInsufficient
from ..core.models import ResearchAttempt, UserRecord
from .catalog import Catalog, RecipeDefinition

logger = logging.getLogger(__name__)

FALLBACK_CLUE = "Keep exploring!"
FOLLOW_UP_FALLBACK_CLUE = "Watch how your storage changes."

ClueRule = Callable[[RecipeDefinition, int], Tuple[str, int]]


def reveal_type_count(recipe: RecipeDefinition, revealed: int) -> Tuple[str, int]:
    return f"Try a different combination. {len(recipe.ingredients)} ingredient types required", revealed


# The fixed rungs only raise the count, a higher value from a client save stays
def reveal_total_quantity(recipe: RecipeDefinition, revealed: int) -> Tuple[str, int]:
    return f"{recipe.total_quantity} ingredients in total", max(revealed, 1)


def reveal_first_clue(recipe: RecipeDefinition, revealed: int) -> Tuple[str, int]:
    clue = recipe.clues[0] if recipe.clues else FALLBACK_CLUE
    return clue, max(revealed, 2)


def reveal_next_clue(recipe: RecipeDefinition, revealed: int) -> Tuple[str, int]:
    if recipe.clues:
        clue = recipe.clues[min(revealed, len(recipe.clues) - 1)]
    else:
        clue = FOLLOW_UP_FALLBACK_CLUE
    return clue, revealed + 1


# Rule for attempt n is CLUE_LADDER[n - 1]; later attempts use FOLLOW_UP_RULE
CLUE_LADDER: Tuple[ClueRule, ...] = (
    reveal_type_count,
    reveal_total_quantity,
    reveal_first_clue,
)
FOLLOW_UP_RULE: ClueRule = reveal_next_clue


def clue_rule_for(attempt: int) -> ClueRule:
    if 1 <= attempt <= len(CLUE_LADDER):
        return CLUE_LADDER[attempt - 1]
    return FOLLOW_UP_RULE


@dataclass
class ResearchOutcome:
    success: bool
    attempts: int
    recipe: Optional[RecipeDefinition] = None
    clue: str = ""
    hint: str = ""
    progress: float = 0.0


def ingredients_match(recipe: RecipeDefinition, used: Sequence[str]) -> bool:
    """Exact-set check: same count as the recipe and every required crop present."""
    required = recipe.required_crops
    if len(used) != len(required):
        return False
    return all(crop_id in used for crop_id in required)


def find_shortfalls(record: UserRecord, recipe: RecipeDefinition, catalog: Catalog) -> List[str]:
    missing = []
    for ing in recipe.ingredients:
        owned = record.storage.get(ing.crop_id, 0)
        if owned < ing.quantity:
            missing.append(f"{catalog.crop_name(ing.crop_id)} needs {ing.quantity}, you have {owned}")
    return missing


def overlap_suffix(recipe: RecipeDefinition, used: Sequence[str]) -> str:
    if not used:
        return ""
    required = recipe.required_crops
    overlap = sum(1 for crop_id in used if crop_id in required)
    if overlap > 0:
        return f" ({overlap}/{len(required)} correct ingredients)"
    return " (no correct ingredients yet)"


def difficulty_hint(recipe: RecipeDefinition) -> str:
    return f"Difficulty: {'★' * recipe.difficulty}"


def research_recipe(
    record: UserRecord,
    recipe_id: str,
    used_ingredients: Optional[Sequence[str]],
    now: datetime,
    catalog: Catalog,
) -> ResearchOutcome:
    recipe = catalog.get_recipe(recipe_id)
    if recipe is None:
        raise NotFound("Recipe does not exist")
    if recipe_id in record.discovered_recipes:
        raise AlreadyUnlocked()

    used = list(used_ingredients or [])
    previous = record.research_history.get(recipe_id)
    attempts = (previous.attempts if previous else 0) + 1

    if ingredients_match(recipe, used):
        # Nothing is recorded when storage is short, not even the attempt
        missing = find_shortfalls(record, recipe, catalog)
        if missing:
            raise StorageInsufficient(missing)

        for ing in recipe.ingredients:
            remaining = record.storage[ing.crop_id] - ing.quantity
            if remaining > 0:
                record.storage[ing.crop_id] = remaining
            else:
                del record.storage[ing.crop_id]

        record.discovered_recipes.append(recipe_id)
        record.refresh_max_habits()

        state = record.research_history.setdefault(recipe_id, ResearchAttempt())
        state.attempts = attempts
        state.success = True
        state.unlocked_at = now
        logger.info("%s unlocked recipe %s after %d attempts", record.username, recipe_id, attempts)
        return ResearchOutcome(success=True, attempts=attempts, recipe=recipe)

    state = record.research_history.setdefault(recipe_id, ResearchAttempt())
    state.attempts = attempts
    revealed_before = state.revealed_clues

    clue, state.revealed_clues = clue_rule_for(attempts)(recipe, revealed_before)
    clue += overlap_suffix(recipe, used)

    return ResearchOutcome(
        success=False,
        attempts=attempts,
        recipe=recipe,
        clue=clue,
        hint=difficulty_hint(recipe),
        progress=min(100.0, revealed_before / 3 * 100),
    )
