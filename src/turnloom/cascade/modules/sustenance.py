"""
Food-related enrichment modules.

    sustenance --required--> recipes --optional--> local_context
               --required--> ingredients
               --optional--> nutrients

The recipe catalog is static and offline; a different source can be injected
as an async callable taking (cuisine, limit).
"""

from typing import Any, Awaitable, Callable, Dict, List

from turnloom.cascade.modules.base import EnrichmentModule
from turnloom.models import (
    EnrichedContext,
    EnrichmentLevel,
    ItemType,
    ModuleDependency,
    ModuleEnrichmentResult,
)

RecipeSource = Callable[[str, int], Awaitable[List[Dict[str, Any]]]]

DEFAULT_CUISINE = "French"
AREA_TO_CUISINE = {
    "paris": "French",
    "marseille": "French",
    "lyon": "French",
    "tokyo": "Japanese",
    "new york": "American",
    "rome": "Italian",
    "london": "British",
    "edinburgh": "British",
}

RECIPE_CATALOG: Dict[str, List[Dict[str, Any]]] = {
    "French": [
        {"name": "Croque monsieur", "ingredients": ["bread", "ham", "cheese", "butter"]},
        {"name": "Omelette aux fines herbes", "ingredients": ["egg", "butter", "herbs"]},
        {"name": "Crêpes", "ingredients": ["flour", "egg", "milk", "butter"]},
        {"name": "Soupe à l'oignon", "ingredients": ["onion", "bread", "cheese", "butter"]},
    ],
    "Italian": [
        {"name": "Pasta al pomodoro", "ingredients": ["pasta", "tomato", "olive oil"]},
        {"name": "Bruschetta", "ingredients": ["bread", "tomato", "olive oil"]},
    ],
    "British": [
        {"name": "Beans on toast", "ingredients": ["bread", "beans", "butter"]},
    ],
    "Japanese": [
        {"name": "Onigiri", "ingredients": ["rice", "salt"]},
    ],
    "American": [
        {"name": "Pancakes", "ingredients": ["flour", "egg", "milk", "sugar"]},
    ],
}

FOOD_TYPES = (ItemType.FOOD, ItemType.INGREDIENT)
LOW_NEED_THRESHOLD = 40.0


def cuisine_for_location(location_name: str) -> str:
    lowered = location_name.lower()
    for area, cuisine in AREA_TO_CUISINE.items():
        if area in lowered:
            return cuisine
    return DEFAULT_CUISINE


async def catalog_recipes(cuisine: str, limit: int) -> List[Dict[str, Any]]:
    return [dict(recipe) for recipe in RECIPE_CATALOG.get(cuisine, [])[:limit]]


class IngredientsModule(EnrichmentModule):
    """What the player could cook with right now."""

    id = "ingredients"

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        available = [
            {"name": item.name, "quantity": item.quantity}
            for item in context.subject.inventory
            if item.item_type in FOOD_TYPES and item.quantity > 0
        ]
        data = {
            "available_ingredients": available,
            "message": f"{len(available)} usable ingredient(s) in inventory.",
        }
        return self.result(context, data, EnrichmentLevel.DETAILED)


class NutrientsModule(EnrichmentModule):
    """Reads the player's physiological needs."""

    id = "nutrients"

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        physiology = context.subject.physiology
        needs = []
        if physiology.hunger < LOW_NEED_THRESHOLD:
            needs.append("hungry")
        if physiology.thirst < LOW_NEED_THRESHOLD:
            needs.append("thirsty")

        data = {
            "hunger": round(physiology.hunger, 1),
            "thirst": round(physiology.thirst, 1),
            "player_needs": ", ".join(needs) if needs else "sated",
        }
        return self.result(context, data, EnrichmentLevel.BASIC)


class RecipesModule(EnrichmentModule):
    """Regional recipes for the player's current city."""

    id = "recipes"
    dependencies = (
        ModuleDependency(module_id="local_context", required=False, level=EnrichmentLevel.BASIC),
    )

    def __init__(self, source: RecipeSource | None = None, limit: int = 5):
        self.source = source or catalog_recipes
        self.limit = limit

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        local = context.dependency_data("local_context") or {}
        location_name = local.get("location_name") or context.subject.location.name
        cuisine = cuisine_for_location(location_name)
        recipes = await self.source(cuisine, self.limit)

        if recipes:
            message = f"Found {len(recipes)} recipe(s) for {cuisine} cuisine."
        else:
            message = f"No recipes found for {cuisine} cuisine."
        data = {"cuisine": cuisine, "recipes": recipes, "message": message}
        return self.result(context, data, EnrichmentLevel.COMPREHENSIVE)


class SustenanceModule(EnrichmentModule):
    """Combines recipes, ingredients and needs into cooking opportunities."""

    id = "sustenance"
    dependencies = (
        ModuleDependency(module_id="recipes", required=True, level=EnrichmentLevel.COMPREHENSIVE),
        ModuleDependency(module_id="ingredients", required=True, level=EnrichmentLevel.DETAILED),
        ModuleDependency(module_id="nutrients", required=False, level=EnrichmentLevel.BASIC),
    )

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        recipes = context.dependency_data("recipes") or {}
        ingredients = context.dependency_data("ingredients") or {}
        nutrients = context.dependency_data("nutrients") or {}

        owned = [entry["name"].lower() for entry in ingredients.get("available_ingredients", [])]
        opportunities = []
        for recipe in recipes.get("recipes", []):
            have = [i for i in recipe["ingredients"] if any(i in name for name in owned)]
            missing = [i for i in recipe["ingredients"] if i not in have]
            opportunities.append({"recipe": recipe["name"], "have": have, "missing": missing})
        opportunities.sort(key=lambda o: len(o["missing"]))

        data = {
            "cuisine": recipes.get("cuisine", DEFAULT_CUISINE),
            "recipes_found": len(recipes.get("recipes", [])),
            "ingredient_count": len(owned),
            "player_nutritional_status": nutrients.get("player_needs", "not assessed"),
            "cooking_opportunities": opportunities,
            "message": "Complete culinary analysis.",
        }
        return self.result(context, data, EnrichmentLevel.COMPREHENSIVE)
