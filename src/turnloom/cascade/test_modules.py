import pytest

from turnloom.cascade.modules import (
    IngredientsModule,
    LocalContextModule,
    NutrientsModule,
    RecipesModule,
    ReferenceModule,
    SustenanceModule,
)
from turnloom.cascade.modules.local_context import NO_SUMMARY, sanitize
from turnloom.cascade.modules.reference import extract_query
from turnloom.cascade.modules.sustenance import cuisine_for_location
from turnloom.conftest import manager_with
from turnloom.models import CascadeAction, EnrichmentLevel, GeoPoint, ModuleEnrichmentResult


# ============================================================
# DECLARED DEPENDENCIES
# ============================================================

def test_dependency_declarations_are_not_shared():
    leaves = [LocalContextModule(), ReferenceModule(), IngredientsModule(), NutrientsModule()]
    assert all(module.dependencies == () for module in leaves)
    with pytest.raises(AttributeError):
        leaves[0].dependencies.append(RecipesModule.dependencies[0])
    assert [d.module_id for d in SustenanceModule.dependencies] == ["recipes", "ingredients", "nutrients"]


# ============================================================
# LOCAL CONTEXT
# ============================================================

@pytest.mark.asyncio
async def test_local_context_uses_location_summary(base_context):
    result = await LocalContextModule().enrich(base_context)
    assert result.module_id == "local_context"
    assert result.data["location_name"] == "Montmartre, Paris"
    assert result.data["summary"].startswith("Hilltop district")
    assert result.data["nearby_places"] == ["Boulangerie des Abbesses", "Café des Deux Moulins"]


@pytest.mark.asyncio
async def test_local_context_custom_provider(base_context):
    async def provider(location: GeoPoint):
        return None

    result = await LocalContextModule(summary_provider=provider).enrich(base_context)
    assert result.data["summary"] == NO_SUMMARY


def test_sanitize():
    assert sanitize("  two\n\nlines\x07 here\t") == "two lines here"


# ============================================================
# REFERENCE
# ============================================================

@pytest.mark.parametrize(
    "text, expected",
    [
        ("Research the history of the Paris Commune", "the history of the Paris Commune"),
        ("I want to read about \"Haussmann\".", "Haussmann"),
        ("Look up Montmartre", "Montmartre"),
        ("Research", None),
        ("Buy a croissant", None),
    ],
)
def test_extract_query(text, expected):
    assert extract_query(text) == expected


@pytest.mark.asyncio
async def test_reference_lookup(base_context, make_action):
    calls = []

    async def lookup(query, limit):
        calls.append((query, limit))
        return [{"title": f"Entry {i}"} for i in range(5)]

    context = base_context.model_copy(update={
        "action": CascadeAction(kind="reflection", payload=make_action("Look up the Commune")),
    })
    result = await ReferenceModule(lookup=lookup, max_results=2).enrich(context)

    assert calls == [("the Commune", 2)]
    assert result.data["query"] == "the Commune"
    assert len(result.data["entries"]) == 2
    assert result.enrichment_level == EnrichmentLevel.DETAILED


@pytest.mark.asyncio
async def test_reference_without_query_skips_lookup(base_context):
    async def lookup(query, limit):
        raise AssertionError("should not be called")

    result = await ReferenceModule(lookup=lookup).enrich(base_context)
    assert result.data["query"] is None
    assert result.data["entries"] == []


# ============================================================
# SUSTENANCE
# ============================================================

@pytest.mark.parametrize(
    "location, cuisine",
    [("Montmartre, Paris", "French"), ("Trastevere, Rome", "Italian"), ("Shibuya, TOKYO", "Japanese"), ("Nowhere", "French")],
)
def test_cuisine_for_location(location, cuisine):
    assert cuisine_for_location(location) == cuisine


@pytest.mark.asyncio
async def test_ingredients_lists_food_items(base_context):
    result = await IngredientsModule().enrich(base_context)
    assert result.data["available_ingredients"] == [
        {"name": "Fresh Egg", "quantity": 3},
        {"name": "Salted Butter", "quantity": 1},
    ]


@pytest.mark.asyncio
async def test_nutrients_reports_needs(base_context):
    base_context.subject.physiology.hunger = 12.34
    result = await NutrientsModule().enrich(base_context)
    assert result.data["hunger"] == 12.3
    assert result.data["player_needs"] == "hungry"


@pytest.mark.asyncio
async def test_recipes_prefers_local_context_location(base_context):
    seen = []

    async def source(cuisine, limit):
        seen.append((cuisine, limit))
        return []

    base_context.dependency_results = {
        "local_context": ModuleEnrichmentResult(module_id="local_context", data={"location_name": "Rome"}),
    }
    result = await RecipesModule(source=source, limit=2).enrich(base_context)

    assert seen == [("Italian", 2)]
    assert result.data["message"] == "No recipes found for Italian cuisine."
    assert result.dependencies_used == ["local_context"]


@pytest.mark.asyncio
async def test_sustenance_full_cascade(base_context):
    manager = manager_with(SustenanceModule(), RecipesModule(), IngredientsModule(), NutrientsModule(), LocalContextModule())
    result = await manager.enrich_with_cascade(base_context, "sustenance")

    data = result.results["sustenance"].data
    assert data["cuisine"] == "French"
    assert data["ingredient_count"] == 2
    assert data["player_nutritional_status"] == "sated"
    assert result.results["sustenance"].dependencies_used == ["ingredients", "nutrients", "recipes"]
