"""
Sample world for trying the turn loop: a morning in Montmartre, Paris.
"""
from typing import List

from turnloom.models import (
    ActionKind,
    CraftedItemSpec,
    CraftingRequest,
    GeoPoint,
    IngredientRequirement,
    InventoryItem,
    ItemGrant,
    ItemType,
    ItemUseRequest,
    PhysiologyNeed,
    Player,
    PlayerAction,
    PlayerStats,
    PointOfInterest,
    ServiceOffer,
    ServiceRequest,
    SkillCheckSpec,
    TravelMode,
    TravelRequest,
    WorldState,
)

# ==================== PLACES ====================

MONTMARTRE = GeoPoint(
    name="Montmartre, Paris",
    latitude=48.8867,
    longitude=2.3431,
    summary=(
        "Hilltop district of Paris crowned by the Sacré-Cœur basilica, "
        "long home to painters' studios and cabarets."
    ),
)

LATIN_QUARTER = GeoPoint(
    name="Latin Quarter, Paris",
    latitude=48.8509,
    longitude=2.3447,
    summary="Student quarter around the Sorbonne, dense with bookshops and cafés.",
)

EIFFEL_TOWER = GeoPoint(
    name="Eiffel Tower, Paris",
    latitude=48.8584,
    longitude=2.2945,
    summary="Wrought-iron tower on the Champ de Mars.",
)


def create_sample_world() -> WorldState:
    """
    Creates a sample world: a traveller with a little money and a few
    ingredients, next to a bakery and a café in Montmartre.

    Returns:
        WorldState: A fully populated world state ready for play or tests
    """

    # ==================== INVENTORY ====================

    notebook = InventoryItem(
        instance_id="inv_notebook_001",
        item_id="notebook",
        name="Leather Notebook",
        description="Worn notebook full of sketches and addresses",
        item_type=ItemType.TOOL,
        skill_bonuses={"observation": 5},
    )

    water_bottle = InventoryItem(
        instance_id="inv_water_001",
        item_id="water_bottle",
        name="Bottle of Water",
        description="Half a litre of tap water",
        item_type=ItemType.CONSUMABLE,
        stat_effects={"energy": 2},
        physiology_effects={PhysiologyNeed.THIRST: 25.0},
    )

    eggs = InventoryItem(
        instance_id="inv_eggs_001",
        item_id="egg",
        name="Fresh Egg",
        item_type=ItemType.INGREDIENT,
        quantity=3,
    )

    butter = InventoryItem(
        instance_id="inv_butter_001",
        item_id="butter",
        name="Salted Butter",
        item_type=ItemType.INGREDIENT,
    )

    # ==================== PLAYER ====================

    player = Player(
        name="Camille",
        stats=PlayerStats(energy=80, perception=60, intelligence=55, charisma=55),
        skills={"observation": 20, "stealth": 5, "cooking": 10, "navigation": 10},
        inventory=[notebook, water_bottle, eggs, butter],
        money=40.0,
        location=MONTMARTRE,
    )

    # ==================== NEARBY ====================

    bakery = PointOfInterest(
        id="poi_bakery",
        name="Boulangerie des Abbesses",
        location=GeoPoint(name="Rue des Abbesses", latitude=48.8845, longitude=2.3388),
        services=[
            ServiceOffer(
                id="buy_croissant",
                name="Buy a croissant",
                cost=1.40,
                grants_item=ItemGrant(
                    item_id="croissant",
                    name="Croissant",
                    item_type=ItemType.FOOD,
                    stat_effects={"energy": 5},
                    physiology_effects={PhysiologyNeed.HUNGER: 20.0},
                ),
            ),
            ServiceOffer(
                id="buy_baguette",
                name="Buy a baguette",
                cost=1.20,
                grants_item=ItemGrant(item_id="bread", name="Baguette Bread", item_type=ItemType.INGREDIENT),
            ),
        ],
    )

    cafe = PointOfInterest(
        id="poi_cafe",
        name="Café des Deux Moulins",
        location=GeoPoint(name="Rue Lepic", latitude=48.8848, longitude=2.3336),
        services=[
            ServiceOffer(id="espresso", name="Drink an espresso at the counter", cost=2.50),
        ],
    )

    return WorldState(
        player=player,
        nearby_pois=[bakery, cafe],
        game_time_minutes=8 * 60,
        previous_scenario_text="You step out into a grey Montmartre morning.",
    )


def sample_choices() -> List[PlayerAction]:
    """A menu of ready-made actions covering each resolution branch."""
    return [
        PlayerAction(
            id="look_around",
            text="Look around the square for anything unusual",
            kind=ActionKind.OBSERVATION,
            time_cost=10,
            energy_cost=1,
            skill_check=SkillCheckSpec(skill="observation", difficulty=60, stat="perception"),
        ),
        PlayerAction(
            id="buy_croissant",
            text="Buy a croissant at the bakery",
            kind=ActionKind.FOOD,
            time_cost=5,
            service=ServiceRequest(poi_id="poi_bakery", service_id="buy_croissant"),
        ),
        PlayerAction(
            id="drink_water",
            text="Drink from the water bottle",
            kind=ActionKind.ACTION,
            time_cost=1,
            item_use=ItemUseRequest(instance_id="inv_water_001"),
        ),
        PlayerAction(
            id="cook_omelette",
            text="Cook an omelette with the eggs and butter",
            kind=ActionKind.CRAFTING,
            time_cost=15,
            energy_cost=2,
            crafting=CraftingRequest(
                recipe_name="Omelette",
                ingredients=[
                    IngredientRequirement(name="egg", quantity=2),
                    IngredientRequirement(name="butter"),
                ],
                result=CraftedItemSpec(
                    item_id="omelette",
                    name="Omelette",
                    description="A simple buttery omelette",
                    item_type=ItemType.FOOD,
                    stat_effects={"energy": 10},
                ),
                skill_xp={"cooking": 5},
            ),
        ),
        PlayerAction(
            id="metro_latin_quarter",
            text="Take the metro to the Latin Quarter",
            kind=ActionKind.TRAVEL,
            travel=TravelRequest(destination=LATIN_QUARTER, mode=TravelMode.METRO),
        ),
        PlayerAction(
            id="research_commune",
            text="Research the history of the Paris Commune",
            kind=ActionKind.REFLECTION,
            time_cost=30,
            skill_check=SkillCheckSpec(skill="research", difficulty=50, stat="intelligence"),
        ),
    ]
