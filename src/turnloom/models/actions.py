from typing import List
from pydantic import BaseModel
from turnloom.models.schemas import ActionKind, CombatMove, DegreeOfSuccess, TravelMode, ItemType, StatName
from turnloom.models.state import GeoPoint

# ========================================================================================
# ACTIONS: A player's chosen action, plus the optional payloads that select a resolution branch.
# ========================================================================================
class SkillCheckSpec(BaseModel):
    """Declares that an action needs a skill check"""
    skill: str                              # Skill name, e.g. "observation"
    difficulty: int                         # Target the d100 total must meet or beat
    stat: StatName | None = None            # Stat feeding the stat modifier, e.g. "perception"
    situational_modifier: int = 0           # Circumstantial bonus/penalty set by the action
class SkillCheckResult(BaseModel):
    """Result of a single d100 skill check"""
    success: bool
    degree_of_success: DegreeOfSuccess
    roll: int                               # Raw d100, 1-100
    skill_value: int
    stat_modifier: int
    situational_modifier: int
    total_achieved: int                     # roll + skill + stat + situational
    difficulty_target: int
    margin: int                             # total_achieved - difficulty_target
class TravelRequest(BaseModel):
    destination: GeoPoint
    mode: TravelMode = TravelMode.WALK
    origin: GeoPoint | None = None          # Defaults to the player's current location
class ServiceRequest(BaseModel):
    poi_id: str
    service_id: str
class ItemUseRequest(BaseModel):
    instance_id: str
class IngredientRequirement(BaseModel):
    name: str                               # Matched case-insensitively as a substring of item names
    quantity: int = 1
class CraftedItemSpec(BaseModel):
    item_id: str
    name: str
    description: str = ""
    item_type: ItemType = ItemType.MISC
    quantity: int = 1
    stat_effects: dict[str, int] = {}
class CraftingRequest(BaseModel):
    recipe_name: str
    ingredients: List[IngredientRequirement]
    result: CraftedItemSpec
    skill_xp: dict[str, int] = {}           # Skill XP awarded on a successful craft
class PlayerAction(BaseModel):
    """
    A choice the player made. At most one of travel / service / item_use / crafting
    is expected; if several are set the first in that order wins.
    """
    id: str
    text: str                               # Raw action text, journaled every turn
    kind: ActionKind = ActionKind.ACTION
    time_cost: int = 0                      # Minutes
    energy_cost: int = 0
    skill_check: SkillCheckSpec | None = None
    travel: TravelRequest | None = None
    service: ServiceRequest | None = None
    item_use: ItemUseRequest | None = None
    crafting: CraftingRequest | None = None
    combat_move: CombatMove | None = None   # Only read while an encounter is active

# ============================================================
# AMBIENT CONDITIONS
# ============================================================
class WeatherReport(BaseModel):
    description: str                        # e.g. "light rain"
    temperature_c: float | None = None
class AmbientConditions(BaseModel):
    """Read-only inputs from weather / clock providers"""
    weather: WeatherReport | None = None
    time_of_day: str | None = None          # "morning", "night", ...

