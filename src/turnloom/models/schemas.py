from enum import Enum

# Enum Classes
class ActionKind(str, Enum):        # Broad category of a player's choice. Drives cascade triggering.
    EXPLORATION = "exploration"
    OBSERVATION = "observation"
    SOCIAL = "social"
    JOB = "job"
    FOOD = "food"
    SERVICE = "service"
    TRAVEL = "travel"
    CRAFTING = "crafting"
    COMBAT = "combat"
    REFLECTION = "reflection"
    ACTION = "action"               # Anything that fits nowhere else
class DegreeOfSuccess(str, Enum):   # Classification of a skill check outcome.
    CRITICAL_FAILURE = "critical_failure"
    FAILURE = "failure"
    SUCCESS = "success"
    CRITICAL_SUCCESS = "critical_success"
class TravelMode(str, Enum):        # How the player moves between two points.
    WALK = "walk"
    METRO = "metro"
    TAXI = "taxi"
class CombatMove(str, Enum):        # What the player does on a combat turn.
    ATTACK = "attack"
    DEFEND = "defend"
    FLEE = "flee"
    WAIT = "wait"
class EnrichmentLevel(str, Enum):   # How much depth an enrichment module delivers (pass-through hint).
    BASIC = "basic"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"
class ItemType(str, Enum):          # Inventory item categories.
    CONSUMABLE = "consumable"
    FOOD = "food"
    TOOL = "tool"
    WEAPON = "weapon"
    CLOTHING = "clothing"
    DOCUMENT = "document"
    INGREDIENT = "ingredient"
    KEY = "key"
    QUEST = "quest"
    MISC = "misc"
class PhysiologyNeed(str, Enum):    # Basic needs tracked by the physiology system.
    HUNGER = "hunger"
    THIRST = "thirst"
class StatName(str, Enum):          # PlayerStats fields a skill check can draw its stat modifier from.
    ENERGY = "energy"
    HEALTH = "health"
    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    PERCEPTION = "perception"
    INTELLIGENCE = "intelligence"
    CHARISMA = "charisma"
