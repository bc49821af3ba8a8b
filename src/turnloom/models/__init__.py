from .schemas import (
    ActionKind,
    DegreeOfSuccess,
    TravelMode,
    CombatMove,
    EnrichmentLevel,
    ItemType,
    PhysiologyNeed,
    StatName,
)

from .state import (
    GeoPoint,
    InventoryItem,
    ItemGrant,
    ServiceOffer,
    PointOfInterest,
    Enemy,
    PlayerStats,
    Physiology,
    Momentum,
    Progression,
    JournalEntry,
    Player,
    WorldState,
)

from .actions import (
    SkillCheckSpec,
    SkillCheckResult,
    TravelRequest,
    ServiceRequest,
    ItemUseRequest,
    IngredientRequirement,
    CraftedItemSpec,
    CraftingRequest,
    PlayerAction,
    WeatherReport,
    AmbientConditions,
)

from .events import (
    JournalEntryAdded,
    PlayerStatChanged,
    PhysiologyChanged,
    MoneyChanged,
    ItemAdded,
    ItemRemoved,
    ItemUsed,
    DynamicItemCreated,
    SkillCheckResolved,
    MomentumUpdated,
    SkillXpAwarded,
    XpGained,
    ItemXpGained,
    TravelExecuted,
    CombatActionTaken,
    CombatEnded,
    TextNotice,
    TimeProgressed,
    GameEvent,
    GameEventList,
)

from .cascade import (
    ModuleDependency,
    ModuleEnrichmentResult,
    CascadeAction,
    EnrichedContext,
    CascadeResult,
    RegistryAudit,
)

__all__ = [
    # Schemas
    "ActionKind",
    "DegreeOfSuccess",
    "TravelMode",
    "CombatMove",
    "EnrichmentLevel",
    "ItemType",
    "PhysiologyNeed",
    "StatName",

    # State
    "GeoPoint",
    "InventoryItem",
    "ItemGrant",
    "ServiceOffer",
    "PointOfInterest",
    "Enemy",
    "PlayerStats",
    "Physiology",
    "Momentum",
    "Progression",
    "JournalEntry",
    "Player",
    "WorldState",

    # Actions
    "SkillCheckSpec",
    "SkillCheckResult",
    "TravelRequest",
    "ServiceRequest",
    "ItemUseRequest",
    "IngredientRequirement",
    "CraftedItemSpec",
    "CraftingRequest",
    "PlayerAction",
    "WeatherReport",
    "AmbientConditions",

    # Events
    "JournalEntryAdded",
    "PlayerStatChanged",
    "PhysiologyChanged",
    "MoneyChanged",
    "ItemAdded",
    "ItemRemoved",
    "ItemUsed",
    "DynamicItemCreated",
    "SkillCheckResolved",
    "MomentumUpdated",
    "SkillXpAwarded",
    "XpGained",
    "ItemXpGained",
    "TravelExecuted",
    "CombatActionTaken",
    "CombatEnded",
    "TextNotice",
    "TimeProgressed",
    "GameEvent",
    "GameEventList",

    # Cascade
    "ModuleDependency",
    "ModuleEnrichmentResult",
    "CascadeAction",
    "EnrichedContext",
    "CascadeResult",
    "RegistryAudit",
]
