from typing import List
from pydantic import BaseModel, Field
from turnloom.models.schemas import ItemType, PhysiologyNeed

# ============================================================
# WORLD OBJECTS
# ============================================================
class GeoPoint(BaseModel):
    """A named place on the map"""
    name: str
    latitude: float
    longitude: float
    summary: str = ""                       # Short description, used by local context enrichment
class InventoryItem(BaseModel):
    """A stack of identical items in the player's inventory"""
    instance_id: str                        # Unique per stack
    item_id: str                            # Catalog id, shared by identical items
    name: str
    description: str = ""
    item_type: ItemType = ItemType.MISC
    quantity: int = 1
    stat_effects: dict[str, int] = {}       # Applied when consumed, e.g. {"energy": 10}
    physiology_effects: dict[PhysiologyNeed, float] = {}
    skill_bonuses: dict[str, int] = {}      # Skill name -> bonus when this item helps a check
    xp: int = 0                             # Items gain experience when they help a check succeed
class ItemGrant(BaseModel):
    """An item handed to the player by a service or a recipe"""
    item_id: str
    name: str
    quantity: int = 1
    item_type: ItemType = ItemType.MISC
    description: str = ""
    stat_effects: dict[str, int] = {}
    physiology_effects: dict[PhysiologyNeed, float] = {}
class ServiceOffer(BaseModel):
    """Something a point of interest sells"""
    id: str
    name: str
    cost: float
    grants_item: ItemGrant | None = None
class PointOfInterest(BaseModel):
    id: str
    name: str
    location: GeoPoint
    services: List[ServiceOffer] = []

    def get_service(self, service_id: str) -> ServiceOffer | None:
        for service in self.services:
            if service.id == service_id:
                return service
        return None
class Enemy(BaseModel):
    """The opponent of an active encounter"""
    name: str
    description: str = ""
    health: int
    max_health: int
    attack: int
    defense: int

# ============================================================
# PLAYER
# ============================================================
class PlayerStats(BaseModel):
    """Core stats, all on a 0-100 scale"""
    energy: int = 100
    health: int = 100
    strength: int = 50
    dexterity: int = 50
    constitution: int = 50
    perception: int = 50
    intelligence: int = 50
    charisma: int = 50

    def get(self, stat: str) -> int:
        return getattr(self, stat)
class Physiology(BaseModel):
    """Basic needs; 100 is fully sated, 0 is starving/parched"""
    hunger: float = 100.0
    thirst: float = 100.0

    def get(self, need: PhysiologyNeed | str) -> float:
        return getattr(self, PhysiologyNeed(need).value)
class Momentum(BaseModel):
    """Streak state carried across skill checks"""
    consecutive_successes: int = 0
    consecutive_failures: int = 0
    momentum_bonus: int = Field(default=0, ge=0, le=5)
    desperation_bonus: int = Field(default=0, ge=0, le=10)
class Progression(BaseModel):
    level: int = 1
    xp: int = 0
    xp_to_next_level: int = 100
class JournalEntry(BaseModel):
    text: str
    entry_type: str = "action"
    timestamp: int = 0                      # Game minutes
    location_name: str | None = None
class Player(BaseModel):
    name: str
    stats: PlayerStats = PlayerStats()
    skills: dict[str, int] = {}             # e.g. {"observation": 20, "stealth": 5}
    skill_xp: dict[str, int] = {}
    physiology: Physiology = Physiology()
    momentum: Momentum = Momentum()
    progression: Progression = Progression()
    inventory: List[InventoryItem] = []
    money: float = 0.0
    location: GeoPoint

    def find_item(self, instance_id: str) -> InventoryItem | None:
        for item in self.inventory:
            if item.instance_id == instance_id:
                return item
        return None

# ============================================================
# AGGREGATE ROOT
# ============================================================
class WorldState(BaseModel):
    """Aggregate root - the 'current situation' snapshot"""
    player: Player
    current_enemy: Enemy | None = None      # Set while an encounter is active
    nearby_pois: List[PointOfInterest] = []
    game_time_minutes: int = 0
    journal: List[JournalEntry] = []
    previous_scenario_text: str = ""

    def get_poi(self, poi_id: str) -> PointOfInterest | None:
        for poi in self.nearby_pois:
            if poi.id == poi_id:
                return poi
        return None

    def summary(self) -> str:
        """Returns a summary of world state easily parseable by the LLM."""
        player = self.player
        lines = [
            f"{player.name} at {player.location.name} (minute {self.game_time_minutes})",
            f"Energy {player.stats.energy}, Health {player.stats.health}, Money {player.money:.2f}",
            f"Hunger {player.physiology.hunger:.0f}, Thirst {player.physiology.thirst:.0f}",
        ]
        if self.current_enemy:
            enemy = self.current_enemy
            lines.append(f"In combat with {enemy.name} ({enemy.health}/{enemy.max_health})")
        return "\n".join(lines)
