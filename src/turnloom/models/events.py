"""
GameEvent - the closed set of mechanical consequences an action can produce.

Events are immutable value records. An ordered list of them is the only output of
action resolution and the only input to state mutation; a reducer applies them
strictly in emitted order and can match exhaustively on ``type``.
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from turnloom.models.schemas import CombatMove, DegreeOfSuccess, PhysiologyNeed, TravelMode
from turnloom.models.state import GeoPoint, ItemGrant, Momentum


class EventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def describe(self) -> str:
        """One-line mechanical summary, used for narrator context."""
        raise NotImplementedError


# ============================================================
# JOURNAL / NOTICES / TIME
# ============================================================

class JournalEntryAdded(EventBase):
    type: Literal["journal_entry_added"] = "journal_entry_added"
    text: str
    entry_type: str = "action"

    def describe(self) -> str:
        return f"Journal: {self.text}"


class TextNotice(EventBase):
    """Plain explanation, also used for expected failures (no funds, no ingredient...)"""
    type: Literal["text_notice"] = "text_notice"
    text: str

    def describe(self) -> str:
        return self.text


class TimeProgressed(EventBase):
    type: Literal["time_progressed"] = "time_progressed"
    minutes: int

    def describe(self) -> str:
        return f"{self.minutes} minutes pass"


# ============================================================
# PLAYER STATS / PHYSIOLOGY / MONEY
# ============================================================

class PlayerStatChanged(EventBase):
    type: Literal["player_stat_changed"] = "player_stat_changed"
    stat: str
    change: int
    final_value: int

    def describe(self) -> str:
        return f"{self.stat} {self.change:+d} (now {self.final_value})"


class PhysiologyChanged(EventBase):
    type: Literal["physiology_changed"] = "physiology_changed"
    need: PhysiologyNeed
    change: float
    final_value: float

    def describe(self) -> str:
        return f"{self.need.value} {self.change:+.1f} (now {self.final_value:.1f})"


class MoneyChanged(EventBase):
    type: Literal["money_changed"] = "money_changed"
    amount: float                           # Negative for expenses
    description: str
    final_balance: float

    def describe(self) -> str:
        return f"{self.description}: {self.amount:+.2f} (balance {self.final_balance:.2f})"


# ============================================================
# INVENTORY
# ============================================================

class ItemAdded(EventBase):
    type: Literal["item_added"] = "item_added"
    item: ItemGrant

    def describe(self) -> str:
        return f"Received {self.item.quantity} x {self.item.name}"


class ItemRemoved(EventBase):
    type: Literal["item_removed"] = "item_removed"
    item_id: str
    instance_id: str
    item_name: str
    quantity: int = 1

    def describe(self) -> str:
        return f"Lost {self.quantity} x {self.item_name}"


class ItemUsed(EventBase):
    type: Literal["item_used"] = "item_used"
    instance_id: str
    item_name: str
    description: str

    def describe(self) -> str:
        return self.description


class DynamicItemCreated(EventBase):
    """An item that did not exist before this turn (crafting result)"""
    type: Literal["dynamic_item_created"] = "dynamic_item_created"
    item: ItemGrant

    def describe(self) -> str:
        return f"Created {self.item.quantity} x {self.item.name}"


# ============================================================
# CHECKS / PROGRESSION
# ============================================================

class SkillCheckResolved(EventBase):
    type: Literal["skill_check_resolved"] = "skill_check_resolved"
    skill: str
    success: bool
    degree: DegreeOfSuccess
    roll: int
    total: int
    difficulty: int
    margin: int

    def describe(self) -> str:
        return (
            f"{self.skill} check: {self.degree.value} "
            f"(rolled {self.roll}, total {self.total} vs {self.difficulty})"
        )


class MomentumUpdated(EventBase):
    type: Literal["momentum_updated"] = "momentum_updated"
    momentum: Momentum

    def describe(self) -> str:
        m = self.momentum
        if m.consecutive_successes:
            return f"Momentum: {m.consecutive_successes} successes in a row (+{m.momentum_bonus})"
        return f"Desperation: {m.consecutive_failures} failures in a row (+{m.desperation_bonus})"


class SkillXpAwarded(EventBase):
    type: Literal["skill_xp_awarded"] = "skill_xp_awarded"
    skill: str
    amount: int

    def describe(self) -> str:
        return f"+{self.amount} {self.skill} XP"


class XpGained(EventBase):
    type: Literal["xp_gained"] = "xp_gained"
    amount: int

    def describe(self) -> str:
        return f"+{self.amount} XP"


class ItemXpGained(EventBase):
    type: Literal["item_xp_gained"] = "item_xp_gained"
    instance_id: str
    item_name: str
    xp: int

    def describe(self) -> str:
        return f"{self.item_name} gains {self.xp} XP"


# ============================================================
# TRAVEL / COMBAT
# ============================================================

class TravelExecuted(EventBase):
    type: Literal["travel_executed"] = "travel_executed"
    origin_name: str
    destination: GeoPoint
    mode: TravelMode
    duration: int                           # Minutes
    distance_km: float

    def describe(self) -> str:
        return (
            f"Travelled from {self.origin_name} to {self.destination.name} by {self.mode.value} "
            f"({self.distance_km:.1f} km, {self.duration} min)"
        )


class CombatActionTaken(EventBase):
    type: Literal["combat_action"] = "combat_action"
    attacker: str
    target: Literal["player", "enemy"]
    move: CombatMove
    damage: int
    new_health: int

    def describe(self) -> str:
        if self.damage <= 0:
            return f"{self.attacker} uses {self.move.value}"
        return f"{self.attacker} hits the {self.target} for {self.damage} (health {self.new_health})"


class CombatEnded(EventBase):
    type: Literal["combat_ended"] = "combat_ended"
    winner: Literal["player", "enemy"] | None = None
    outcome: Literal["victory", "defeat", "fled"]

    def describe(self) -> str:
        return f"Combat ended: {self.outcome}"


GameEvent = Annotated[
    Union[
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
    ],
    Field(discriminator="type"),
]

# Validates / serializes whole event streams, e.g. GameEventList.validate_json(raw)
GameEventList = TypeAdapter(List[GameEvent])
