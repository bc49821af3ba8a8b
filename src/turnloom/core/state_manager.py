# src/turnloom/core/state_manager.py

import logging
import uuid
from typing import Iterable

from turnloom.models import (
    GameEvent,
    InventoryItem,
    ItemGrant,
    JournalEntry,
    WorldState,
)

logger = logging.getLogger(__name__)


class StateManager:
    """
    Reference reducer: folds an ordered GameEvent stream into a WorldState.
    The input snapshot is never mutated; every apply works on a deep copy.
    """

    def apply_events(self, state: WorldState, events: Iterable[GameEvent]) -> WorldState:
        """Return a new snapshot with every event applied in emitted order."""
        new_state = state.model_copy(deep=True)
        for event in events:
            self._apply(new_state, event)
        return new_state

    def apply_event(self, state: WorldState, event: GameEvent) -> WorldState:
        return self.apply_events(state, [event])

    def _apply(self, state: WorldState, event: GameEvent) -> None:
        """Mutates `state` in place. Only ever called on a private copy."""
        player = state.player

        match event.type:
            case "journal_entry_added":
                state.journal.append(JournalEntry(
                    text=event.text,
                    entry_type=event.entry_type,
                    timestamp=state.game_time_minutes,
                    location_name=player.location.name,
                ))

            case "player_stat_changed":
                if hasattr(player.stats, event.stat):
                    setattr(player.stats, event.stat, event.final_value)
                else:
                    logger.warning("Ignoring change to unknown stat '%s'", event.stat)

            case "physiology_changed":
                setattr(player.physiology, event.need.value, event.final_value)

            case "money_changed":
                player.money = event.final_balance

            case "item_added" | "dynamic_item_created":
                self._add_item(state, event.item)

            case "item_removed":
                self._remove_item(state, event.instance_id, event.quantity)

            case "item_used" | "skill_check_resolved" | "text_notice":
                pass

            case "momentum_updated":
                player.momentum = event.momentum.model_copy()

            case "skill_xp_awarded":
                player.skill_xp[event.skill] = player.skill_xp.get(event.skill, 0) + event.amount

            case "xp_gained":
                progression = player.progression
                progression.xp += event.amount
                while progression.xp >= progression.xp_to_next_level:
                    progression.xp -= progression.xp_to_next_level
                    progression.level += 1
                    logger.info("%s reached level %d", player.name, progression.level)

            case "item_xp_gained":
                item = player.find_item(event.instance_id)
                if item:
                    item.xp += event.xp

            case "travel_executed":
                player.location = event.destination.model_copy()
                state.game_time_minutes += event.duration

            case "combat_action":
                if event.target == "player":
                    player.stats.health = event.new_health
                elif state.current_enemy is not None:
                    state.current_enemy.health = event.new_health

            case "combat_ended":
                state.current_enemy = None

            case "time_progressed":
                state.game_time_minutes += event.minutes

            case _:
                raise ValueError(f"Unknown event type: {event.type}")

        logger.debug("State applied: %s", event.describe())

    @staticmethod
    def _add_item(state: WorldState, grant: ItemGrant) -> None:
        inventory = state.player.inventory
        for item in inventory:
            if item.item_id == grant.item_id:
                item.quantity += grant.quantity
                return
        inventory.append(InventoryItem(
            instance_id=f"{grant.item_id}_{uuid.uuid4().hex[:8]}",
            item_id=grant.item_id,
            name=grant.name,
            description=grant.description,
            item_type=grant.item_type,
            quantity=grant.quantity,
            stat_effects=dict(grant.stat_effects),
            physiology_effects=dict(grant.physiology_effects),
        ))

    @staticmethod
    def _remove_item(state: WorldState, instance_id: str, quantity: int) -> None:
        inventory = state.player.inventory
        item = state.player.find_item(instance_id)
        if item is None:
            logger.error("Failed to remove item: %s not in inventory", instance_id)
            return
        item.quantity -= quantity
        if item.quantity <= 0:
            inventory.remove(item)
