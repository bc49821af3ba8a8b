from typing import Any, Dict, List

from pydantic import BaseModel

from turnloom.models import (
    CascadeResult,
    GameEvent,
    ItemType,
    Player,
    PlayerAction,
    WorldState,
)

NO_ENRICHMENT = "No additional contextual analysis available."
NO_RELEVANT_ENRICHMENT = "No relevant contextual analysis."
DEFAULT_PREVIOUS_SCENARIO = "The adventure begins."
LOW_NEED_THRESHOLD = 40
LOW_ENERGY_THRESHOLD = 30


class SuggestedAction(BaseModel):
    text: str
    description: str
    poi_id: str
    service_id: str
    estimated_cost: float


class NarrativeContext(BaseModel):
    """Everything the narrator needs for one turn. Mechanics are already decided."""
    player: Dict[str, Any]
    player_choice_text: str
    previous_scenario_text: str
    game_events: str                        # Single line
    cascade_summary: str                    # Single line
    suggested_actions: List[SuggestedAction] = []


def _single_line(text: str) -> str:
    return " ".join(text.split())


def summarize_events(events: List[GameEvent]) -> str:
    if not events:
        return "Nothing notable happened."
    return _single_line(" | ".join(event.describe() for event in events))


class NarrativeContextPreparer:
    """Flattens resolver output and the merged enrichment bundle into the narrator payload."""

    def prepare_context(
        self,
        state: WorldState,
        events: List[GameEvent],
        cascade_result: CascadeResult | None,
        action: PlayerAction,
    ) -> NarrativeContext:
        return NarrativeContext(
            player=self.player_context(state.player),
            player_choice_text=action.text,
            previous_scenario_text=state.previous_scenario_text or DEFAULT_PREVIOUS_SCENARIO,
            game_events=summarize_events(events),
            cascade_summary=_single_line(self.summarize_cascade(cascade_result)),
            suggested_actions=self.suggest_actions(state),
        )

    def player_context(self, player: Player) -> Dict[str, Any]:
        stats = player.stats
        return {
            "name": player.name,
            "stats": stats.model_dump(),
            "skills": dict(player.skills),
            "physiology": player.physiology.model_dump(),
            "progression": player.progression.model_dump(),
            "money": player.money,
            "location": player.location.name,
            "inventory": [
                {"name": item.name, "type": item.item_type.value, "quantity": item.quantity}
                for item in player.inventory
            ],
            "key_items": [
                item.name for item in player.inventory
                if item.item_type not in (ItemType.MISC, ItemType.KEY, ItemType.QUEST)
            ],
            "physiological_state": {
                "needs_food": player.physiology.hunger < LOW_NEED_THRESHOLD,
                "is_thirsty": player.physiology.thirst < LOW_NEED_THRESHOLD,
                "needs_rest": stats.energy < LOW_ENERGY_THRESHOLD,
            },
        }

    def summarize_cascade(self, cascade_result: CascadeResult | None) -> str:
        if not cascade_result or not cascade_result.results:
            return NO_ENRICHMENT

        summaries = []
        sustenance = cascade_result.results.get("sustenance")
        if sustenance:
            opportunities = sustenance.data.get("cooking_opportunities", [])
            ready = [o["recipe"] for o in opportunities if not o["missing"]]
            if ready:
                summaries.append(f"Cooking opportunities: {', '.join(ready)}.")
            elif opportunities:
                summaries.append(f"{sustenance.data.get('cuisine', 'Local')} recipes nearby, but ingredients are missing.")

        local = cascade_result.results.get("local_context")
        if local:
            summary = local.data.get("summary", "")
            if summary and not summary.startswith("No local information"):
                summaries.append(f"Local context: {summary}")

        reference = cascade_result.results.get("reference")
        if reference and reference.data.get("entries"):
            titles = ", ".join(entry.get("title", "untitled") for entry in reference.data["entries"])
            summaries.append(f"Reference material found: {titles}.")

        if not summaries:
            return NO_RELEVANT_ENRICHMENT
        return "Contextual analysis: " + " ".join(summaries)

    def suggest_actions(self, state: WorldState) -> List[SuggestedAction]:
        suggestions = []
        for poi in state.nearby_pois:
            for service in poi.services:
                suggestions.append(SuggestedAction(
                    text=f"{service.name} at {poi.name}",
                    description=f"Costs {service.cost:.2f}",
                    poi_id=poi.id,
                    service_id=service.id,
                    estimated_cost=service.cost,
                ))
        return suggestions
