"""Entry point for the turnloom demo loop."""

import asyncio
import logging
from typing import List
from uuid import uuid4

from turnloom.cascade import TurnOrchestrator, TurnOutcome, initialize_turn_orchestrator
from turnloom.config import settings
from turnloom.llm import NarrationError, NarratorOracle, initialize_narrator
from turnloom.models import ActionKind, AmbientConditions, PlayerAction, WeatherReport, WorldState
from turnloom.scenarios import create_sample_world, sample_choices
from turnloom.utils.logging import setup_logging

logger = logging.getLogger("turnloom")

FREE_TEXT_TIME_COST = 10


# ─────────────────────────────────────────────────────────────────────────────
# Game Loop
# ─────────────────────────────────────────────────────────────────────────────
def get_player_input() -> str | None:
    """Get input from the player, handling EOF and interrupts."""
    try:
        text = input("\n> ").strip()
        return text if text else None
    except (EOFError, KeyboardInterrupt):
        return "quit"


def show_choices(choices: List[PlayerAction]) -> None:
    for index, choice in enumerate(choices, start=1):
        print(f"  {index}. {choice.text}")
    print("  (or type anything else to do it)")


def pick_action(player_input: str, choices: List[PlayerAction]) -> PlayerAction:
    if player_input.isdigit() and 1 <= int(player_input) <= len(choices):
        return choices[int(player_input) - 1]
    return PlayerAction(
        id=f"free_{uuid4().hex[:8]}",
        text=player_input,
        kind=ActionKind.ACTION,
        time_cost=FREE_TEXT_TIME_COST,
    )


def render_outcome(outcome: TurnOutcome) -> None:
    for event in outcome.events:
        print(f"  · {event.describe()}")
    print(f"\n  {outcome.narrative_context.cascade_summary}")


async def play_turn(
    orchestrator: TurnOrchestrator,
    narrator: NarratorOracle | None,
    state: WorldState,
    action: PlayerAction,
    ambient: AmbientConditions,
) -> tuple[TurnOutcome, List[PlayerAction]]:
    """Resolve one turn and, when a narrator is configured, ask it for the next scene."""
    outcome = await orchestrator.process_player_action(state, action, ambient)
    if narrator is None:
        return outcome, sample_choices()

    try:
        narration = await narrator.narrate(outcome.narrative_context)
    except NarrationError as e:
        logger.warning("Narration unavailable: %s", e)
        return outcome, sample_choices()

    print(f"\n{narration.scenario_text}")
    outcome.state_after.previous_scenario_text = narration.scenario_text
    choices = [choice.to_action(f"narrated_{i}") for i, choice in enumerate(narration.choices)]
    return outcome, choices or sample_choices()


async def game_loop(orchestrator: TurnOrchestrator, narrator: NarratorOracle | None, state: WorldState) -> None:
    """Main game loop - process player input until quit."""
    ambient = AmbientConditions(weather=WeatherReport(description="light rain", temperature_c=11.0))
    choices = sample_choices()

    while True:
        print(f"\n{state.summary()}")
        show_choices(choices)
        player_input = await asyncio.to_thread(get_player_input)

        if player_input is None:
            print("(Type something)")
            continue

        if player_input.lower() in ("quit", "exit", "q"):
            print("À bientôt!")
            break

        action = pick_action(player_input, choices)
        outcome, choices = await play_turn(orchestrator, narrator, state, action, ambient)
        render_outcome(outcome)
        state = outcome.state_after


def main() -> None:
    """Main entry point."""
    logger = setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        enable_color=settings.enable_color,
    )

    logger.info("Starting turnloom")
    logger.debug("Configuration: %s", settings)

    orchestrator = initialize_turn_orchestrator(settings)
    narrator = initialize_narrator(settings) if settings.narrator_enabled else None
    print("Welcome to turnloom! A morning in Montmartre.")
    asyncio.run(game_loop(orchestrator, narrator, create_sample_world()))


if __name__ == "__main__":
    main()
