import logging

import pytest

from turnloom.cascade import (
    CascadeTrigger,
    NarrativeContextPreparer,
    TurnOrchestrator,
    build_default_manager,
    initialize_turn_orchestrator,
)
from turnloom.cascade.context import NO_ENRICHMENT, NO_RELEVANT_ENRICHMENT, summarize_events
from turnloom.config import CascadeMergeMode, Settings
from turnloom.conftest import StubModule, manager_with
from turnloom.models import (
    ActionKind,
    CascadeResult,
    ItemUseRequest,
    ModuleEnrichmentResult,
    TextNotice,
    TimeProgressed,
)


@pytest.fixture
def orchestrator(engine) -> TurnOrchestrator:
    return TurnOrchestrator(resolution_engine=engine, cascade_trigger=CascadeTrigger(build_default_manager()))


# ============================================================
# TURN PIPELINE
# ============================================================

@pytest.mark.asyncio
async def test_turn_resolves_folds_and_enriches(orchestrator, world, make_action):
    action = make_action("Wander the square", ActionKind.EXPLORATION, time_cost=20, energy_cost=2)

    outcome = await orchestrator.process_player_action(world, action)

    assert outcome.state_after.game_time_minutes == 500
    assert outcome.state_after.player.stats.energy == 78
    assert world.game_time_minutes == 480
    assert outcome.cascade_result.execution_chain == ["local_context"]
    assert outcome.narrative_context.player_choice_text == "Wander the square"
    assert "Sacré-Cœur" in outcome.narrative_context.cascade_summary


@pytest.mark.asyncio
async def test_enrichment_sees_post_action_state(engine, world, make_action):
    probe = StubModule("local_context")
    orchestrator = TurnOrchestrator(engine, CascadeTrigger(manager_with(probe)))

    await orchestrator.process_player_action(
        world, make_action("Sip water and look around", ActionKind.OBSERVATION, item_use=ItemUseRequest(instance_id="inv_water_001"))
    )

    assert probe.seen[0].subject.find_item("inv_water_001") is None


@pytest.mark.asyncio
async def test_failed_enrichment_does_not_touch_events(engine, world, make_action):
    broken = StubModule("local_context", fail=True)
    orchestrator = TurnOrchestrator(engine, CascadeTrigger(manager_with(broken)))
    action = make_action("Wander", ActionKind.EXPLORATION, time_cost=5)

    outcome = await orchestrator.process_player_action(world, action)

    assert outcome.cascade_result is None
    assert outcome.events == engine.resolve(world, action)
    assert outcome.narrative_context.cascade_summary == NO_ENRICHMENT


@pytest.mark.asyncio
async def test_enrichment_timeout(engine, world, make_action, caplog):
    slow = StubModule("local_context", delay=1.0)
    orchestrator = TurnOrchestrator(engine, CascadeTrigger(manager_with(slow)), cascade_timeout=0.01)

    with caplog.at_level(logging.WARNING):
        outcome = await orchestrator.process_player_action(world, make_action("Wander", ActionKind.EXPLORATION))

    assert outcome.cascade_result is None
    assert "timed out" in caplog.text
    assert len(outcome.state_after.journal) == 1


@pytest.mark.asyncio
async def test_no_relevant_modules(orchestrator, world, make_action):
    outcome = await orchestrator.process_player_action(world, make_action("Stretch"))
    assert outcome.cascade_result is None
    assert outcome.narrative_context.cascade_summary == NO_ENRICHMENT


def test_initialize_from_settings():
    settings = Settings(cascade_merge_mode=CascadeMergeMode.SEQUENTIAL, cascade_timeout_seconds=2.5, random_seed=3)
    orchestrator = initialize_turn_orchestrator(settings)

    assert orchestrator.trigger.merge_mode == CascadeMergeMode.SEQUENTIAL
    assert orchestrator.cascade_timeout == 2.5
    assert orchestrator.trigger.chain_manager.module_ids() == [
        "ingredients", "local_context", "nutrients", "recipes", "reference", "sustenance",
    ]


def test_build_default_manager_logs_registry_problems(caplog):
    with caplog.at_level(logging.WARNING):
        build_default_manager([StubModule("a", "ghost"), StubModule("b", "c"), StubModule("c", "b")])
    assert "ghost" in caplog.text
    assert "cycle" in caplog.text


# ============================================================
# NARRATIVE CONTEXT
# ============================================================

@pytest.fixture
def preparer() -> NarrativeContextPreparer:
    return NarrativeContextPreparer()


def test_summarize_events_is_one_line():
    summary = summarize_events([TextNotice(text="A\nmulti-line\n notice"), TimeProgressed(minutes=5)])
    assert "\n" not in summary
    assert " | " in summary
    assert summarize_events([]) == "Nothing notable happened."


def test_player_context(preparer, world):
    world.player.physiology.hunger = 10
    player = preparer.player_context(world.player)

    assert player["name"] == "Camille"
    assert player["money"] == 40.0
    assert player["physiological_state"] == {"needs_food": True, "is_thirsty": False, "needs_rest": False}
    assert "Leather Notebook" in player["key_items"]
    assert {"name": "Fresh Egg", "type": "ingredient", "quantity": 3} in player["inventory"]


def test_suggested_actions_come_from_services(preparer, world):
    suggestions = preparer.suggest_actions(world)
    assert [(s.poi_id, s.service_id) for s in suggestions] == [
        ("poi_bakery", "buy_croissant"),
        ("poi_bakery", "buy_baguette"),
        ("poi_cafe", "espresso"),
    ]
    assert suggestions[0].estimated_cost == 1.40


def test_summarize_cascade(preparer):
    result = CascadeResult(results={
        "sustenance": ModuleEnrichmentResult(module_id="sustenance", data={
            "cuisine": "French",
            "cooking_opportunities": [{"recipe": "Omelette", "have": ["egg"], "missing": []}],
        }),
        "reference": ModuleEnrichmentResult(module_id="reference", data={"entries": [{"title": "The Commune"}]}),
    })
    summary = preparer.summarize_cascade(result)
    assert summary.startswith("Contextual analysis:")
    assert "Cooking opportunities: Omelette." in summary
    assert "Reference material found: The Commune." in summary


def test_summarize_cascade_without_useful_data(preparer):
    assert preparer.summarize_cascade(None) == NO_ENRICHMENT
    assert preparer.summarize_cascade(CascadeResult()) == NO_ENRICHMENT
    empty = CascadeResult(results={"other": ModuleEnrichmentResult(module_id="other")})
    assert preparer.summarize_cascade(empty) == NO_RELEVANT_ENRICHMENT


def test_prepare_context_defaults_previous_scenario(preparer, world, make_action):
    world.previous_scenario_text = ""
    context = preparer.prepare_context(world, [], None, make_action("Wait"))
    assert context.previous_scenario_text == "The adventure begins."
    assert context.game_events == "Nothing notable happened."
