import asyncio
from typing import Any, Dict, Iterable, List

import pytest

from turnloom.cascade import DependencyChainManager, EnrichmentModule
from turnloom.core import ResolutionEngine, RulesEngine
from turnloom.models import (
    ActionKind,
    EnrichedContext,
    CascadeAction,
    Enemy,
    ModuleDependency,
    ModuleEnrichmentResult,
    PlayerAction,
    WorldState,
)
from turnloom.scenarios import create_sample_world


class ScriptedRulesEngine(RulesEngine):
    """RulesEngine whose d100 returns a scripted sequence of rolls."""

    def __init__(self, rolls: Iterable[int] = (50,)):
        super().__init__()
        self.rolls: List[int] = list(rolls)
        self.rolled: List[int] = []

    def roll_d100(self) -> int:
        roll = self.rolls.pop(0) if len(self.rolls) > 1 else self.rolls[0]
        self.rolled.append(roll)
        return roll


@pytest.fixture
def world() -> WorldState:
    return create_sample_world()


@pytest.fixture
def world_in_combat(world: WorldState) -> WorldState:
    world.current_enemy = Enemy(
        name="Pickpocket",
        description="A wiry thief with a knife",
        health=20,
        max_health=20,
        attack=12,
        defense=10,
    )
    return world


@pytest.fixture
def rules() -> ScriptedRulesEngine:
    return ScriptedRulesEngine([50])


@pytest.fixture
def engine(rules: ScriptedRulesEngine) -> ResolutionEngine:
    return ResolutionEngine(rules_engine=rules)


@pytest.fixture
def make_action():
    def _make(text: str = "Wait a moment", kind: ActionKind = ActionKind.ACTION, **kwargs) -> PlayerAction:
        return PlayerAction(id=kwargs.pop("id", "test_action"), text=text, kind=kind, **kwargs)
    return _make


@pytest.fixture
def base_context(world: WorldState, make_action) -> EnrichedContext:
    action = make_action("Look around", ActionKind.EXPLORATION)
    return EnrichedContext(
        subject=world.player,
        action=CascadeAction(kind=action.kind, payload=action),
        game_time_minutes=world.game_time_minutes,
        nearby_pois=world.nearby_pois,
    )


class StubModule(EnrichmentModule):
    """Enrichment module returning fixed data and recording every context it was handed."""

    def __init__(self, module_id: str, *deps, data: Dict[str, Any] | None = None, fail: bool = False, delay: float = 0.0):
        self.id = module_id
        self.dependencies = tuple(d if isinstance(d, ModuleDependency) else ModuleDependency(module_id=d) for d in deps)
        self.data = data if data is not None else {"from": module_id}
        self.fail = fail
        self.delay = delay
        self.seen: List[EnrichedContext] = []

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        self.seen.append(context)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError(f"{self.id} exploded")
        return self.result(context, dict(self.data))


def manager_with(*modules: EnrichmentModule) -> DependencyChainManager:
    manager = DependencyChainManager()
    for module in modules:
        manager.register_module(module)
    return manager
