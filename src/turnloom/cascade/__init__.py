import random

from turnloom.cascade.exceptions import (
    CascadeError,
    CircularDependencyError,
    DependencyInjectionError,
    MissingModuleError,
)
from turnloom.cascade.chain_manager import DependencyChainManager
from turnloom.cascade.context import NarrativeContext, NarrativeContextPreparer, SuggestedAction
from turnloom.cascade.modules import EnrichmentModule, default_modules
from turnloom.cascade.trigger import CascadeTrigger
from turnloom.cascade.triggers import RuleTable, TriggerRule, default_rules
from turnloom.cascade.orchestrator import TurnOrchestrator, TurnOutcome, build_default_manager
from turnloom.config import Settings
from turnloom.core import ResolutionEngine, RulesEngine, StateManager


def initialize_turn_orchestrator(settings: Settings) -> TurnOrchestrator:
    """Instantiate all turn components from settings and return the TurnOrchestrator."""

    rules_engine = RulesEngine(rng=random.Random(settings.random_seed))
    chain_manager = build_default_manager()
    trigger = CascadeTrigger(chain_manager=chain_manager, merge_mode=settings.cascade_merge_mode)

    return TurnOrchestrator(
        resolution_engine=ResolutionEngine(rules_engine=rules_engine),
        cascade_trigger=trigger,
        state_manager=StateManager(),
        cascade_timeout=settings.cascade_timeout_seconds,
    )


__all__ = [
    'CascadeError',
    'CircularDependencyError',
    'DependencyInjectionError',
    'MissingModuleError',
    'DependencyChainManager',
    'NarrativeContext',
    'NarrativeContextPreparer',
    'SuggestedAction',
    'EnrichmentModule',
    'default_modules',
    'CascadeTrigger',
    'RuleTable',
    'TriggerRule',
    'default_rules',
    'TurnOrchestrator',
    'TurnOutcome',
    'build_default_manager',
    'initialize_turn_orchestrator',
]
