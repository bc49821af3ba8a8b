import asyncio
import logging
from typing import List

from pydantic import BaseModel

from turnloom.cascade.chain_manager import DependencyChainManager
from turnloom.cascade.context import NarrativeContext, NarrativeContextPreparer
from turnloom.cascade.modules import EnrichmentModule, default_modules
from turnloom.cascade.trigger import CascadeTrigger
from turnloom.core import ResolutionEngine, StateManager
from turnloom.models import (
    AmbientConditions,
    CascadeResult,
    GameEvent,
    PlayerAction,
    WorldState,
)

logger = logging.getLogger(__name__)


class TurnOutcome(BaseModel):
    events: List[GameEvent]
    state_after: WorldState                 # Working snapshot with the events folded in
    cascade_result: CascadeResult | None    # None when no enrichment was available
    narrative_context: NarrativeContext


class TurnOrchestrator:
    """
    One player turn: resolve -> fold events -> enrich -> prepare narrator context.
    Enrichment never alters the event stream.
    """

    def __init__(
        self,
        resolution_engine: ResolutionEngine,
        cascade_trigger: CascadeTrigger,
        state_manager: StateManager | None = None,
        context_preparer: NarrativeContextPreparer | None = None,
        cascade_timeout: float | None = None,
    ):
        self.engine = resolution_engine
        self.trigger = cascade_trigger
        self.state = state_manager or StateManager()
        self.preparer = context_preparer or NarrativeContextPreparer()
        self.cascade_timeout = cascade_timeout

    async def process_player_action(
        self,
        state: WorldState,
        action: PlayerAction,
        ambient: AmbientConditions | None = None,
    ) -> TurnOutcome:
        # 1. RESOLVE (pure)
        events = self.engine.resolve(state, action, ambient)

        # 2. FOLD
        state_after = self.state.apply_events(state, events)

        # 3. ENRICH (best effort)
        cascade_result = await self._run_cascade(state_after, action)

        # 4. PREPARE
        narrative_context = self.preparer.prepare_context(state_after, events, cascade_result, action)

        return TurnOutcome(
            events=events,
            state_after=state_after,
            cascade_result=cascade_result,
            narrative_context=narrative_context,
        )

    async def _run_cascade(self, state: WorldState, action: PlayerAction) -> CascadeResult | None:
        cascade = self.trigger.run_cascade_for_action(state, action)
        if self.cascade_timeout is None:
            return await cascade
        try:
            return await asyncio.wait_for(cascade, timeout=self.cascade_timeout)
        except asyncio.TimeoutError:
            logger.warning("Enrichment timed out after %.1fs; continuing without it", self.cascade_timeout)
            return None


def build_default_manager(modules: List[EnrichmentModule] | None = None) -> DependencyChainManager:
    """Register the given (or built-in) modules and log any registry integrity problems."""
    manager = DependencyChainManager()
    for module in modules if modules is not None else default_modules():
        manager.register_module(module)

    audit = manager.audit()
    for module_id, missing in audit.missing.items():
        logger.warning("Module '%s' depends on unregistered module(s): %s", module_id, ", ".join(missing))
    for cycle in audit.cycles:
        logger.warning("Dependency cycle between modules: %s", ", ".join(cycle))
    return manager
