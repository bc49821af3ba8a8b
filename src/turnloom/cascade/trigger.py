import asyncio
import logging
from typing import Dict, List, Set

from turnloom.cascade.chain_manager import DependencyChainManager
from turnloom.cascade.triggers import RuleTable, default_rules
from turnloom.config import CascadeMergeMode
from turnloom.models import (
    CascadeAction,
    CascadeResult,
    EnrichedContext,
    ModuleEnrichmentResult,
    PlayerAction,
    WorldState,
)

logger = logging.getLogger(__name__)


class CascadeTrigger:
    """
    Picks the root modules relevant to an action and runs one cascade per root.
    Enrichment is best-effort: any failure degrades the whole turn to no enrichment.
    """

    def __init__(
        self,
        chain_manager: DependencyChainManager,
        rule_table: RuleTable | None = None,
        merge_mode: CascadeMergeMode = CascadeMergeMode.CONCURRENT,
    ):
        self.chain_manager = chain_manager
        self.rule_table = rule_table or RuleTable(rules=default_rules())
        self.merge_mode = merge_mode

    def determine_relevant_modules(self, action: PlayerAction) -> Set[str]:
        return self.rule_table.select(action)

    @staticmethod
    def build_context(state: WorldState, action: PlayerAction) -> EnrichedContext:
        return EnrichedContext(
            subject=state.player,
            action=CascadeAction(kind=action.kind, payload=action),
            game_time_minutes=state.game_time_minutes,
            nearby_pois=state.nearby_pois,
        )

    async def run_cascade_for_action(self, state: WorldState, action: PlayerAction) -> CascadeResult | None:
        """Returns the merged result of every selected root, or None if no root was selected or any failed."""
        roots = sorted(self.determine_relevant_modules(action))
        if not roots:
            logger.debug("No enrichment modules selected for action '%s'", action.id)
            return None

        context = self.build_context(state, action)
        logger.info("Running cascades for action '%s': %s (%s)", action.id, roots, self.merge_mode.value)

        if self.merge_mode == CascadeMergeMode.SEQUENTIAL:
            return await self._run_sequential(context, roots)
        return await self._run_concurrent(context, roots)

    async def _run_concurrent(self, context: EnrichedContext, roots: List[str]) -> CascadeResult | None:
        outcomes = await asyncio.gather(
            *(self.chain_manager.enrich_with_cascade(context, root) for root in roots),
            return_exceptions=True,
        )

        failed = False
        for root, outcome in zip(roots, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Cascade '%s' failed: %s", root, outcome, exc_info=outcome)
                failed = True
        if failed:
            return None

        results: Dict[str, ModuleEnrichmentResult] = {}
        chain: Set[str] = set()
        for outcome in outcomes:
            results.update(outcome.results)
            chain.update(outcome.execution_chain)
        # Set union: no cross-root ordering survives
        return CascadeResult(results=results, execution_chain=sorted(chain))

    async def _run_sequential(self, context: EnrichedContext, roots: List[str]) -> CascadeResult | None:
        results: Dict[str, ModuleEnrichmentResult] = {}
        chain: List[str] = []
        for root in roots:
            try:
                outcome = await self.chain_manager.enrich_with_cascade(context, root)
            except Exception:
                logger.exception("Cascade '%s' failed", root)
                return None
            results.update(outcome.results)
            chain.extend(module_id for module_id in outcome.execution_chain if module_id not in chain)
        return CascadeResult(results=results, execution_chain=chain)
