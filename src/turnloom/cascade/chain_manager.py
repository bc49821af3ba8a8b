import logging
import time
from typing import Dict, List

import networkx as nx

from turnloom.cascade.exceptions import (
    CircularDependencyError,
    DependencyInjectionError,
    MissingModuleError,
)
from turnloom.cascade.modules.base import EnrichmentModule
from turnloom.models import (
    CascadeResult,
    EnrichedContext,
    ModuleEnrichmentResult,
    RegistryAudit,
)

logger = logging.getLogger(__name__)

# Traversal colors
WHITE = 0   # Not visited
GRAY = 1    # On the current path
BLACK = 2   # Done, already in the order


class DependencyChainManager:
    """
    Registry, topological resolver and executor for enrichment modules.

    Given a root module id, resolves the full transitive execution order and runs
    each module once, injecting only the dependency results it declared.
    """

    def __init__(self):
        self._modules: Dict[str, EnrichmentModule] = {}

    # ============================================================
    # REGISTRY
    # ============================================================

    def register_module(self, module: EnrichmentModule) -> None:
        """Insert or overwrite by id. Never raises."""
        if module.id in self._modules:
            logger.warning("Module '%s' is already registered; overwriting", module.id)
        self._modules[module.id] = module
        logger.debug("Registered module %r", module)

    def has_module(self, module_id: str) -> bool:
        return module_id in self._modules

    def get_module(self, module_id: str) -> EnrichmentModule | None:
        return self._modules.get(module_id)

    def module_ids(self) -> List[str]:
        return sorted(self._modules)

    # ============================================================
    # RESOLUTION
    # ============================================================

    def resolve_execution_chain(self, root_module_id: str) -> List[str]:
        """
        Post-order depth-first traversal from the root, using an explicit stack.
        Every module appears after all of its transitive dependencies.

        Raises MissingModuleError for unregistered ids and CircularDependencyError
        when a module still on the current path is reached again.
        """
        if root_module_id not in self._modules:
            raise MissingModuleError(root_module_id)

        color: Dict[str, int] = {root_module_id: GRAY}
        path: List[str] = [root_module_id]
        order: List[str] = []
        stack = [(root_module_id, iter(self._modules[root_module_id].dependencies))]

        while stack:
            module_id, pending = stack[-1]

            descended = False
            for dependency in pending:
                dep_id = dependency.module_id
                if dep_id not in self._modules:
                    raise MissingModuleError(dep_id, required_by=module_id)

                state = color.get(dep_id, WHITE)
                if state == GRAY:
                    cycle = path[path.index(dep_id):] + [dep_id]
                    raise CircularDependencyError(dep_id, cycle)
                if state == WHITE:
                    color[dep_id] = GRAY
                    path.append(dep_id)
                    stack.append((dep_id, iter(self._modules[dep_id].dependencies)))
                    descended = True
                    break

            if not descended:
                stack.pop()
                path.pop()
                color[module_id] = BLACK
                order.append(module_id)

        return order

    # ============================================================
    # EXECUTION
    # ============================================================

    async def enrich_with_cascade(self, context: EnrichedContext, root_module_id: str) -> CascadeResult:
        """
        Runs every module the root transitively needs, strictly in dependency order.
        Any integrity violation or module exception aborts the whole cascade.
        """
        chain = self.resolve_execution_chain(root_module_id)
        results: Dict[str, ModuleEnrichmentResult] = {}
        cascade_start = time.perf_counter()

        for module_id in chain:
            module = self._modules[module_id]
            module_context = self._build_module_context(module, context, results)

            start = time.perf_counter()
            result = await module.enrich(module_context)
            if result.execution_time_ms is None:
                elapsed_ms = (time.perf_counter() - start) * 1000
                result = result.model_copy(update={"execution_time_ms": elapsed_ms})
            results[module_id] = result

        total_ms = (time.perf_counter() - cascade_start) * 1000
        logger.info("Cascade '%s': %s (%.1f ms)", root_module_id, " -> ".join(chain), total_ms)
        return CascadeResult(results=results, execution_chain=chain)

    @staticmethod
    def _build_module_context(
        module: EnrichmentModule,
        base: EnrichedContext,
        results: Dict[str, ModuleEnrichmentResult],
    ) -> EnrichedContext:
        """Fresh copy of the base context carrying only the module's declared dependency results."""
        injected: Dict[str, ModuleEnrichmentResult] = {}
        for dependency in module.dependencies:
            result = results.get(dependency.module_id)
            if result is None:
                if dependency.required:
                    raise DependencyInjectionError(module.id, dependency.module_id)
                continue
            injected[dependency.module_id] = result.model_copy(deep=True)

        module_context = base.model_copy(deep=True)
        module_context.dependency_results = injected
        return module_context

    # ============================================================
    # DIAGNOSTICS
    # ============================================================

    def dependency_graph(self) -> nx.DiGraph:
        """Directed graph with an edge dependent -> dependency for every declaration."""
        graph = nx.DiGraph()
        for module_id, module in self._modules.items():
            graph.add_node(module_id, registered=True)
            for dependency in module.dependencies:
                if dependency.module_id not in graph:
                    graph.add_node(dependency.module_id, registered=dependency.module_id in self._modules)
                graph.add_edge(
                    module_id,
                    dependency.module_id,
                    required=dependency.required,
                    level=dependency.level.value,
                )
        return graph

    def audit(self) -> RegistryAudit:
        """Whole-registry check for unregistered dependencies and cycles. Never raises."""
        graph = self.dependency_graph()
        missing: Dict[str, List[str]] = {}
        for module_id, dep_id in graph.edges():
            if not graph.nodes[dep_id]["registered"]:
                missing.setdefault(module_id, []).append(dep_id)

        cycles = [sorted(cycle) for cycle in nx.simple_cycles(graph)]
        return RegistryAudit(
            missing={k: sorted(v) for k, v in sorted(missing.items())},
            cycles=sorted(cycles),
        )
