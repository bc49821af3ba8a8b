from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from turnloom.models import EnrichedContext, EnrichmentLevel, ModuleDependency, ModuleEnrichmentResult


class EnrichmentModule(ABC):
    """
    A pluggable unit producing supplementary situational data.

    Subclasses set `id` and `dependencies` and implement `enrich`. The chain manager
    guarantees every declared dependency has run before `enrich` is awaited, and
    hands in a context holding only those dependencies' results.
    """

    id: str
    dependencies: Tuple[ModuleDependency, ...] = ()

    @abstractmethod
    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        """Compute this module's data for one cascade"""
        pass

    def result(
        self,
        context: EnrichedContext,
        data: Dict[str, Any],
        level: EnrichmentLevel = EnrichmentLevel.BASIC,
    ) -> ModuleEnrichmentResult:
        """Builds a result, recording which dependency results were actually present."""
        return ModuleEnrichmentResult(
            module_id=self.id,
            data=data,
            enrichment_level=level,
            dependencies_used=sorted(context.dependency_results),
        )

    def __repr__(self) -> str:
        deps = ", ".join(d.module_id for d in self.dependencies)
        return f"<{type(self).__name__} id={self.id!r} deps=[{deps}]>"
