from typing import Any, Dict, List
from pydantic import BaseModel
from turnloom.models.schemas import ActionKind, EnrichmentLevel
from turnloom.models.actions import PlayerAction
from turnloom.models.state import Player, PointOfInterest

# ============================================================
# ENRICHMENT RECORDS
# ============================================================
class ModuleDependency(BaseModel):
    """Edge in the module dependency graph"""
    module_id: str
    required: bool = True                   # Optional deps may be absent at injection time
    level: EnrichmentLevel = EnrichmentLevel.BASIC  # Pass-through hint, never used for scheduling
class ModuleEnrichmentResult(BaseModel):
    """Output of one enrichment module invocation"""
    module_id: str
    data: Dict[str, Any] = {}               # Opaque to the chain manager
    enrichment_level: EnrichmentLevel = EnrichmentLevel.BASIC
    dependencies_used: List[str] = []
    execution_time_ms: float | None = None  # Filled in by the chain manager when missing
class CascadeAction(BaseModel):
    kind: ActionKind
    payload: PlayerAction
class EnrichedContext(BaseModel):
    """
    Input handed to a module's enrich(). A fresh copy is built for every invocation,
    carrying only the dependency results that module declared.
    """
    subject: Player
    action: CascadeAction
    game_time_minutes: int = 0
    nearby_pois: List[PointOfInterest] = []
    dependency_results: Dict[str, ModuleEnrichmentResult] = {}

    def dependency_data(self, module_id: str) -> Dict[str, Any] | None:
        result = self.dependency_results.get(module_id)
        return result.data if result else None
class CascadeResult(BaseModel):
    results: Dict[str, ModuleEnrichmentResult] = {}
    execution_chain: List[str] = []         # Every module run, each after all its dependencies
class RegistryAudit(BaseModel):
    """Startup diagnostics for a module registry"""
    missing: Dict[str, List[str]] = {}      # module id -> unregistered dependency ids
    cycles: List[List[str]] = []

    @property
    def healthy(self) -> bool:
        return not self.missing and not self.cycles
