import logging

import pytest

from turnloom.cascade import (
    CircularDependencyError,
    DependencyInjectionError,
    MissingModuleError,
)
from turnloom.conftest import StubModule, manager_with
from turnloom.models import EnrichmentLevel, ModuleDependency, ModuleEnrichmentResult


# ============================================================
# REGISTRY
# ============================================================

def test_register_and_lookup():
    a = StubModule("a")
    manager = manager_with(a, StubModule("b"))
    assert manager.has_module("a")
    assert not manager.has_module("zzz")
    assert manager.get_module("a") is a
    assert manager.get_module("zzz") is None
    assert manager.module_ids() == ["a", "b"]


def test_overwrite_logs_a_warning(caplog):
    first, second = StubModule("a"), StubModule("a")
    with caplog.at_level(logging.WARNING):
        manager = manager_with(first, second)
    assert manager.get_module("a") is second
    assert "already registered" in caplog.text


def test_registration_accepts_unresolvable_modules():
    # Integrity is only enforced when a cascade is resolved
    manager = manager_with(StubModule("a", "ghost"), StubModule("b", "c"), StubModule("c", "b"))
    assert manager.module_ids() == ["a", "b", "c"]


# ============================================================
# RESOLUTION
# ============================================================

def test_chain_is_topological():
    manager = manager_with(
        StubModule("sustenance", "recipes", "ingredients"),
        StubModule("recipes", "local"),
        StubModule("ingredients"),
        StubModule("local"),
    )
    chain = manager.resolve_execution_chain("sustenance")

    assert chain[-1] == "sustenance"
    assert sorted(chain) == ["ingredients", "local", "recipes", "sustenance"]
    assert chain.index("local") < chain.index("recipes")


def test_diamond_runs_shared_dependency_once():
    manager = manager_with(
        StubModule("top", "left", "right"),
        StubModule("left", "base"),
        StubModule("right", "base"),
        StubModule("base"),
    )
    chain = manager.resolve_execution_chain("top")
    assert chain.count("base") == 1
    assert chain.index("base") < chain.index("left")
    assert chain.index("base") < chain.index("right")


def test_leaf_root_resolves_to_itself():
    assert manager_with(StubModule("a")).resolve_execution_chain("a") == ["a"]


def test_missing_root():
    with pytest.raises(MissingModuleError) as excinfo:
        manager_with().resolve_execution_chain("nope")
    assert excinfo.value.module_id == "nope"
    assert excinfo.value.required_by is None


def test_missing_dependency_names_its_dependent():
    manager = manager_with(StubModule("a", "b"), StubModule("b", "ghost"))
    with pytest.raises(MissingModuleError) as excinfo:
        manager.resolve_execution_chain("a")
    assert excinfo.value.module_id == "ghost"
    assert excinfo.value.required_by == "b"


@pytest.mark.parametrize("root", ["a", "b"])
def test_two_module_cycle_from_either_root(root):
    manager = manager_with(StubModule("a", "b"), StubModule("b", "a"))
    with pytest.raises(CircularDependencyError) as excinfo:
        manager.resolve_execution_chain(root)
    assert excinfo.value.path[0] == excinfo.value.path[-1]
    assert set(excinfo.value.path) == {"a", "b"}


def test_self_cycle():
    with pytest.raises(CircularDependencyError) as excinfo:
        manager_with(StubModule("a", "a")).resolve_execution_chain("a")
    assert excinfo.value.path == ["a", "a"]


def test_long_chain_resolves_without_recursion_limit():
    modules = [StubModule(f"m{i}", f"m{i + 1}") for i in range(3000)] + [StubModule("m3000")]
    chain = manager_with(*modules).resolve_execution_chain("m0")
    assert chain[0] == "m3000"
    assert chain[-1] == "m0"


# ============================================================
# EXECUTION
# ============================================================

@pytest.mark.asyncio
async def test_integrity_errors_are_raised_before_any_module_runs(base_context):
    a = StubModule("a", "b")
    b = StubModule("b", "ghost")
    with pytest.raises(MissingModuleError):
        await manager_with(a, b).enrich_with_cascade(base_context, "a")
    assert a.seen == []
    assert b.seen == []


@pytest.mark.asyncio
async def test_cycle_is_raised_before_any_module_runs(base_context):
    a, b = StubModule("a", "b"), StubModule("b", "a")
    with pytest.raises(CircularDependencyError):
        await manager_with(a, b).enrich_with_cascade(base_context, "a")
    assert a.seen == [] and b.seen == []


@pytest.mark.asyncio
async def test_each_module_sees_only_its_declared_dependencies(base_context):
    top = StubModule("top", "mid")
    mid = StubModule("mid", "leaf")
    leaf = StubModule("leaf")

    result = await manager_with(top, mid, leaf).enrich_with_cascade(base_context, "top")

    assert result.execution_chain == ["leaf", "mid", "top"]
    assert set(result.results) == {"leaf", "mid", "top"}
    assert leaf.seen[0].dependency_results == {}
    assert list(mid.seen[0].dependency_results) == ["leaf"]
    assert list(top.seen[0].dependency_results) == ["mid"]
    assert top.seen[0].dependency_data("mid") == {"from": "mid"}
    assert result.results["top"].dependencies_used == ["mid"]


@pytest.mark.asyncio
async def test_base_context_is_never_mutated(base_context):
    before = base_context.model_dump()
    await manager_with(StubModule("top", "leaf"), StubModule("leaf")).enrich_with_cascade(base_context, "top")
    assert base_context.model_dump() == before


@pytest.mark.asyncio
async def test_execution_time_is_filled_when_missing(base_context):
    result = await manager_with(StubModule("a")).enrich_with_cascade(base_context, "a")
    assert result.results["a"].execution_time_ms is not None
    assert result.results["a"].execution_time_ms >= 0


@pytest.mark.asyncio
async def test_module_reported_execution_time_is_kept(base_context):
    class Timed(StubModule):
        async def enrich(self, context):
            return ModuleEnrichmentResult(module_id=self.id, execution_time_ms=12.5)

    result = await manager_with(Timed("a")).enrich_with_cascade(base_context, "a")
    assert result.results["a"].execution_time_ms == 12.5


@pytest.mark.asyncio
async def test_module_exception_aborts_cascade(base_context):
    top = StubModule("top", "boom")
    boom = StubModule("boom", fail=True)
    with pytest.raises(RuntimeError, match="boom exploded"):
        await manager_with(top, boom).enrich_with_cascade(base_context, "top")
    assert top.seen == []


@pytest.mark.asyncio
async def test_optional_dependency_absent_is_tolerated(base_context):
    top = StubModule("top", ModuleDependency(module_id="extra", required=False))
    manager = manager_with(top, StubModule("extra"))

    # No result recorded yet for "extra"
    context = manager._build_module_context(top, base_context, {})
    assert context.dependency_results == {}

    with pytest.raises(DependencyInjectionError) as excinfo:
        manager._build_module_context(StubModule("strict", "extra"), base_context, {})
    assert excinfo.value.dependency_id == "extra"


# ============================================================
# DIAGNOSTICS
# ============================================================

def test_dependency_graph():
    manager = manager_with(
        StubModule("top", ModuleDependency(module_id="leaf", required=False, level=EnrichmentLevel.DETAILED)),
        StubModule("leaf", "ghost"),
    )
    graph = manager.dependency_graph()

    assert set(graph.nodes) == {"top", "leaf", "ghost"}
    assert graph.nodes["ghost"]["registered"] is False
    assert graph.edges["top", "leaf"] == {"required": False, "level": "detailed"}


def test_audit_reports_missing_and_cycles():
    manager = manager_with(
        StubModule("a", "b"),
        StubModule("b", "a"),
        StubModule("c", "ghost"),
        StubModule("d"),
    )
    audit = manager.audit()

    assert not audit.healthy
    assert audit.missing == {"c": ["ghost"]}
    assert audit.cycles == [["a", "b"]]


def test_audit_of_default_modules_is_healthy():
    from turnloom.cascade import build_default_manager

    assert build_default_manager().audit().healthy
