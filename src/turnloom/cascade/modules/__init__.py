from turnloom.cascade.modules.base import EnrichmentModule
from turnloom.cascade.modules.local_context import LocalContextModule
from turnloom.cascade.modules.reference import ReferenceModule
from turnloom.cascade.modules.sustenance import (
    IngredientsModule,
    NutrientsModule,
    RecipesModule,
    SustenanceModule,
)


def default_modules() -> list[EnrichmentModule]:
    """Built-in modules with offline data sources."""
    return [
        LocalContextModule(),
        ReferenceModule(),
        IngredientsModule(),
        NutrientsModule(),
        RecipesModule(),
        SustenanceModule(),
    ]


__all__ = [
    'EnrichmentModule',
    'LocalContextModule',
    'ReferenceModule',
    'IngredientsModule',
    'NutrientsModule',
    'RecipesModule',
    'SustenanceModule',
    'default_modules',
]
