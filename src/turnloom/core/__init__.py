from turnloom.core.rules_engine import RulesEngine
from turnloom.core.resolution_engine import ResolutionEngine, distance_km, travel_costs
from turnloom.core.state_manager import StateManager

__all__ = [
    'RulesEngine',
    'ResolutionEngine',
    'StateManager',
    'distance_km',
    'travel_costs',
]
