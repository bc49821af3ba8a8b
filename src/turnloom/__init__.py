"""
turnloom - turn-resolution core for a choice-driven simulation.

Given the current world state and a chosen action, the engine:
- resolves the action deterministically into an ordered list of GameEvents
- runs dependency-aware enrichment modules to gather situational context
- prepares the payload handed to an external narrator
"""

__version__ = "0.1.0"
