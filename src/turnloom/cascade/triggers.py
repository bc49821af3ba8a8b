import re
from abc import ABC, abstractmethod
from typing import List, Set

from pydantic import BaseModel

from turnloom.models import ActionKind, PlayerAction

# ============================================================
# CONDITIONS (Predicates over a player action)
# ============================================================

class ActionCondition(BaseModel, ABC):
    """
    Abstract base for cascade trigger conditions.
    Conditions are pure predicates - they read the action but never modify it.
    """

    @abstractmethod
    def evaluate(self, action: PlayerAction) -> bool:
        """Return True if this condition is met"""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description for logs"""
        pass


class KeywordCondition(ActionCondition):
    """Action text contains any of the keywords as whole words (case-insensitive, simple inflections allowed)"""
    keywords: List[str]

    def evaluate(self, action: PlayerAction) -> bool:
        text = action.text.lower()
        return any(re.search(rf"\b{re.escape(keyword.lower())}(?:s|es|d|ed|ing)?\b", text) for keyword in self.keywords)

    def describe(self) -> str:
        return f"text mentions one of {self.keywords}"


class ActionKindCondition(ActionCondition):
    """Action is of one of the given kinds"""
    kinds: Set[ActionKind]

    def evaluate(self, action: PlayerAction) -> bool:
        return action.kind in self.kinds

    def describe(self) -> str:
        return f"kind is one of {sorted(k.value for k in self.kinds)}"


class AnyCondition(ActionCondition):
    """OR over several conditions"""
    conditions: List[ActionCondition]

    def evaluate(self, action: PlayerAction) -> bool:
        return any(c.evaluate(action) for c in self.conditions)

    def describe(self) -> str:
        return f"({' OR '.join(c.describe() for c in self.conditions)})"


# ============================================================
# RULES
# ============================================================

class TriggerRule(BaseModel):
    """Selects a root module when its condition holds."""
    name: str
    module_id: str
    condition: ActionCondition

    def evaluate(self, action: PlayerAction) -> bool:
        return self.condition.evaluate(action)

    def describe(self) -> str:
        return f"{self.name}: {self.condition.describe()} -> {self.module_id}"


REFERENCE_KEYWORDS = ["book", "library", "read", "research", "look up", "encyclopedia"]
SUSTENANCE_KEYWORDS = ["eat", "cook", "restaurant", "meal", "food", "drink"]
INVESTIGATION_KEYWORDS = ["investigate", "search for clues", "look for clues", "examine", "inquire"]

SUSTENANCE_KINDS = {ActionKind.JOB, ActionKind.FOOD, ActionKind.SERVICE}
BASELINE_KINDS = {ActionKind.EXPLORATION, ActionKind.OBSERVATION, ActionKind.SOCIAL}

DEFAULT_MODULE = "local_context"


def default_rules() -> List[TriggerRule]:
    return [
        TriggerRule(
            name="reference",
            module_id="reference",
            condition=KeywordCondition(keywords=REFERENCE_KEYWORDS),
        ),
        TriggerRule(
            name="sustenance",
            module_id="sustenance",
            condition=AnyCondition(conditions=[
                ActionKindCondition(kinds=SUSTENANCE_KINDS),
                KeywordCondition(keywords=SUSTENANCE_KEYWORDS),
            ]),
        ),
        TriggerRule(
            name="investigation",
            module_id="local_context",
            condition=KeywordCondition(keywords=INVESTIGATION_KEYWORDS),
        ),
    ]


class RuleTable(BaseModel):
    """
    Maps an action to zero or more root module ids. Every matching rule contributes.
    When no rule matched and the action kind is exploration, observation or social,
    the default module is added so those turns always get baseline enrichment.
    """
    rules: List[TriggerRule] = []
    default_module: str = DEFAULT_MODULE
    default_kinds: Set[ActionKind] = BASELINE_KINDS

    def select(self, action: PlayerAction) -> Set[str]:
        selected: Set[str] = set()
        matched = False
        for rule in self.rules:
            if rule.evaluate(action):
                selected.add(rule.module_id)
                matched = True

        if not matched and action.kind in self.default_kinds:
            selected.add(self.default_module)
        return selected
