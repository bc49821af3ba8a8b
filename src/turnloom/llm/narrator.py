import json
import logging
import re
from typing import List

import ollama
from pydantic import BaseModel, ValidationError

from turnloom.cascade.context import NarrativeContext
from turnloom.llm.client import RATE_LIMIT_STATUS, OllamaClient
from turnloom.llm.exceptions import (
    JSONExtractionError,
    NarrationError,
    QuotaExceededError,
    ValidationFailedError,
)
from turnloom.llm.prompts import NarratorPrompts
from turnloom.llm.quota import QuotaTracker
from turnloom.models import ActionKind, PlayerAction

logger = logging.getLogger(__name__)


CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def _balanced_objects(text: str):
    """Yields every top-level {...} span, in order of appearance."""
    depth = 0
    start = None
    for i, char in enumerate(text):
        if char == "{":
            if depth == 0:
                start = i
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                yield text[start:i + 1]


def extract_json(response: str) -> dict:
    """
    Pull the narration object out of a model reply: the whole reply first,
    then each fenced block, then each top-level brace span.
    """
    text = response.strip()
    candidates = [text, *(block.strip() for block in CODE_FENCE.findall(text)), *_balanced_objects(text)]
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise JSONExtractionError(f"No JSON object found in narrator reply: {text[:200]!r}")


class NarratedChoice(BaseModel):
    """A candidate next action proposed by the narrator"""
    text: str
    kind: ActionKind = ActionKind.ACTION
    time_cost: int = 0
    energy_cost: int = 0

    def to_action(self, action_id: str) -> PlayerAction:
        return PlayerAction(
            id=action_id,
            text=self.text,
            kind=self.kind,
            time_cost=self.time_cost,
            energy_cost=self.energy_cost,
        )


class NarrationResult(BaseModel):
    scenario_text: str
    choices: List[NarratedChoice] = []


class NarratorOracle:
    """
    LLM interface for the narrator.
    Turns a NarrativeContext into prose plus candidate next actions. It never
    decides mechanics.
    """

    def __init__(self, llm_client: OllamaClient, quota: QuotaTracker):
        self.llm = llm_client
        self.quota = quota

    async def narrate(self, context: NarrativeContext, choice_count: int = 3) -> NarrationResult:
        """
        Raises:
            QuotaExceededError: The quota tracker refused, or the provider rate-limited us.
            JSONExtractionError / ValidationFailedError: The response could not be parsed.
            NarrationError: Any other LLM failure.
        """
        if not self.quota.check_available():
            raise QuotaExceededError("Narrator quota exhausted", blocked_until=self.quota.blocked_until)

        suggested = "\n".join(f"- {s.text} ({s.description})" for s in context.suggested_actions) or "- nothing in particular"
        prompt = NarratorPrompts.SCENARIO_PROMPT.format(
            player=json.dumps(context.player, ensure_ascii=False),
            previous_scenario_text=context.previous_scenario_text,
            player_choice_text=context.player_choice_text,
            game_events=context.game_events,
            cascade_summary=context.cascade_summary,
            suggested_actions=suggested,
            choice_count=choice_count,
        )

        try:
            response = await self.llm.generate(prompt, system=NarratorPrompts.SYSTEM.value)
        except ollama.ResponseError as e:
            if e.status_code == RATE_LIMIT_STATUS:
                self.quota.record_quota_exceeded()
                raise QuotaExceededError(f"Provider rate limit: {e}", blocked_until=self.quota.blocked_until) from e
            self.quota.record_error(str(e))
            raise NarrationError(f"Narrator request failed: {e}") from e
        except (ConnectionError, OSError) as e:
            self.quota.record_error(str(e))
            raise NarrationError(f"Narrator unreachable: {e}") from e

        try:
            result = self._parse_narration(response)
        except NarrationError as e:
            self.quota.record_error(str(e))
            raise
        self.quota.record_success()
        return result

    def _normalize_kind(self, value: object) -> str:
        """Map loose kind strings ("Explore", "OBSERVATION") onto ActionKind values."""
        value_lower = str(value).lower().strip()
        for member in ActionKind:
            if value_lower in (member.value, member.name.lower()):
                return member.value
        aliases = {
            "explore": ActionKind.EXPLORATION.value,
            "observe": ActionKind.OBSERVATION.value,
            "talk": ActionKind.SOCIAL.value,
            "eat": ActionKind.FOOD.value,
            "work": ActionKind.JOB.value,
            "move": ActionKind.TRAVEL.value,
            "craft": ActionKind.CRAFTING.value,
        }
        return aliases.get(value_lower, ActionKind.ACTION.value)

    def _parse_narration(self, llm_response: str) -> NarrationResult:
        data = extract_json(llm_response)
        if not isinstance(data, dict):
            raise ValidationFailedError(f"Expected a JSON object, got {type(data).__name__}")

        choices = data.get("choices") or []
        if isinstance(choices, list):
            for choice in choices:
                if isinstance(choice, dict) and "kind" in choice:
                    choice["kind"] = self._normalize_kind(choice["kind"])

        try:
            return NarrationResult.model_validate(data)
        except ValidationError as e:
            raise ValidationFailedError(f"Narration validation failed: {e}") from e
