import json

import ollama
import pytest

from turnloom.cascade import NarrativeContextPreparer
from turnloom.llm import (
    JSONExtractionError,
    NarrationError,
    NarratorOracle,
    QuotaExceededError,
    QuotaTracker,
    ValidationFailedError,
)
from turnloom.llm.narrator import extract_json
from turnloom.models import ActionKind

SCENE = {
    "scenario_text": "Rain beads on the café awning.",
    "choices": [
        {"text": "Order a coffee", "kind": "Food", "time_cost": 10, "energy_cost": 0},
        {"text": "Wander toward the basilica", "kind": "explore", "time_cost": 20, "energy_cost": 3},
        {"text": "Hum a tune", "kind": "nonsense"},
    ],
}


class FakeLLM:
    """Stands in for OllamaClient: returns or raises queued responses and records prompts."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    async def generate(self, prompt, system=None, json_mode=True):
        self.prompts.append((prompt, system))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def context(world, make_action):
    return NarrativeContextPreparer().prepare_context(world, [], None, make_action("Look around"))


def oracle(*responses, quota: QuotaTracker | None = None) -> NarratorOracle:
    return NarratorOracle(FakeLLM(*responses), quota or QuotaTracker())


# ============================================================
# PARSING
# ============================================================

@pytest.mark.asyncio
async def test_narrate_plain_json(context):
    narrator = oracle(json.dumps(SCENE))

    result = await narrator.narrate(context)

    assert result.scenario_text == SCENE["scenario_text"]
    assert [c.kind for c in result.choices] == [ActionKind.FOOD, ActionKind.EXPLORATION, ActionKind.ACTION]
    assert result.choices[2].time_cost == 0

    prompt, system = narrator.llm.prompts[0]
    assert '"Look around"' in prompt
    assert "Buy a croissant at Boulangerie des Abbesses" in prompt
    assert "never invent" in system


@pytest.mark.parametrize(
    "wrapper",
    [
        "```json\n{}\n```",
        "Here is the scene:\n```\n{}\n```\nEnjoy!",
        "Sure! {} Let me know if you want more.",
    ],
)
def test_extract_json_fallbacks(wrapper):
    payload = json.dumps(SCENE)
    assert extract_json(wrapper.format(payload)) == SCENE


def test_extract_json_gives_up():
    with pytest.raises(JSONExtractionError):
        extract_json("Once upon a time, with no braces at all.")


def test_choice_converts_to_action():
    result = oracle()._parse_narration(json.dumps(SCENE))
    action = result.choices[1].to_action("narrated_1")
    assert action.id == "narrated_1"
    assert action.kind == ActionKind.EXPLORATION
    assert action.time_cost == 20
    assert action.energy_cost == 3


@pytest.mark.asyncio
async def test_invalid_narration_is_rejected_and_counted(context):
    quota = QuotaTracker()
    narrator = oracle(json.dumps({"choices": []}), quota=quota)

    with pytest.raises(ValidationFailedError):
        await narrator.narrate(context)
    assert quota.status().error_count == 1
    assert quota.status().request_count == 0


# ============================================================
# QUOTA AND FAILURES
# ============================================================

@pytest.mark.asyncio
async def test_success_is_counted(context):
    quota = QuotaTracker(hourly_limit=1)
    narrator = oracle(json.dumps(SCENE), quota=quota)

    await narrator.narrate(context)

    assert quota.status().request_count == 1
    with pytest.raises(QuotaExceededError):
        await narrator.narrate(context)
    assert len(narrator.llm.prompts) == 1


@pytest.mark.asyncio
async def test_provider_rate_limit(context):
    quota = QuotaTracker()
    narrator = oracle(ollama.ResponseError("too many requests", status_code=429), quota=quota)

    with pytest.raises(QuotaExceededError) as excinfo:
        await narrator.narrate(context)

    assert excinfo.value.blocked_until is not None
    assert not quota.check_available()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ollama.ResponseError("model not found", status_code=404), ConnectionError("refused")],
)
async def test_other_failures_become_narration_errors(context, error):
    quota = QuotaTracker()
    narrator = oracle(error, quota=quota)

    with pytest.raises(NarrationError) as excinfo:
        await narrator.narrate(context)

    assert not isinstance(excinfo.value, QuotaExceededError)
    assert quota.status().error_count == 1
    assert quota.check_available()
