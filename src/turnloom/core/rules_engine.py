import random
from turnloom.models import DegreeOfSuccess, Momentum, SkillCheckResult, WeatherReport

# ============================================================
# RULES ENGINE
# ============================================================

CRITICAL_SUCCESS_ROLL = 95      # Roll of 95-100
CRITICAL_FAILURE_ROLL = 5       # Roll of 1-5
MAX_MOMENTUM_BONUS = 5
MAX_DESPERATION_BONUS = 10

BAD_WEATHER_KEYWORDS = ("rain", "fog", "snow", "storm")


class RulesEngine:
    """
    Central logic for resolving game mechanics: d100 skill checks,
    stat modifiers, momentum streaks and weather modifiers.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def roll_d100(self) -> int:
        """Rolls a d100 (1-100)."""
        return self.rng.randint(1, 100)

    def calculate_modifier(self, stat_value: int) -> int:
        """
        Converts a 0-100 stat into a check modifier: (val - 50) // 5
        e.g., 50 -> 0, 70 -> +4, 30 -> -4
        """
        return (stat_value - 50) // 5

    def perform_check(
        self,
        skill_value: int,
        stat_modifier: int,
        situational_modifier: int,
        difficulty_target: int,
        roll: int,
    ) -> SkillCheckResult:
        """
        Resolves a skill check against a caller-supplied roll.

        total = roll + skill + stat + situational; meeting the difficulty is a success.
        Raw-roll extremes only override the degree: 95+ is always a critical success
        and 5 or less is always a critical failure, whatever the flag says.
        """
        if not 1 <= roll <= 100:
            raise ValueError(f"Roll must be between 1 and 100, got {roll}")

        total = roll + skill_value + stat_modifier + situational_modifier
        margin = total - difficulty_target

        if roll >= CRITICAL_SUCCESS_ROLL:
            degree = DegreeOfSuccess.CRITICAL_SUCCESS
        elif roll <= CRITICAL_FAILURE_ROLL:
            degree = DegreeOfSuccess.CRITICAL_FAILURE
        elif total >= difficulty_target:
            degree = DegreeOfSuccess.SUCCESS
        else:
            degree = DegreeOfSuccess.FAILURE

        return SkillCheckResult(
            success=total >= difficulty_target,
            degree_of_success=degree,
            roll=roll,
            skill_value=skill_value,
            stat_modifier=stat_modifier,
            situational_modifier=situational_modifier,
            total_achieved=total,
            difficulty_target=difficulty_target,
            margin=margin,
        )

    def update_momentum(self, momentum: Momentum, success: bool) -> Momentum:
        """Returns the streak state after one more check. Success and failure streaks are exclusive."""
        if success:
            successes = momentum.consecutive_successes + 1
            return Momentum(
                consecutive_successes=successes,
                consecutive_failures=0,
                momentum_bonus=min(successes, MAX_MOMENTUM_BONUS),
                desperation_bonus=0,
            )

        failures = momentum.consecutive_failures + 1
        return Momentum(
            consecutive_successes=0,
            consecutive_failures=failures,
            momentum_bonus=0,
            desperation_bonus=min(failures * 2, MAX_DESPERATION_BONUS),
        )

    def weather_modifier(self, skill: str, weather: WeatherReport | None) -> tuple[int, str]:
        """
        Returns (modifier, reason). Bad weather hampers observation and navigation
        but covers stealth. reason is empty when the modifier is 0.
        """
        if weather is None:
            return 0, ""

        description = weather.description.lower()
        is_bad_weather = any(word in description for word in BAD_WEATHER_KEYWORDS)
        if not is_bad_weather:
            return 0, ""

        skill = skill.lower()
        if "stealth" in skill:
            return 10, f"The bad weather ({weather.description}) helps this action."
        if "observation" in skill or "navigation" in skill:
            return -10, f"The bad weather ({weather.description}) hampers this action."
        return 0, ""
