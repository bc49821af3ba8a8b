from turnloom.config import Settings
from turnloom.llm.client import OllamaClient
from turnloom.llm.exceptions import (
    NarrationError,
    JSONExtractionError,
    ValidationFailedError,
    QuotaExceededError,
)
from turnloom.llm.narrator import NarratorOracle, NarrationResult, NarratedChoice
from turnloom.llm.quota import QuotaTracker, QuotaStatus


def initialize_narrator(settings: Settings) -> NarratorOracle:
    """Build the narrator with its own client and quota tracker."""
    llm_client = OllamaClient.from_settings(settings)
    quota = QuotaTracker(
        hourly_limit=settings.quota_hourly_limit,
        reset_interval=settings.quota_reset_minutes * 60,
        backoff=settings.quota_backoff_minutes * 60,
        max_consecutive_errors=settings.quota_max_consecutive_errors,
    )
    return NarratorOracle(llm_client, quota)


__all__ = [
    'OllamaClient',
    'NarratorOracle',
    'NarrationResult',
    'NarratedChoice',
    'QuotaTracker',
    'QuotaStatus',
    'NarrationError',
    'JSONExtractionError',
    'ValidationFailedError',
    'QuotaExceededError',
    'initialize_narrator',
]
