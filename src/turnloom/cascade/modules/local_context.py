import re
from typing import Awaitable, Callable

from turnloom.cascade.modules.base import EnrichmentModule
from turnloom.models import EnrichedContext, EnrichmentLevel, GeoPoint, ModuleEnrichmentResult

SummaryProvider = Callable[[GeoPoint], Awaitable[str | None]]

NO_SUMMARY = "No local information found."


async def location_summary(location: GeoPoint) -> str | None:
    """Offline default: the summary stored on the location itself."""
    return location.summary or None


def sanitize(text: str) -> str:
    """Collapse whitespace and drop control characters so the text embeds cleanly in prompts."""
    text = re.sub(r"[\x00-\x08\x0b-\x1f\x7f]", "", text)
    return re.sub(r"\s+", " ", text).strip()


class LocalContextModule(EnrichmentModule):
    """Baseline situational enrichment: what is known about the player's current location."""

    id = "local_context"

    def __init__(self, summary_provider: SummaryProvider | None = None):
        self.summary_provider = summary_provider or location_summary

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        location = context.subject.location
        summary = await self.summary_provider(location)

        data = {
            "location_name": location.name,
            "summary": sanitize(summary) if summary else NO_SUMMARY,
            "nearby_places": [poi.name for poi in context.nearby_pois],
        }
        return self.result(context, data, EnrichmentLevel.BASIC)
