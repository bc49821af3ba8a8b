from typing import Any, Awaitable, Callable, Dict, List

from turnloom.cascade.modules.base import EnrichmentModule
from turnloom.models import EnrichedContext, EnrichmentLevel, ModuleEnrichmentResult

ReferenceLookup = Callable[[str, int], Awaitable[List[Dict[str, Any]]]]

# Longest first, so "look up information about" wins over "look up"
QUERY_PREFIXES = sorted(
    [
        "read about",
        "read up on",
        "look for a book about",
        "look for a book on",
        "find a book about",
        "find a book on",
        "research",
        "look up",
        "search for information about",
        "search for information on",
    ],
    key=len,
    reverse=True,
)


async def no_lookup(query: str, limit: int) -> List[Dict[str, Any]]:
    """Offline default: no reference source configured."""
    return []


def extract_query(text: str) -> str | None:
    """Returns the subject after the first reference phrase, e.g. 'research the Commune' -> 'the Commune'."""
    lowered = text.lower()
    for prefix in QUERY_PREFIXES:
        index = lowered.find(prefix)
        if index == -1:
            continue
        query = text[index + len(prefix):].strip().rstrip(".!?").strip("\"' ")
        return query or None
    return None


class ReferenceModule(EnrichmentModule):
    """Looks up reference material (books, encyclopedia entries) for research actions."""

    id = "reference"

    def __init__(self, lookup: ReferenceLookup | None = None, max_results: int = 3):
        self.lookup = lookup or no_lookup
        self.max_results = max_results

    async def enrich(self, context: EnrichedContext) -> ModuleEnrichmentResult:
        query = extract_query(context.action.payload.text)
        entries: List[Dict[str, Any]] = []
        if query:
            entries = await self.lookup(query, self.max_results)
            message = f'Reference search for "{query}" returned {len(entries)} result(s).'
        else:
            message = "No reference search for this action."

        data = {
            "query": query,
            "entries": entries[: self.max_results],
            "message": message,
        }
        return self.result(context, data, EnrichmentLevel.DETAILED)
