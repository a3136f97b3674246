"""Build the data block of search-result events."""

from typing import Any

from slurp.config import FACET_FIELD_PREFIX, GROUP_EXPANSION_FACET
from slurp.core.query.decoder import decode_query
from slurp.core.records.normalizer import normalize_record

# Facet keys kept in the payload.
_FACET_KEYS = ("name", "value", "type", "multiFacetGroupId")


def _to_int(value: Any) -> int | None:
    """Parse an int leniently; unparsable values become None."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def simplify_facets(facets: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Keep only name/value/type/multiFacetGroupId of each applied facet."""
    return [{k: f[k] for k in _FACET_KEYS if k in f} for f in facets or [] if isinstance(f, dict)]


def classify_search_action(facets: list[dict[str, Any]] | None, page_no: Any) -> str:
    """Label a search-result event.

    Group expansion wins over paging, which wins over refinement.
    """
    if facets and facets[0].get("name") == GROUP_EXPANSION_FACET:
        return "expand_frbr_group"
    page = _to_int(page_no)
    if page is not None and page > 1:
        return "change_page"
    if facets:
        return "refinement"
    return "search"


def build_search_data(
    search: dict[str, Any],
    result: dict[str, Any],
    page_no: int | None = None,
    *,
    keypresses: int = 0,
    pasted: bool = False,
    facet_prefix: str = FACET_FIELD_PREFIX,
) -> dict[str, Any]:
    """Assemble the data of a search event from the host's search and result objects."""
    records = [normalize_record(r) for r in result.get("data") or []]
    info = result.get("info") or {}
    decoded = decode_query(search.get("query"), facet_prefix=facet_prefix)

    return {
        # Input
        "keypresses": keypresses,
        "pasted": pasted,
        # Search
        "advanced": search.get("mode") == "advanced",
        **decoded.to_dict(),
        "scope": search.get("scope"),
        "sort": search.get("sortby"),
        "facets": simplify_facets(search.get("facets")),
        "pc": search.get("pcAvailability") == "true",
        # Results
        "first": _to_int(info.get("first")),
        "last": _to_int(info.get("last")),
        "total": _to_int(info.get("total")),
        "results": [r.id for r in records],
        "page_no": page_no,
        "aggs": {
            "records": len(records),
            "is_local": sum(1 for r in records if r.is_local),
            "has_dewey": sum(1 for r in records if r.dewey_terms),
            "has_humord": sum(1 for r in records if r.humord_terms),
            "has_rt": sum(1 for r in records if r.realfag_terms),
        },
    }
