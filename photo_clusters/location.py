import logging
from typing import List, Sequence, Tuple

from .models import AssetIndexItem
from .media_source import MediaSource

logger = logging.getLogger(__name__)

# Per-asset lookups are individual queries, unlike bulk index paging
LOCATION_LOOKUP_BUDGET = 250

def enrich_locations(items: Sequence[AssetIndexItem], source: MediaSource,
                     budget: int = LOCATION_LOOKUP_BUDGET) -> Tuple[List[AssetIndexItem], bool]:
    """
    Attach coordinates to index items, newest photos first.

    Items that already have coordinates cost nothing. Every lookup counts
    against the budget, including lookups that fail.

    Args:
        items: Index items, updated in place
        source: Media source answering per-asset location lookups
        budget: Maximum number of lookups for this call

    Returns:
        (items ascending by capture time, whether any item gained coordinates)
    """
    lookups = 0
    failures = 0
    changed = False

    for item in sorted(items, key=lambda i: i.ts, reverse=True):
        if lookups >= budget:
            break
        if item.has_location:
            continue

        lookups += 1
        try:
            location = source.get_asset_location(item.id)
        except Exception as e:
            failures += 1
            logger.debug(f"Location lookup failed for {item.id}: {e}")
            continue

        if location is None:
            continue

        item.lat = location.latitude
        item.lon = location.longitude
        changed = True

    if failures:
        logger.warning(f"{failures} of {lookups} location lookups failed")
    logger.info(f"Location enrichment: {lookups} lookups, changed={changed}")

    return sorted(items, key=lambda i: i.ts), changed
