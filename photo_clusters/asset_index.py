import logging
from typing import Iterable, List, Optional, Set, Tuple

from .models import AssetIndexItem
from .media_source import MediaAsset, MediaSource, paginate
from .screenshots import ScreenshotDetector, SCREENSHOT_SUBTYPE, is_screenshot_filename

logger = logging.getLogger(__name__)

PAGE_SIZE = 200
MAX_INDEXED_ASSETS = 2000

def normalize_asset(asset: MediaAsset) -> AssetIndexItem:
    return AssetIndexItem(
        id=asset.id,
        ts=asset.creation_time or 0,
        uri=asset.uri,
        w=asset.width or 0,
        h=asset.height or 0,
        is_screenshot=(SCREENSHOT_SUBTYPE in (asset.media_subtypes or [])
                       or is_screenshot_filename(asset.filename)),
    )

def merge_screenshot_ids(items: Iterable[AssetIndexItem], screenshot_ids: Set[str]) -> List[AssetIndexItem]:
    """Flag items found by the detector, keeping flags already set."""
    merged = []
    for item in items:
        item.is_screenshot = item.id in screenshot_ids or bool(item.is_screenshot)
        merged.append(item)
    return merged

def build_asset_index(source: MediaSource,
                      detector: Optional[ScreenshotDetector] = None) -> Tuple[List[AssetIndexItem], Set[str]]:
    """
    Page through the photo library and normalize every photo into an index item.

    Paging runs newest first and stops at MAX_INDEXED_ASSETS, so the oldest
    photos of a large library are the ones left out.

    Args:
        source: Media source to read from
        detector: Screenshot detector, built for the source if not given

    Returns:
        (items ascending by capture time, screenshot ids from the detector)
    """
    detector = detector or ScreenshotDetector(source)
    screenshot_ids = detector.find_screenshot_ids()

    items = []
    for page in paginate(source, limit=MAX_INDEXED_ASSETS,
                         media_type="photo", first=PAGE_SIZE, ascending=False):
        items.extend(normalize_asset(asset) for asset in page.assets)

    items.sort(key=lambda item: item.ts)
    logger.info(f"Indexed {len(items)} photos ({len(screenshot_ids)} screenshots detected)")
    return items, screenshot_ids
