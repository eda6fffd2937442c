import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from .media_source import MediaSource, paginate
from .error_handling import handle_error

logger = logging.getLogger(__name__)

SCREENSHOT_SUBTYPE = "screenshot"
MAX_SCREENSHOT_IDS = 2000
PAGE_SIZE = 200

def is_screenshot_filename(filename: Optional[str]) -> bool:
    return bool(filename) and SCREENSHOT_SUBTYPE in filename.lower()

def _collect_ids(source: MediaSource, limit: int, **query) -> Set[str]:
    ids = set()
    for page in paginate(source, limit=limit, first=PAGE_SIZE, **query):
        ids.update(asset.id for asset in page.assets)
    return ids

class ScreenshotStrategy(ABC):
    @abstractmethod
    def find_ids(self, source: MediaSource, limit: int = MAX_SCREENSHOT_IDS) -> Set[str]:
        ...

class SubtypeScreenshotStrategy(ScreenshotStrategy):
    """Ask the platform for photos tagged with the native screenshot subtype."""

    def find_ids(self, source: MediaSource, limit: int = MAX_SCREENSHOT_IDS) -> Set[str]:
        ids = _collect_ids(source, limit, media_type="photo", media_subtypes=[SCREENSHOT_SUBTYPE])
        logger.info(f"Found {len(ids)} screenshots by media subtype")
        return ids

class AlbumScreenshotStrategy(ScreenshotStrategy):
    """Use the members of the first album whose title mentions screenshots."""

    def find_ids(self, source: MediaSource, limit: int = MAX_SCREENSHOT_IDS) -> Set[str]:
        albums = source.get_albums(include_smart_albums=True)
        album = next((a for a in albums if SCREENSHOT_SUBTYPE in a.title.lower()), None)

        if album is None:
            logger.info("No screenshots album found")
            return set()

        ids = _collect_ids(source, limit, album=album)
        logger.info(f"Found {len(ids)} screenshots in album '{album.title}'")
        return ids

class ScreenshotDetector:
    """
    Finds screenshot asset ids, trying each strategy until one finds any.

    Platforms with native media subtypes try the subtype query before the
    album fallback; all others only use the album fallback.
    """

    def __init__(self, source: MediaSource, strategies: Optional[List[ScreenshotStrategy]] = None):
        self.source = source
        if strategies is None:
            strategies = [AlbumScreenshotStrategy()]
            if source.supports_media_subtypes:
                strategies.insert(0, SubtypeScreenshotStrategy())
        self.strategies = strategies

    def find_screenshot_ids(self) -> Set[str]:
        """Never raises: any failure yields an empty set."""
        try:
            for strategy in self.strategies:
                ids = strategy.find_ids(self.source, MAX_SCREENSHOT_IDS)
                if ids:
                    return ids
            return set()
        except Exception as e:
            handle_error(e, "screenshot detection", raise_error=False)
            return set()
