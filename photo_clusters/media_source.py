"""
Media source interface and a folder-backed photo library.

The indexing pipeline only talks to a MediaSource: paginated asset queries,
album listing, permission checks and per-asset location lookups. Paging is
cheap, location lookups are expensive and done one asset at a time.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from PIL import Image as PILImage, UnidentifiedImageError
from PIL.ExifTags import TAGS, GPSTAGS

from .error_handling import SourceUnavailableError

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
GPS_IFD = 0x8825
VALID_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.webp'}


@dataclass
class PermissionStatus:
    granted: bool
    can_ask_again: bool


@dataclass
class Location:
    latitude: float
    longitude: float


@dataclass
class Album:
    id: str
    title: str


@dataclass
class MediaAsset:
    """An asset as reported by the media source, before normalization."""
    id: str
    filename: str
    uri: str
    creation_time: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    media_subtypes: List[str] = field(default_factory=list)


@dataclass
class AssetPage:
    assets: List[MediaAsset]
    end_cursor: Optional[str]
    has_next_page: bool


class MediaSource(ABC):
    """Device photo library as seen by the indexer."""

    # Whether get_assets honours a native media_subtypes filter
    supports_media_subtypes: bool = False

    @abstractmethod
    def get_permissions(self) -> PermissionStatus:
        ...

    @abstractmethod
    def request_permissions(self) -> PermissionStatus:
        ...

    @abstractmethod
    def get_assets(self, media_type: str = "photo",
                   media_subtypes: Optional[List[str]] = None,
                   album: Optional[Album] = None,
                   first: int = 200,
                   after: Optional[str] = None,
                   ascending: bool = False) -> AssetPage:
        ...

    @abstractmethod
    def get_albums(self, include_smart_albums: bool = False) -> List[Album]:
        ...

    @abstractmethod
    def get_asset_location(self, asset_id: str) -> Optional[Location]:
        ...


def paginate(source: MediaSource, limit: Optional[int] = None, **query) -> Iterator[AssetPage]:
    """
    Yield pages from source.get_assets until the source runs out or at least
    `limit` assets have been yielded. The limit is checked after each page.
    """
    after = None
    collected = 0

    while True:
        page = source.get_assets(after=after, **query)
        yield page

        collected += len(page.assets)
        if not page.has_next_page or page.end_cursor is None:
            break
        if limit is not None and collected >= limit:
            logger.info(f"Stopped paging at {collected} assets (limit {limit})")
            break
        after = page.end_cursor


def _read_capture_time(exif) -> Optional[datetime]:
    candidates = []
    try:
        candidates.extend(exif.get_ifd(EXIF_IFD).items())
    except (KeyError, ValueError):
        pass
    candidates.extend(exif.items())

    for tag_id, value in candidates:
        tag = TAGS.get(tag_id, tag_id)
        if tag not in ("DateTimeOriginal", "DateTime"):
            continue
        dt_str = value.decode('utf-8') if isinstance(value, bytes) else str(value)
        try:
            return datetime.strptime(dt_str.strip('\x00 '), "%Y:%m:%d %H:%M:%S")
        except ValueError:
            logger.debug(f"Unparseable EXIF date {dt_str!r}")
    return None


def _dms_to_decimal(dms, ref) -> float:
    if isinstance(ref, bytes):
        ref = ref.decode('utf-8')
    decimal = float(dms[0]) + float(dms[1]) / 60 + float(dms[2]) / 3600
    return -decimal if ref in ('S', 'W') else decimal


def read_gps_location(path: Path) -> Optional[Location]:
    """Read GPS coordinates from an image's EXIF GPS IFD."""
    with PILImage.open(path) as pil_image:
        gps_ifd = pil_image.getexif().get_ifd(GPS_IFD)

    if not gps_ifd:
        return None

    gps_data = {GPSTAGS.get(tag_id, tag_id): value for tag_id, value in gps_ifd.items()}
    if 'GPSLatitude' not in gps_data or 'GPSLongitude' not in gps_data:
        return None

    return Location(
        latitude=_dms_to_decimal(gps_data['GPSLatitude'], gps_data.get('GPSLatitudeRef', 'N')),
        longitude=_dms_to_decimal(gps_data['GPSLongitude'], gps_data.get('GPSLongitudeRef', 'E')),
    )


class FolderMediaSource(MediaSource):
    """
    Photo library backed by a directory tree.

    Every image file under the root is a photo; every immediate
    sub-directory is an album. There are no smart albums and no native
    media subtypes, so screenshot detection falls back to album titles.
    """

    def __init__(self, root: str):
        self.root = Path(root)
        self._catalog: Optional[List[MediaAsset]] = None

    def get_permissions(self) -> PermissionStatus:
        granted = self.root.is_dir() and os.access(self.root, os.R_OK)
        return PermissionStatus(granted=granted, can_ask_again=False)

    def request_permissions(self) -> PermissionStatus:
        # Nothing to prompt for, file system access is all or nothing
        return self.get_permissions()

    def _describe(self, path: Path) -> Optional[MediaAsset]:
        try:
            with PILImage.open(path) as pil_image:
                width, height = pil_image.size
                captured = _read_capture_time(pil_image.getexif())
        except (OSError, UnidentifiedImageError) as e:
            logger.warning(f"Skipping unreadable image {path}: {e}")
            return None

        if captured is not None:
            creation_time = int(captured.timestamp() * 1000)
        else:
            creation_time = int(path.stat().st_mtime * 1000)

        return MediaAsset(
            id=path.relative_to(self.root).as_posix(),
            filename=path.name,
            uri=path.resolve().as_uri(),
            creation_time=creation_time,
            width=width,
            height=height,
        )

    def _load_catalog(self) -> List[MediaAsset]:
        if not self.root.is_dir():
            raise SourceUnavailableError(f"Library folder does not exist: {self.root}")

        catalog = []
        for path in sorted(self.root.rglob('*')):
            if path.is_file() and path.suffix.lower() in VALID_EXTENSIONS:
                asset = self._describe(path)
                if asset is not None:
                    catalog.append(asset)

        logger.info(f"Scanned {len(catalog)} photos under {self.root}")
        return catalog

    def get_assets(self, media_type: str = "photo",
                   media_subtypes: Optional[List[str]] = None,
                   album: Optional[Album] = None,
                   first: int = 200,
                   after: Optional[str] = None,
                   ascending: bool = False) -> AssetPage:
        if media_type != "photo":
            return AssetPage(assets=[], end_cursor=None, has_next_page=False)

        # A fresh query rescans the folder, later pages reuse that snapshot
        if after is None or self._catalog is None:
            self._catalog = self._load_catalog()

        assets = self._catalog
        if album is not None:
            prefix = album.id + '/'
            assets = [a for a in assets if a.id.startswith(prefix)]
        if media_subtypes:
            assets = [a for a in assets if all(s in a.media_subtypes for s in media_subtypes)]

        assets = sorted(assets, key=lambda a: (a.creation_time or 0, a.id), reverse=not ascending)

        try:
            offset = int(after) if after else 0
        except ValueError:
            raise SourceUnavailableError(f"Invalid page cursor: {after!r}")

        page = assets[offset:offset + first]
        end = offset + len(page)
        return AssetPage(
            assets=page,
            end_cursor=str(end) if page else None,
            has_next_page=end < len(assets),
        )

    def get_albums(self, include_smart_albums: bool = False) -> List[Album]:
        if not self.root.is_dir():
            raise SourceUnavailableError(f"Library folder does not exist: {self.root}")
        return [Album(id=p.name, title=p.name)
                for p in sorted(self.root.iterdir()) if p.is_dir()]

    def get_asset_location(self, asset_id: str) -> Optional[Location]:
        path = self.root / asset_id
        if not path.is_file():
            raise SourceUnavailableError(f"Unknown asset: {asset_id}")
        try:
            return read_gps_location(path)
        except (OSError, UnidentifiedImageError) as e:
            raise SourceUnavailableError(f"Could not read location of {asset_id}: {e}") from e
