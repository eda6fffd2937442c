"""
Shared fixtures: an in-memory media source and index item builders.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from typing import Dict, List, Optional

from photo_clusters.media_source import (
    Album,
    AssetPage,
    Location,
    MediaAsset,
    MediaSource,
    PermissionStatus,
)
from photo_clusters.models import AssetIndexItem

MINUTE_MS = 60 * 1000


class FakeMediaSource(MediaSource):
    """Media source serving assets from memory and recording every call."""

    def __init__(self, assets: Optional[List[MediaAsset]] = None,
                 albums: Optional[Dict[str, List[str]]] = None,
                 locations: Optional[Dict[str, object]] = None,
                 granted: bool = True,
                 grant_on_request: bool = False,
                 supports_media_subtypes: bool = False):
        self.assets = assets or []
        self.albums = albums or {}
        self.locations = locations or {}
        self.granted = granted
        self.grant_on_request = grant_on_request
        self.supports_media_subtypes = supports_media_subtypes
        self.asset_queries = []
        self.location_lookups = []
        self.permission_requests = 0

    def get_permissions(self) -> PermissionStatus:
        return PermissionStatus(granted=self.granted, can_ask_again=True)

    def request_permissions(self) -> PermissionStatus:
        self.permission_requests += 1
        if self.grant_on_request:
            self.granted = True
        return PermissionStatus(granted=self.granted, can_ask_again=not self.granted)

    def get_assets(self, media_type="photo", media_subtypes=None, album=None,
                   first=200, after=None, ascending=False) -> AssetPage:
        self.asset_queries.append({'media_subtypes': media_subtypes, 'album': album, 'after': after})

        assets = self.assets
        if media_subtypes:
            assets = [a for a in assets if all(s in a.media_subtypes for s in media_subtypes)]
        if album is not None:
            members = set(self.albums.get(album.title, []))
            assets = [a for a in assets if a.id in members]
        assets = sorted(assets, key=lambda a: (a.creation_time or 0, a.id), reverse=not ascending)

        offset = int(after) if after else 0
        page = assets[offset:offset + first]
        end = offset + len(page)
        return AssetPage(assets=page, end_cursor=str(end) if page else None,
                         has_next_page=end < len(assets))

    def get_albums(self, include_smart_albums=False) -> List[Album]:
        return [Album(id=str(i), title=title) for i, title in enumerate(self.albums)]

    def get_asset_location(self, asset_id: str) -> Optional[Location]:
        self.location_lookups.append(asset_id)
        location = self.locations.get(asset_id)
        if isinstance(location, Exception):
            raise location
        return location


def make_asset(index: int, ts: int, filename: Optional[str] = None, subtypes=None) -> MediaAsset:
    return MediaAsset(
        id=f"asset-{index}",
        filename=filename or f"IMG_{index:04d}.JPG",
        uri=f"file:///photos/IMG_{index:04d}.JPG",
        creation_time=ts,
        width=4032,
        height=3024,
        media_subtypes=list(subtypes or []),
    )


def make_item(asset_id: str, ts: int, lat=None, lon=None, is_screenshot=None) -> AssetIndexItem:
    return AssetIndexItem(id=asset_id, ts=ts, uri=f"file:///photos/{asset_id}.jpg",
                          w=100, h=100, is_screenshot=is_screenshot, lat=lat, lon=lon)


@pytest.fixture
def fake_source_cls():
    return FakeMediaSource


@pytest.fixture
def asset_factory():
    return make_asset


@pytest.fixture
def item_factory():
    return make_item
