"""
Cached moments and places for a photo library.

Readers get the last persisted state immediately from load_cached_moments()
and load_cached_places(); refresh_moments() and refresh_places() rebuild the
derived views from the media source and replace them in the store. Refreshes
never raise: a denied permission or a failure returns the cached state.

Refreshes are not serialized. Two overlapping refreshes of the same view
both run to completion and the last one to write wins.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

from .models import (
    AssetIndexItem,
    MomentCluster,
    PlaceCluster,
    ClusterOptions,
    PlaceClusterOptions,
    MomentsState,
    PlacesState,
)
from .media_source import MediaSource, PermissionStatus
from .asset_index import build_asset_index, merge_screenshot_ids
from .screenshots import ScreenshotDetector
from .location import enrich_locations
from .clustering import cluster_moments, cluster_places
from .geocoding import name_place_clusters
from .error_handling import handle_error, CacheError
from .app_insights import app_insights

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "asset_index": "photoClusters.assetIndex.v1",
    "moments": "photoClusters.moments.v1",
    "places": "photoClusters.places.v1",
    "last_sync_ts": "photoClusters.lastSyncTs.v1",
}

DEFAULT_SESSION_GAP_MINUTES = 60
DEFAULT_MAX_TRAVEL_TIME_MINUTES = 120
PLACE_RADIUS_KM = 0.5


def _now_ms() -> int:
    return int(time.time() * 1000)


def _resolve_assets(asset_ids: List[str], asset_index: List[AssetIndexItem]) -> List[AssetIndexItem]:
    by_id = {item.id: item for item in asset_index}
    return [by_id[asset_id] for asset_id in asset_ids if asset_id in by_id]


class PhotoLibrary:
    """
    Owns the persisted asset index, moment clusters, place clusters and last
    sync time, and keeps them up to date from a media source.

    Args:
        source: Media source to index
        store: Persistence with load(key), save(key, value) and save_many(values)
        geocoder: Object with reverse_geocode(lat, lon) used to name places;
            places stay unnamed without one
        detector: Screenshot detector, built for the source if not given
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(self, source: MediaSource, store, geocoder=None,
                 detector: Optional[ScreenshotDetector] = None,
                 clock: Optional[Callable[[], int]] = None,
                 insights=None):
        self.source = source
        self.store = store
        self.geocoder = geocoder
        self.detector = detector
        self.clock = clock or _now_ms
        self.insights = insights or app_insights

    # Permission

    def request_permission(self) -> PermissionStatus:
        try:
            existing = self.source.get_permissions()
            if existing.granted:
                return existing
            return self.source.request_permissions()
        except Exception as e:
            handle_error(e, "permission request", raise_error=False)
            return PermissionStatus(granted=False, can_ask_again=False)

    # Cached reads

    def _load_list(self, key: str, cls) -> list:
        try:
            data = self.store.load(STORAGE_KEYS[key]) or []
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            return [cls.from_dict(entry) for entry in data]
        except (CacheError, ValueError, TypeError, AttributeError) as e:
            handle_error(e, f"loading cached {key}", raise_error=False)
            return []

    def _load_last_sync_ts(self) -> Optional[int]:
        try:
            return self.store.load(STORAGE_KEYS["last_sync_ts"])
        except (CacheError, ValueError) as e:
            handle_error(e, "loading last sync time", raise_error=False)
            return None

    def load_cached_moments(self) -> MomentsState:
        return MomentsState(
            asset_index=self._load_list("asset_index", AssetIndexItem),
            moments=self._load_list("moments", MomentCluster),
            last_sync_ts=self._load_last_sync_ts(),
        )

    def load_cached_places(self) -> PlacesState:
        return PlacesState(
            asset_index=self._load_list("asset_index", AssetIndexItem),
            places=self._load_list("places", PlaceCluster),
            last_sync_ts=self._load_last_sync_ts(),
        )

    def get_asset(self, asset_id: str) -> Optional[AssetIndexItem]:
        return next((item for item in self._load_list("asset_index", AssetIndexItem)
                     if item.id == asset_id), None)

    def get_moment(self, cluster_id: str) -> Optional[Tuple[MomentCluster, List[AssetIndexItem]]]:
        """Cached moment and its photos, or None if no moment has that id."""
        state = self.load_cached_moments()
        cluster = next((c for c in state.moments if c.id == cluster_id), None)
        if cluster is None:
            return None
        return cluster, _resolve_assets(cluster.asset_ids, state.asset_index)

    def get_place(self, place_id: str) -> Optional[Tuple[PlaceCluster, List[AssetIndexItem]]]:
        """Cached place and its photos, or None if no place has that id."""
        state = self.load_cached_places()
        cluster = next((c for c in state.places if c.id == place_id), None)
        if cluster is None:
            return None
        return cluster, _resolve_assets(cluster.asset_ids, state.asset_index)

    def list_screenshots(self) -> List[AssetIndexItem]:
        """Cached screenshots, newest first."""
        screenshots = [item for item in self._load_list("asset_index", AssetIndexItem)
                       if item.is_screenshot]
        return sorted(screenshots, key=lambda item: item.ts, reverse=True)

    # Refresh

    def _rebuild_moments(self, options: ClusterOptions) -> MomentsState:
        items, screenshot_ids = build_asset_index(self.source, self.detector)
        asset_index = merge_screenshot_ids(items, screenshot_ids)
        moments = cluster_moments(asset_index, options)
        last_sync_ts = self.clock()

        self.store.save_many({
            STORAGE_KEYS["asset_index"]: [item.to_dict() for item in asset_index],
            STORAGE_KEYS["moments"]: [cluster.to_dict() for cluster in moments],
            STORAGE_KEYS["last_sync_ts"]: last_sync_ts,
        })

        self.insights.track_assets_indexed(len(asset_index))
        self.insights.track_moments_created(len(moments))
        return MomentsState(asset_index=asset_index, moments=moments, last_sync_ts=last_sync_ts)

    def refresh_moments(self, session_gap_minutes: Optional[float] = None,
                        include_screenshots: bool = False) -> MomentsState:
        """
        Re-index the library and recompute moments.

        Args:
            session_gap_minutes: Longest pause inside one moment, 60 by default
            include_screenshots: Whether screenshots take part in moments

        Returns:
            The fresh MomentsState, or the cached one if the library could not be read
        """
        started = time.monotonic()
        if not self.request_permission().granted:
            logger.warning("Photo library permission denied, keeping cached moments")
            self.insights.track_event("refresh_denied", {"view": "moments"})
            return self.load_cached_moments()

        options = ClusterOptions(
            session_gap_minutes=(session_gap_minutes if session_gap_minutes is not None
                                 else DEFAULT_SESSION_GAP_MINUTES),
            include_screenshots=include_screenshots,
        )
        try:
            state = self._rebuild_moments(options)
        except Exception as e:
            handle_error(e, "moments refresh", raise_error=False)
            self.insights.track_event("refresh_failed", {"view": "moments"})
            return self.load_cached_moments()

        self.insights.track_refresh_time(time.monotonic() - started)
        logger.info(f"Moments refreshed: {len(state.asset_index)} photos, {len(state.moments)} moments")
        return state

    def refresh_places(self, include_screenshots: bool = False,
                       max_travel_time_minutes: float = DEFAULT_MAX_TRAVEL_TIME_MINUTES) -> PlacesState:
        """
        Add locations to the cached index and recompute places.

        Uses the cached asset index, re-indexing first only when there is none.
        Places are clustered with a fixed 0.5 km radius.

        Args:
            include_screenshots: Whether screenshots take part in places
            max_travel_time_minutes: Longest pause inside one visit

        Returns:
            The fresh PlacesState, or the cached one if the library could not be read
        """
        started = time.monotonic()
        if not self.request_permission().granted:
            logger.warning("Photo library permission denied, keeping cached places")
            self.insights.track_event("refresh_denied", {"view": "places"})
            return self.load_cached_places()

        options = PlaceClusterOptions(
            radius_km=PLACE_RADIUS_KM,
            max_travel_time_minutes=max_travel_time_minutes,
            include_screenshots=include_screenshots,
        )
        try:
            asset_index = self._load_list("asset_index", AssetIndexItem)
            if not asset_index:
                logger.info("No cached asset index, refreshing moments first")
                asset_index = self._rebuild_moments(
                    ClusterOptions(session_gap_minutes=DEFAULT_SESSION_GAP_MINUTES)).asset_index

            asset_index, changed = enrich_locations(asset_index, self.source)
            if changed:
                self.store.save(STORAGE_KEYS["asset_index"], [item.to_dict() for item in asset_index])

            places = cluster_places(asset_index, options)
            if self.geocoder is not None:
                name_place_clusters(places, self.geocoder)

            last_sync_ts = self.clock()
            self.store.save_many({
                STORAGE_KEYS["places"]: [cluster.to_dict() for cluster in places],
                STORAGE_KEYS["last_sync_ts"]: last_sync_ts,
            })
        except Exception as e:
            handle_error(e, "places refresh", raise_error=False)
            self.insights.track_event("refresh_failed", {"view": "places"})
            return self.load_cached_places()

        self.insights.track_places_created(len(places))
        self.insights.track_refresh_time(time.monotonic() - started)
        logger.info(f"Places refreshed: {len(places)} places")
        return PlacesState(asset_index=asset_index, places=places, last_sync_ts=last_sync_ts)
