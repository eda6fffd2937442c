import math
from typing import List, Optional, Tuple, Sequence
from photo_clusters.models import (
    AssetIndexItem,
    MomentCluster,
    PlaceCluster,
    ClusterOptions,
    PlaceClusterOptions,
)
from photo_clusters.error_handling import logger

EARTH_RADIUS_KM = 6371.0

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    # Convert degrees to radians
    lat1_rad, lon1_rad = math.radians(lat1), math.radians(lon1)
    lat2_rad, lon2_rad = math.radians(lat2), math.radians(lon2)

    # Haversine formula
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = math.sin(dlat/2)**2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon/2)**2

    # Rounding can push a just past 1 for antipodal points; NaN passes through
    if a > 1.0:
        a = 1.0
    elif a < 0.0:
        a = 0.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return c * EARTH_RADIUS_KM

def recompute_centroid(items: Sequence[AssetIndexItem]) -> Tuple[float, float]:
    valid_coords = [(item.lat, item.lon) for item in items if item.has_location]

    if not valid_coords:
        return 0.0, 0.0

    avg_lat = sum(lat for lat, lon in valid_coords) / len(valid_coords)
    avg_lon = sum(lon for lat, lon in valid_coords) / len(valid_coords)
    return avg_lat, avg_lon

def _cluster_fields(items: List[AssetIndexItem]) -> dict:
    # items are already time-ascending
    start_ts = items[0].ts
    end_ts = items[-1].ts
    asset_ids = [item.id for item in items]

    return {
        # Not unique: two groups with the same bounds and size share an id
        'id': f"{start_ts}-{end_ts}-{len(asset_ids)}",
        'start_ts': start_ts,
        'end_ts': end_ts,
        'cover_asset_id': items[len(items) // 2].id,
        'asset_ids': asset_ids,
    }

def to_moment_cluster(items: List[AssetIndexItem]) -> MomentCluster:
    return MomentCluster(**_cluster_fields(items))

def to_place_cluster(items: List[AssetIndexItem], centroid: Tuple[float, float]) -> PlaceCluster:
    lat, lon = centroid
    return PlaceCluster(lat=lat, lon=lon, **_cluster_fields(items))

def _filter_screenshots(items: Sequence[AssetIndexItem], include_screenshots: bool) -> List[AssetIndexItem]:
    if include_screenshots:
        return list(items)
    return [item for item in items if not item.is_screenshot]

def cluster_moments(items: Sequence[AssetIndexItem],
                    options: Optional[ClusterOptions] = None) -> List[MomentCluster]:
    """
    Split photos into moments wherever consecutive capture times are further
    apart than the session gap.

    Args:
        items: Index items in any order
        options: Session gap and screenshot inclusion

    Returns:
        List of MomentCluster, most recent first
    """
    options = options or ClusterOptions()
    filtered = _filter_screenshots(items, options.include_screenshots)
    sorted_items = sorted(filtered, key=lambda item: item.ts)
    if not sorted_items:
        return []

    gap_ms = options.session_gap_minutes * 60 * 1000

    clusters = []
    current = [sorted_items[0]]

    for prev, nxt in zip(sorted_items, sorted_items[1:]):
        if nxt.ts - prev.ts > gap_ms:
            clusters.append(to_moment_cluster(current))
            current = [nxt]
        else:
            current.append(nxt)

    clusters.append(to_moment_cluster(current))

    logger.info(f"Moment clustering completed: {len(sorted_items)} photos -> {len(clusters)} moments")
    return sorted(clusters, key=lambda c: c.start_ts, reverse=True)

def cluster_places(items: Sequence[AssetIndexItem],
                   options: Optional[PlaceClusterOptions] = None) -> List[PlaceCluster]:
    """
    Group located photos into visits. A visit ends when the next photo is
    too long after the previous one or too far from the visit's centroid.

    Photos without coordinates are left out entirely.

    Args:
        items: Index items in any order
        options: Radius, travel time limit and screenshot inclusion

    Returns:
        List of PlaceCluster, most recent first, unnamed
    """
    options = options or PlaceClusterOptions()
    filtered = [item for item in _filter_screenshots(items, options.include_screenshots)
                if item.has_location]
    sorted_items = sorted(filtered, key=lambda item: item.ts)
    if not sorted_items:
        return []

    max_travel_ms = options.max_travel_time_minutes * 60 * 1000

    clusters = []
    current = [sorted_items[0]]
    centroid = (sorted_items[0].lat, sorted_items[0].lon)

    for prev, nxt in zip(sorted_items, sorted_items[1:]):
        travel_ms = nxt.ts - prev.ts
        distance_km = haversine_distance(centroid[0], centroid[1], nxt.lat, nxt.lon)

        if travel_ms > max_travel_ms or distance_km > options.radius_km:
            clusters.append(to_place_cluster(current, centroid))
            current = [nxt]
            centroid = (nxt.lat, nxt.lon)
        else:
            # The centroid follows the group, so a slow walk can drift
            current.append(nxt)
            centroid = recompute_centroid(current)

    clusters.append(to_place_cluster(current, centroid))

    logger.info(f"Place clustering completed: {len(sorted_items)} located photos -> {len(clusters)} places")
    return sorted(clusters, key=lambda c: c.start_ts, reverse=True)
