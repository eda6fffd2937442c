"""
Display titles for moments and places.

Times are rendered in local time unless a tz is given.
"""

from collections import Counter
from datetime import datetime, tzinfo
from typing import Optional, Sequence, Union

from .models import MomentCluster, PlaceCluster

SHORT_DURATION_MS = 10 * 60 * 1000
SEPARATOR = " • "


def _to_datetime(ts: int, tz: Optional[tzinfo]) -> datetime:
    return datetime.fromtimestamp(ts / 1000, tz)


def _date(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}, {dt.year}"


def _time_range(start: datetime, end: datetime) -> str:
    if start.date() == end.date():
        return f"{start:%H:%M}–{end:%H:%M}"
    return f"{start:%H:%M}–{end:%b} {end.day}, {end:%H:%M}"


def place_label(cluster: PlaceCluster) -> str:
    """Geocoded name, or the centroid when the place has none."""
    return cluster.name or f"{cluster.lat:.3f}, {cluster.lon:.3f}"


def format_moment_header(cluster: Union[MomentCluster, PlaceCluster], tz: Optional[tzinfo] = None) -> str:
    start = _to_datetime(cluster.start_ts, tz)
    end = _to_datetime(cluster.end_ts, tz)

    if max(0, cluster.end_ts - cluster.start_ts) <= SHORT_DURATION_MS:
        return f"{_date(start)}{SEPARATOR}{start:%H:%M}"
    return f"{_date(start)}{SEPARATOR}{_time_range(start, end)}"


def format_moment_title(cluster: MomentCluster, moments: Sequence[MomentCluster],
                        tz: Optional[tzinfo] = None) -> str:
    """
    List title for a moment. Only the date is shown unless another moment in
    `moments` starts on the same day, then the time is added to tell them apart.
    """
    start = _to_datetime(cluster.start_ts, tz)
    per_day = Counter(_to_datetime(m.start_ts, tz).date() for m in moments)

    if per_day[start.date()] < 2:
        return _date(start)
    return format_moment_header(cluster, tz)


def format_place_title(cluster: PlaceCluster, tz: Optional[tzinfo] = None) -> str:
    start = _to_datetime(cluster.start_ts, tz)
    end = _to_datetime(cluster.end_ts, tz)
    return f"{place_label(cluster)}{SEPARATOR}{_time_range(start, end)}{SEPARATOR}{_date(start)}"
