from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict, fields


def _from_dict(cls, data: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class AssetIndexItem:
    """One photo in the asset index. `ts` is capture time in epoch milliseconds."""
    id: str
    ts: int
    uri: str = ""
    w: int = 0
    h: int = 0
    is_screenshot: Optional[bool] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetIndexItem":
        return _from_dict(cls, data)


@dataclass
class MomentCluster:
    """A run of photos taken without a long pause between them."""
    id: str
    start_ts: int
    end_ts: int
    cover_asset_id: str
    asset_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MomentCluster":
        return _from_dict(cls, data)


@dataclass
class PlaceCluster:
    """A visit to one location: photos close in both space and time."""
    id: str
    start_ts: int
    end_ts: int
    cover_asset_id: str
    asset_ids: List[str] = field(default_factory=list)
    lat: float = 0.0
    lon: float = 0.0
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlaceCluster":
        return _from_dict(cls, data)


@dataclass
class ClusterOptions:
    session_gap_minutes: float = 60
    include_screenshots: bool = False


@dataclass
class PlaceClusterOptions:
    radius_km: float = 0.5
    max_travel_time_minutes: float = 120
    include_screenshots: bool = False


@dataclass
class MomentsState:
    """Cached moments view: the index it was built from and when."""
    asset_index: List[AssetIndexItem] = field(default_factory=list)
    moments: List[MomentCluster] = field(default_factory=list)
    last_sync_ts: Optional[int] = None


@dataclass
class PlacesState:
    """Cached places view: the index it was built from and when."""
    asset_index: List[AssetIndexItem] = field(default_factory=list)
    places: List[PlaceCluster] = field(default_factory=list)
    last_sync_ts: Optional[int] = None
