#!/usr/bin/env python3
"""Debug script to check the persisted cache contents."""

import sys
from datetime import datetime
from pathlib import Path

from photo_clusters.config import load_settings
from photo_clusters.database import CacheStore
from photo_clusters.library import STORAGE_KEYS

settings = load_settings()
db_path = Path(settings.db_path)

if not db_path.exists():
    print(f"❌ Cache file not found: {db_path}")
    sys.exit(1)

store = CacheStore(str(db_path))
print(f"🔑 Keys: {', '.join(store.keys()) or '(none)'}")

asset_index = store.load(STORAGE_KEYS["asset_index"]) or []
moments = store.load(STORAGE_KEYS["moments"]) or []
places = store.load(STORAGE_KEYS["places"]) or []
last_sync_ts = store.load(STORAGE_KEYS["last_sync_ts"])

print(f"📸 Photos in index: {len(asset_index)}")
print(f"   with GPS: {sum(1 for a in asset_index if a.get('lat') is not None)}")
print(f"   screenshots: {sum(1 for a in asset_index if a.get('is_screenshot'))}")
print(f"🕒 Moments: {len(moments)}")
print(f"🗺️ Places: {len(places)}")
if last_sync_ts:
    print(f"⏱️ Last sync: {datetime.fromtimestamp(last_sync_ts / 1000)}")

if places:
    print(f"\n📋 First {min(len(places), 5)} places:")
    for place in places[:5]:
        label = place.get('name') or f"{place['lat']:.3f}, {place['lon']:.3f}"
        print(f"  ID={place['id']}, Name={label}, Photos={len(place['asset_ids'])}")
