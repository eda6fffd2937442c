"""
Runtime settings read from the environment.

Clustering ceilings (index size, lookup budget, page size, place radius) are
fixed constants in their modules and are not configurable here.
"""

import os
from dataclasses import dataclass
from typing import Optional

from photo_clusters.database import DATABASE_PATH
from photo_clusters.geocoding import NOMINATIM_URL, USER_AGENT


@dataclass
class Settings:
    db_path: str = DATABASE_PATH
    library_root: str = "Sample_Library"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    geocoder_url: str = NOMINATIM_URL
    user_agent: str = USER_AGENT


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        db_path=os.getenv("PHOTO_CLUSTERS_DB", defaults.db_path),
        library_root=os.getenv("PHOTO_CLUSTERS_LIBRARY", defaults.library_root),
        log_level=os.getenv("PHOTO_CLUSTERS_LOG_LEVEL", defaults.log_level),
        log_file=os.getenv("PHOTO_CLUSTERS_LOG_FILE") or None,
        geocoder_url=os.getenv("PHOTO_CLUSTERS_GEOCODER_URL", defaults.geocoder_url),
        user_agent=os.getenv("PHOTO_CLUSTERS_USER_AGENT", defaults.user_agent),
    )
