"""
Tests for settings and logging setup.
"""

import logging

from photo_clusters.config import Settings, load_settings
from photo_clusters.error_handling import setup_logging, handle_error, PhotoClustersError
from photo_clusters.database import DATABASE_PATH

import pytest


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PHOTO_CLUSTERS_DB", "PHOTO_CLUSTERS_LIBRARY", "PHOTO_CLUSTERS_LOG_LEVEL",
                     "PHOTO_CLUSTERS_LOG_FILE", "PHOTO_CLUSTERS_GEOCODER_URL", "PHOTO_CLUSTERS_USER_AGENT"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings == Settings()
        assert settings.db_path == DATABASE_PATH
        assert settings.log_file is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PHOTO_CLUSTERS_DB", "/tmp/cache.db")
        monkeypatch.setenv("PHOTO_CLUSTERS_LIBRARY", "/photos")
        monkeypatch.setenv("PHOTO_CLUSTERS_LOG_LEVEL", "DEBUG")

        settings = load_settings()

        assert settings.db_path == "/tmp/cache.db"
        assert settings.library_root == "/photos"
        assert settings.log_level == "DEBUG"


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "photo_clusters.log"

        logger = setup_logging("DEBUG", str(log_file))
        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert "hello" in log_file.read_text()
        setup_logging()

    def test_handle_error_reraises(self):
        with pytest.raises(PhotoClustersError):
            handle_error(PhotoClustersError("bad"), "test")

    def test_handle_error_can_swallow(self):
        handle_error(PhotoClustersError("bad"), "test", raise_error=False)
