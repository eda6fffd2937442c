"""
Application Insights integration for refresh telemetry.
"""
import os
import logging
from typing import Optional
from opencensus.ext.azure import metrics_exporter
from opencensus.ext.azure.log_exporter import AzureLogHandler
from opencensus.stats import aggregation as aggregation_module
from opencensus.stats import measure as measure_module
from opencensus.stats import stats as stats_module
from opencensus.stats import view as view_module
from opencensus.tags import tag_map as tag_map_module

logger = logging.getLogger(__name__)


class AppInsights:
    """Application Insights telemetry client."""

    def __init__(self, connection_string: Optional[str] = None):
        """Initialize Application Insights if a connection string is available."""
        self.connection_string = connection_string or os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
        self.enabled = bool(self.connection_string)

        if self.enabled:
            self._setup_logging()
            self._setup_metrics()
        else:
            logger.debug("Application Insights not configured (missing connection string)")

    def _setup_logging(self):
        """Send photo_clusters logs to Azure as well."""
        package_logger = logging.getLogger("photo_clusters")
        package_logger.addHandler(AzureLogHandler(connection_string=self.connection_string))
        logger.info("Application Insights logging enabled")

    def _setup_metrics(self):
        self.stats = stats_module.stats
        self.view_manager = self.stats.view_manager

        self.assets_indexed = measure_module.MeasureInt(
            "assets_indexed", "Number of photos in the asset index", "assets")
        self.moments_created = measure_module.MeasureInt(
            "moments_created", "Number of moment clusters created", "clusters")
        self.places_created = measure_module.MeasureInt(
            "places_created", "Number of place clusters created", "clusters")
        self.refresh_time = measure_module.MeasureFloat(
            "refresh_time", "Refresh duration", "seconds")

        views = [
            view_module.View("assets_indexed_view", "Photos in the asset index", [],
                             self.assets_indexed, aggregation_module.LastValueAggregation()),
            view_module.View("moments_created_view", "Moment clusters created", [],
                             self.moments_created, aggregation_module.LastValueAggregation()),
            view_module.View("places_created_view", "Place clusters created", [],
                             self.places_created, aggregation_module.LastValueAggregation()),
            view_module.View("refresh_time_view", "Refresh duration", [],
                             self.refresh_time, aggregation_module.LastValueAggregation()),
        ]
        for view in views:
            self.view_manager.register_view(view)

        exporter = metrics_exporter.new_metrics_exporter(
            connection_string=self.connection_string
        )
        self.view_manager.register_exporter(exporter)

        logger.info("Application Insights metrics enabled")

    def _record_int(self, measure, count: int):
        mmap = self.stats.stats_recorder.new_measurement_map()
        mmap.measure_int_put(measure, count)
        mmap.record(tag_map_module.TagMap())

    def track_assets_indexed(self, count: int):
        if self.enabled:
            self._record_int(self.assets_indexed, count)
            logger.info(f"Tracked: {count} assets indexed")

    def track_moments_created(self, count: int):
        if self.enabled:
            self._record_int(self.moments_created, count)
            logger.info(f"Tracked: {count} moments created")

    def track_places_created(self, count: int):
        if self.enabled:
            self._record_int(self.places_created, count)
            logger.info(f"Tracked: {count} places created")

    def track_refresh_time(self, seconds: float):
        if self.enabled:
            mmap = self.stats.stats_recorder.new_measurement_map()
            mmap.measure_float_put(self.refresh_time, seconds)
            mmap.record(tag_map_module.TagMap())
            logger.info(f"Tracked: {seconds:.2f}s refresh time")

    def track_event(self, event_name: str, properties: Optional[dict] = None):
        if self.enabled:
            logger.info(f"Event: {event_name}", extra={"custom_dimensions": properties or {}})


# Global instance
app_insights = AppInsights()
