"""
Error handling and logging infrastructure for Photo Clusters.
"""

import logging
import sys
from typing import Optional
from pathlib import Path

# Configure logging
def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Setup logging configuration for the library.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
    """
    logger = logging.getLogger('photo_clusters')
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

# Global logger instance
logger = setup_logging()

class PhotoClustersError(Exception):
    """Base exception class for Photo Clusters errors."""
    pass

class SourceUnavailableError(PhotoClustersError):
    """Raised when the media source fails to answer a query."""
    pass

class NamingError(PhotoClustersError):
    """Raised when a place cannot be reverse geocoded."""
    pass

class CacheError(PhotoClustersError):
    """Raised for persisted cache read/write failures."""
    pass

def handle_error(error: Exception, context: str = "", raise_error: bool = True):
    """
    Handle and log errors consistently.

    Args:
        error: The exception that occurred
        context: Additional context about where the error occurred
        raise_error: Whether to re-raise the error after logging
    """
    error_msg = f"Error in {context}: {str(error)}" if context else f"Error: {str(error)}"
    if raise_error:
        logger.error(error_msg, exc_info=True)
        raise error

    # Degraded paths keep going, so they only warrant a warning
    logger.warning(error_msg, exc_info=True)
