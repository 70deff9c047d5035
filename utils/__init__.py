"""Utils module."""
from utils.logger import setup_logger, get_logger, cleanup_old_logs, studio_logger

__all__ = [
    "setup_logger",
    "get_logger",
    "cleanup_old_logs",
    "studio_logger"
]
