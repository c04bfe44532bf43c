"""
Utility helpers: configuration and logging.
"""

from deskrag.utils.config import Config, DeskRagConfig, load_config
from deskrag.utils.logging import get_logger, set_log_level

__all__ = [
    "Config",
    "DeskRagConfig",
    "load_config",
    "get_logger",
    "set_log_level",
]
