"""
================================================================================
Common Utilities
================================================================================

Shared configuration, logging setup, polling and report helpers.

Usage:
    from unified_dom.common import get_config, init_logger

    init_logger()
    settle = get_config("timeouts.remote_settle", 5.0)

================================================================================
"""

from .config_loader import ConfigLoader, ConfigurationError, get_config
from .global_config import init_logger
from .wait_helpers import WaitConfig, poll_until

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "WaitConfig",
    "get_config",
    "init_logger",
    "poll_until",
]
