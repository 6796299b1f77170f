"""
VeoStudio Core Components

Provides foundational infrastructure shared by the services:
- Configuration loaded from the environment
"""

from .config import Config, get_config, reload_config

__all__ = ["Config", "get_config", "reload_config"]
