"""配置管理模块"""

from feedsearch.config.settings import (
    Environment,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Environment",
    "Settings",
    "get_settings",
    "reload_settings",
]
