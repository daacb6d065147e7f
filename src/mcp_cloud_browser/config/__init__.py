"""Configuration management for the cloud browser server."""

from .environment import (
    get_env_config,
    load_env_file,
    REQUIRED_ENV_VARS,
    DEFAULT_NOTION_PAGE_URL,
    DEFAULT_NOTION_DATABASE_ID,
)

__all__ = [
    "get_env_config",
    "load_env_file",
    "REQUIRED_ENV_VARS",
    "DEFAULT_NOTION_PAGE_URL",
    "DEFAULT_NOTION_DATABASE_ID",
]
