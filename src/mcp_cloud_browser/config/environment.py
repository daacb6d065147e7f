"""Environment configuration and validation."""

import os
from typing import Optional

from dotenv import load_dotenv, find_dotenv

import logging
logger = logging.getLogger(__name__)


REQUIRED_ENV_VARS = (
    "NOTION_API_KEY",
    "BROWSERBASE_API_KEY",
    "BROWSERBASE_PROJECT_ID",
)

DEFAULT_NOTION_PAGE_URL = "https://www.notion.so/default-page"
DEFAULT_NOTION_DATABASE_ID = "default-database-id"
DEFAULT_BROWSERBASE_API_URL = "https://api.browserbase.com/v1"


def load_env_file(filename: str = ".env") -> Optional[str]:
    """
    Load a .env file found from the current working directory upwards.

    Values already present in the process environment win, so a client that
    passes credentials through its MCP server config is never overridden by a
    stale file.

    Returns:
        The path of the loaded file, or None if no file was found.
    """
    path = find_dotenv(filename=filename, usecwd=True)
    if not path:
        return None
    load_dotenv(path, override=False)
    logger.debug(f"Loaded environment from {path}")
    return path


def _read(name: str) -> str:
    return (os.getenv(name) or "").strip()


def get_env_config() -> dict:
    """
    Read environment variables and validate required ones.

    Required:   NOTION_API_KEY
                BROWSERBASE_API_KEY
                BROWSERBASE_PROJECT_ID
    Optional:   NOTION_PAGE_URL (fallback for notion_read_page)
                NOTION_DATABASE_ID (fallback for notion_add_to_database)
                BROWSERBASE_API_URL

    Raises:
        EnvironmentError: listing every required variable that is missing or blank.
    """
    missing = [name for name in REQUIRED_ENV_VARS if not _read(name)]
    if missing:
        raise EnvironmentError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    return {
        "notion_api_key": _read("NOTION_API_KEY"),
        "browserbase_api_key": _read("BROWSERBASE_API_KEY"),
        "browserbase_project_id": _read("BROWSERBASE_PROJECT_ID"),
        "notion_page_url": _read("NOTION_PAGE_URL") or DEFAULT_NOTION_PAGE_URL,
        "notion_database_id": _read("NOTION_DATABASE_ID") or DEFAULT_NOTION_DATABASE_ID,
        "browserbase_api_url": (_read("BROWSERBASE_API_URL") or DEFAULT_BROWSERBASE_API_URL).rstrip("/"),
    }
