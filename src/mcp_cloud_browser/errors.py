"""Exception taxonomy shared by the registry, catalog and tool handlers."""

from typing import Optional


class CloudBrowserError(Exception):
    """Base class for all errors raised by mcp_cloud_browser."""


class ProviderConnectionError(CloudBrowserError):
    """The remote browser endpoint could not be reached or refused our credentials."""


class ElementNotFoundError(CloudBrowserError):
    """A selector matched no element on the page."""

    def __init__(self, selector: str):
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class ResourceNotFoundError(CloudBrowserError):
    """A resource URI does not name a console log or a stored screenshot."""

    def __init__(self, uri: str):
        super().__init__(f"Resource not found: {uri}")
        self.uri = uri


class CollaborationError(CloudBrowserError):
    """The Notion API answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidPageUrlError(CloudBrowserError, ValueError):
    """No page identifier could be extracted from a Notion URL."""


class UnknownToolError(CloudBrowserError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


__all__ = [
    "CloudBrowserError",
    "ProviderConnectionError",
    "ElementNotFoundError",
    "ResourceNotFoundError",
    "CollaborationError",
    "InvalidPageUrlError",
    "UnknownToolError",
]
