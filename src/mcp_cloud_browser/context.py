"""
Centralized server state.

All process-wide state - the session registry, the resource catalog, the
notification emitter and the remote API clients - lives on one context object
instead of module-level globals. Tool handlers receive it explicitly.

Usage:
    from mcp_cloud_browser.context import get_context

    ctx = get_context()
    session = await ctx.registry.resolve("default")
"""

from dataclasses import dataclass
from typing import Any, Optional

from .notifications import NotificationEmitter
from .registry import SessionRegistry
from .resources import ResourceCatalog


@dataclass
class ServerContext:
    """
    Attributes:
        config: Validated environment configuration (see config.get_env_config)
        catalog: Console log and screenshot store
        emitter: Out-of-band notifications to the client
        registry: Live browser sessions
        notion: Notion client used by the notion_* tools
        provider: Browserbase provider the registry connects through
    """

    config: dict
    catalog: ResourceCatalog
    emitter: NotificationEmitter
    registry: SessionRegistry
    notion: Any = None
    provider: Any = None

    async def aclose(self) -> None:
        """Close every session and the HTTP clients."""
        await self.registry.stop_reaper()
        await self.registry.close_all()
        await self.emitter.drain()
        for client in (self.provider, self.notion):
            aclose = getattr(client, "aclose", None)
            if aclose is not None:
                await aclose()


def build_context(
    config: dict,
    provider: Any = None,
    notion: Any = None,
    **registry_kwargs,
) -> ServerContext:
    """
    Wire up a context. Missing clients are built from ``config``.
    ``registry_kwargs`` are passed through to SessionRegistry.
    """
    if provider is None:
        from .browser.provider import BrowserbaseProvider

        provider = BrowserbaseProvider(
            api_key=config["browserbase_api_key"],
            project_id=config["browserbase_project_id"],
            api_url=config.get("browserbase_api_url", "https://api.browserbase.com/v1"),
        )
    if notion is None:
        from .collaboration.notion import NotionClient

        notion = NotionClient(config["notion_api_key"])

    catalog = ResourceCatalog()
    emitter = NotificationEmitter()
    registry = SessionRegistry(provider, catalog, emitter, **registry_kwargs)
    return ServerContext(
        config=config,
        catalog=catalog,
        emitter=emitter,
        registry=registry,
        notion=notion,
        provider=provider,
    )


# ============================================================================
# Global Context Management
# ============================================================================

_global_context: Optional[ServerContext] = None


def get_context() -> ServerContext:
    """
    Get or create the global server context.

    Raises:
        EnvironmentError: if the required environment variables are missing.
    """
    global _global_context

    if _global_context is None:
        # Lazy import keeps the context module free of dotenv side effects.
        from .config.environment import get_env_config, load_env_file

        load_env_file()
        _global_context = build_context(get_env_config())

    return _global_context


def set_context(ctx: Optional[ServerContext]) -> None:
    global _global_context
    _global_context = ctx


def reset_context() -> None:
    """
    Reset the global context. Primarily for tests; it does not close sessions,
    use ``ServerContext.aclose()`` for that.
    """
    global _global_context
    _global_context = None


__all__ = [
    "ServerContext",
    "build_context",
    "get_context",
    "set_context",
    "reset_context",
]
