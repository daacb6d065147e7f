# mcp_cloud_browser/decorators/ensure.py
import inspect
import functools


def ensure_session(fn):
    """
    Resolve the session named by ``args.sessionId`` and pass it as ``session=``.

    The session is created on first use and held busy until the handler
    returns, so the idle reaper cannot close it mid-call. Connection failures
    propagate as ProviderConnectionError so the surrounding tool_envelope can
    report them.
    """
    if not inspect.iscoroutinefunction(fn):
        raise TypeError(f"ensure_session requires an async handler, got {fn.__name__}")

    @functools.wraps(fn)
    async def wrapper(ctx, args, **kwargs):
        session = await ctx.registry.resolve(args.sessionId)
        async with ctx.registry.in_use(session):
            return await fn(ctx, args, session=session, **kwargs)

    return wrapper
