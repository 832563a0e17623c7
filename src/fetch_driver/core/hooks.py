"""Lifecycle hooks around the init, fetch and parse phases."""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import DriveContext

Hook = Callable[["DriveContext"], Awaitable[None]]


@dataclass(frozen=True)
class DriveHooks:
    """
    Optional hook callables, one per phase boundary.

    Any object exposing some of these attributes works as well, e.g. a
    class defining only `async def before_fetch(self, ctx)`.

    Example:
        >>> async def print_curl(ctx):
        ...     print(to_curl(ctx.api, ctx.req))
        >>> driver = Driver(hooks=DriveHooks(before_fetch=print_curl))
    """
    before_init: Optional[Hook] = None
    after_init: Optional[Hook] = None
    before_fetch: Optional[Hook] = None
    after_fetch: Optional[Hook] = None
    before_parse: Optional[Hook] = None
    after_parse: Optional[Hook] = None


async def run_hook(hooks: Any, name: str, context: "DriveContext") -> None:
    """Call hook `name` if `hooks` defines it; sync callables are accepted too."""
    if hooks is None:
        return
    hook = getattr(hooks, name, None)
    if hook is None:
        return
    result = hook(context)
    if inspect.isawaitable(result):
        await result
