"""Command registry.

Handlers register with declarative metadata (help, tags, limit) the way
plugin hosts expect; `dispatch()` routes a command name to its handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from mediabot.host import CommandContext

logger = logging.getLogger(__name__)

Handler = Callable[[CommandContext], Awaitable[None]]


@dataclass(frozen=True)
class Command:
    name: str
    handler: Handler
    help: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    limit: bool = False


COMMANDS: dict[str, Command] = {}


def register(name: str, *, help: str = "", tags: tuple[str, ...] = (), limit: bool = False):
    """Decorator registering an async handler under `name`."""
    def decorator(fn: Handler) -> Handler:
        COMMANDS[name] = Command(name=name, handler=fn, help=help, tags=tags, limit=limit)
        return fn
    return decorator


async def dispatch(name: str, ctx: CommandContext) -> None:
    """Run the handler registered for `name`. Raises KeyError if unknown."""
    command = COMMANDS[name]
    logger.info("Dispatching %s (args=%s)", name, ctx.args)
    await command.handler(ctx)


# Register built-in commands
from mediabot.commands import editimg, ytmp4  # noqa: E402,F401
