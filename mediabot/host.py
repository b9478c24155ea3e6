"""Collaborator interface between the command flows and a chat host.

A host adapter (WhatsApp bridge, console, tests) implements `Chat` and
`Message` and builds a `CommandContext` per incoming command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class Message(Protocol):
    """A chat message that may carry a binary payload."""

    mimetype: str

    async def download(self) -> bytes | None:
        ...


class Chat(Protocol):
    """Outbound side of the conversation the command came from."""

    async def reply(self, text: str) -> None:
        ...

    async def react(self, emoji: str) -> None:
        ...

    async def send_media(self, url: str, *, caption: str, filename: str | None = None) -> None:
        ...


@dataclass
class CommandContext:
    chat: Chat
    message: Message | None = None  # quoted message if any, else the command message
    text: str = ""
    args: list[str] = field(default_factory=list)
    used_prefix: str = "."

    @property
    def mimetype(self) -> str:
        return (getattr(self.message, "mimetype", None) or "") if self.message else ""
