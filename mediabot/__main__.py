"""Console entry point — run plugin commands without a chat host.

    python -m mediabot editimg --image cat.png turn this into anime style
    python -m mediabot ytmp4 https://youtu.be/xxxxx 1080p
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
import sys

from mediabot.commands import dispatch
from mediabot.config import get_settings
from mediabot.host import CommandContext

logger = logging.getLogger("mediabot")


class ConsoleChat:
    """Chat that prints everything to stdout."""

    async def reply(self, text: str) -> None:
        print(text)

    async def react(self, emoji: str) -> None:
        print(emoji)

    async def send_media(self, url: str, *, caption: str, filename: str | None = None) -> None:
        print(caption)
        print(f"🔗 {url}" + (f"  ({filename})" if filename else ""))


class FileMessage:
    """Message backed by a local file; MIME type guessed from its name."""

    def __init__(self, path: str):
        self.path = path
        self.mimetype = mimetypes.guess_type(path)[0] or ""

    async def download(self) -> bytes | None:
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error("Cannot read %s: %s", self.path, e)
            return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mediabot", description="Run mediabot plugin commands")
    sub = parser.add_subparsers(dest="command", required=True)

    p_edit = sub.add_parser("editimg", help="Edit an image with an AI prompt")
    p_edit.add_argument("--image", help="Path to the image to edit")
    p_edit.add_argument("prompt", nargs="*", help="Edit prompt")

    p_yt = sub.add_parser("ytmp4", help="Convert a YouTube video to MP4")
    p_yt.add_argument("args", nargs="*", help="<url> [quality]")

    return parser


def build_context(ns: argparse.Namespace) -> CommandContext:
    chat = ConsoleChat()
    if ns.command == "editimg":
        message = FileMessage(ns.image) if ns.image else None
        return CommandContext(chat=chat, message=message, text=" ".join(ns.prompt), args=ns.prompt)
    return CommandContext(chat=chat, text=" ".join(ns.args), args=ns.args)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    ns = build_parser().parse_args(argv)
    asyncio.run(dispatch(ns.command, build_context(ns)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
