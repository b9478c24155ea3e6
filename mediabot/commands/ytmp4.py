"""`ytmp4 <url> [quality]` — convert a YouTube video to MP4."""

from __future__ import annotations

import logging

from mediabot.commands import register
from mediabot.host import CommandContext
from mediabot.services.providers import ytconvert_video
from mediabot.services.providers.ytconvert_video import QUALITIES, VideoResult

logger = logging.getLogger(__name__)


def usage(prefix: str = ".") -> str:
    return (
        "🎬 *YouTube MP4 Downloader*\n"
        "\n"
        "Usage:\n"
        f"{prefix}ytmp4 <youtube url> [quality]\n"
        "\n"
        "Available quality:\n"
        f"{', '.join(QUALITIES)}\n"
        "\n"
        "Example:\n"
        f"{prefix}ytmp4 https://youtu.be/xxxxx 720p"
    )


def caption(result: VideoResult) -> str:
    return (
        "🎬 *YouTube MP4 Download*\n"
        "\n"
        f"📌 Title: {result.title}\n"
        f"📺 Channel: {result.author}\n"
        f"🎞 Quality: {result.quality}\n"
        "\n"
        "Enjoy your video!"
    )


@register("ytmp4", help="ytmp4", tags=("downloader",), limit=True)
async def handle(ctx: CommandContext) -> None:
    if not ctx.args:
        await ctx.chat.reply(usage(ctx.used_prefix))
        return

    try:
        url = ctx.args[0]
        quality = ytconvert_video.validate_quality(ctx.args[1] if len(ctx.args) > 1 else None)

        await ctx.chat.reply("⏳ Processing video, please wait...")

        result = await ytconvert_video.convert_video(url, quality)
        await ctx.chat.send_media(
            result.download_url,
            caption=caption(result),
            filename=result.filename,
        )
    except Exception as e:
        logger.exception("ytmp4 failed for %s", ctx.args[0])
        await ctx.chat.reply(f"❌ Error: {e}")
