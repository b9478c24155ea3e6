"""`editimg <prompt>` — edit a replied-to image with an AI prompt."""

from __future__ import annotations

import logging
import mimetypes

from mediabot.commands import register
from mediabot.host import CommandContext
from mediabot.services.providers import nanana_image
from mediabot.services.staging import staged_file

logger = logging.getLogger(__name__)

SUCCESS_CAPTION = "✨ Editing completed successfully!"


def guide(prefix: str = ".") -> str:
    return (
        "✨ *AI Image Editor Guide*\n"
        "\n"
        "This feature allows you to edit an image using AI.\n"
        "\n"
        "📌 How to use:\n"
        "1. Send or reply to an image\n"
        "2. Use command:\n"
        f"   {prefix}editimg <your prompt>\n"
        "\n"
        "Example:\n"
        f"{prefix}editimg turn this into anime style\n"
        "\n"
        "⚠️ You must reply to an image and provide a prompt."
    )


@register("editimg", help="editimg", tags=("editor",), limit=True)
async def handle(ctx: CommandContext) -> None:
    mime = ctx.mimetype
    if not mime.startswith("image/"):
        await ctx.chat.reply(guide(ctx.used_prefix))
        return

    prompt = ctx.text.strip()
    if not prompt:
        await ctx.chat.reply("❌ Please provide a prompt.")
        return

    await ctx.chat.react("⏳")

    try:
        data = await ctx.message.download()
        if not data:
            await ctx.chat.reply("❌ Failed to download image.")
            return

        suffix = mimetypes.guess_extension(mime) or ".jpg"
        with staged_file(data, suffix=suffix) as path:
            result = await nanana_image.edit_image(
                image_path=path, prompt=prompt, mimetype=mime,
            )

        await ctx.chat.send_media(result.image_url, caption=SUCCESS_CAPTION)
    except Exception as e:
        logger.exception("editimg failed")
        await ctx.chat.reply(f"❌ Failed to edit image: {e}")
