"""ytconvert.org YouTube-to-MP4 provider.

Flow per call:
  validate quality → oEmbed metadata → POST conversion (primary, then
  fallback host) → poll statusUrl → download URL
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from mediabot.config import get_settings
from mediabot.errors import (
    InvalidOptionError,
    MissingInputError,
    TransportFailureError,
    UpstreamFailureError,
)
from mediabot.services.job_poller import JobStatus, PollPolicy, poll_job
from mediabot.services.responses import json_object

logger = logging.getLogger(__name__)

QUALITIES = ("144p", "240p", "360p", "480p", "720p", "1080p")

_UNSAFE_FILENAME_RE = re.compile(r"[^\w\s-]")


@dataclass(frozen=True)
class VideoMeta:
    title: str
    author: str


@dataclass(frozen=True)
class VideoResult:
    title: str
    author: str
    quality: str
    download_url: str
    filename: str


def validate_quality(quality: str | None) -> str:
    """Return the effective quality or raise InvalidOptionError."""
    if quality is None:
        return get_settings().DEFAULT_QUALITY
    if quality not in QUALITIES:
        raise InvalidOptionError(f"Invalid quality. Choose: {', '.join(QUALITIES)}")
    return quality


def safe_filename(title: str, ext: str = "mp4") -> str:
    """'My Song! (ft. X)' -> 'My Song ft X.mp4'"""
    return f"{_UNSAFE_FILENAME_RE.sub('', title)}.{ext}"


def _headers() -> dict[str, str]:
    settings = get_settings()
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": settings.YT_USER_AGENT,
        "Referer": settings.YT_REFERER,
    }


async def fetch_metadata(client: httpx.AsyncClient, url: str) -> VideoMeta:
    resp = await client.get(
        get_settings().YT_OEMBED_URL,
        params={"url": url, "format": "json"},
    )
    resp.raise_for_status()
    meta = json_object(resp, "YouTube oEmbed")
    return VideoMeta(
        title=meta.get("title") or "video",
        author=meta.get("author_name") or "unknown",
    )


async def submit_conversion(client: httpx.AsyncClient, url: str, quality: str) -> str:
    """POST the conversion job and return its status URL.

    Tries the primary host once, then the fallback host once.
    """
    settings = get_settings()
    payload = {
        "url": url,
        "os": "android",
        "output": {"type": "video", "format": "mp4", "quality": quality},
    }

    try:
        resp = await client.post(settings.YT_CONVERT_URL, json=payload, headers=_headers())
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("ytconvert primary host failed (%s), trying fallback", e)
        try:
            resp = await client.post(
                settings.YT_CONVERT_FALLBACK_URL, json=payload, headers=_headers(),
            )
            resp.raise_for_status()
        except httpx.HTTPError as fb_err:
            raise TransportFailureError(f"Converter unreachable: {fb_err}") from fb_err

    status_url = json_object(resp, "Converter").get("statusUrl")
    if not status_url:
        raise UpstreamFailureError("Converter failed to respond")
    return status_url


def parse_conversion_status(body: dict[str, Any]) -> JobStatus:
    status = body.get("status")
    if status == "completed":
        return JobStatus.completed(body)
    if status == "failed":
        return JobStatus.failed(body.get("message") or "Conversion failed")
    return JobStatus.pending(body)


async def check_conversion(client: httpx.AsyncClient, status_url: str) -> JobStatus:
    resp = await client.get(status_url, headers=_headers())
    resp.raise_for_status()
    return parse_conversion_status(json_object(resp, "Converter status"))


def default_poll_policy() -> PollPolicy:
    settings = get_settings()
    return PollPolicy(
        interval=settings.YT_POLL_INTERVAL,
        max_attempts=settings.YT_MAX_ATTEMPTS,
        backoff=settings.POLL_BACKOFF,
        max_interval=settings.POLL_MAX_INTERVAL,
        deadline=settings.YT_POLL_TIMEOUT,
    )


async def convert_video(
    url: str,
    quality: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    poll_policy: PollPolicy | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> VideoResult:
    """Convert a YouTube URL to MP4 and return the download link."""
    if not url:
        raise MissingInputError("video url is required")
    quality = validate_quality(quality)

    client = http_client or httpx.AsyncClient(timeout=get_settings().HTTP_TIMEOUT)
    own_client = http_client is None

    try:
        meta = await fetch_metadata(client, url)
        status_url = await submit_conversion(client, url, quality)
        logger.info("ytconvert job created: %s (quality=%s)", status_url, quality)

        body = await poll_job(
            lambda: check_conversion(client, status_url),
            poll_policy or default_poll_policy(),
            label="ytconvert conversion",
            sleep=sleep,
        )

        download_url = body.get("downloadUrl")
        if not download_url:
            raise UpstreamFailureError("Conversion completed but no download URL")

        return VideoResult(
            title=meta.title,
            author=meta.author,
            quality=quality,
            download_url=download_url,
            filename=safe_filename(meta.title),
        )
    finally:
        if own_client:
            await client.aclose()
