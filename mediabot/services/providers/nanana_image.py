"""nanana.app image-to-image provider.

Flow per call:
  OTP sign-in via disposable mailbox → upload image → POST create job →
  poll get-result → first result image URL
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import os
import secrets
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from mediabot.config import get_settings
from mediabot.errors import MissingInputError, UpstreamFailureError
from mediabot.services.job_poller import JobStatus, PollPolicy, poll_job
from mediabot.services.mailbox import AkunlamaMailbox, Mailbox
from mediabot.services.responses import json_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Auth state for one flow invocation."""
    cookie: str
    fingerprint: str

    def headers(self) -> dict[str, str]:
        return {**base_headers(), "Cookie": self.cookie, "x-fp-id": self.fingerprint}


@dataclass(frozen=True)
class EditResult:
    job_id: str
    image_url: str


def base_headers() -> dict[str, str]:
    settings = get_settings()
    return {
        "User-Agent": settings.NANANA_USER_AGENT,
        "Accept-Language": settings.NANANA_ACCEPT_LANGUAGE,
        "Origin": settings.NANANA_BASE_URL,
        "Referer": f"{settings.NANANA_BASE_URL}/en",
    }


def generate_fingerprint() -> str:
    """Opaque x-fp-id token: base64 of two random hex strings joined by a dot."""
    raw = f"{secrets.token_hex(16)}.{secrets.token_hex(32)}"
    return base64.b64encode(raw.encode()).decode()


def _api(path: str) -> str:
    return f"{get_settings().NANANA_BASE_URL}{path}"


async def authenticate(client: httpx.AsyncClient, mailbox: Mailbox) -> Session:
    """Sign in with a fresh disposable address and return its Session."""
    email = mailbox.new_address()

    resp = await client.post(
        _api("/api/auth/email-otp/send-verification-otp"),
        json={"email": email, "type": "sign-in"},
        headers=base_headers(),
    )
    resp.raise_for_status()
    logger.info("nanana OTP requested for %s", email)

    otp = await mailbox.request_code(email)

    signin = await client.post(
        _api("/api/auth/sign-in/email-otp"),
        json={"email": email, "otp": otp},
        headers=base_headers(),
    )
    signin.raise_for_status()

    cookies = signin.headers.get_list("set-cookie")
    cookie = "; ".join(c.split(";", 1)[0].strip() for c in cookies)
    return Session(cookie=cookie, fingerprint=generate_fingerprint())


async def upload_image(
    client: httpx.AsyncClient,
    image_path: str,
    session: Session,
    mimetype: str | None = None,
) -> str:
    content_type = mimetype or mimetypes.guess_type(image_path)[0] or "image/jpeg"
    with open(image_path, "rb") as f:
        resp = await client.post(
            _api("/api/upload-img"),
            files={"image": (os.path.basename(image_path), f, content_type)},
            headers=session.headers(),
        )
    resp.raise_for_status()

    url = json_object(resp, "nanana upload").get("url")
    if not url:
        raise UpstreamFailureError("nanana upload returned no url")
    return url


async def create_job(
    client: httpx.AsyncClient, image_url: str, prompt: str, session: Session,
) -> str:
    resp = await client.post(
        _api("/api/image-to-image"),
        json={"prompt": prompt, "image_urls": [image_url]},
        headers=session.headers(),
    )
    resp.raise_for_status()

    request_id = json_object(resp, "nanana job creation").get("request_id")
    if not request_id:
        raise UpstreamFailureError("nanana: no request_id")
    return request_id


def parse_job_status(body: dict[str, Any]) -> JobStatus:
    if body.get("completed"):
        return JobStatus.completed(body)
    if body.get("status") in ("failed", "error") or body.get("error"):
        return JobStatus.failed(str(body.get("message") or body.get("error") or "Image edit failed"))
    return JobStatus.pending(body)


async def check_job(client: httpx.AsyncClient, job_id: str, session: Session) -> JobStatus:
    resp = await client.post(
        _api("/api/get-result"),
        json={"requestId": job_id, "type": "image-to-image"},
        headers=session.headers(),
    )
    resp.raise_for_status()
    return parse_job_status(json_object(resp, "nanana job status"))


def extract_result(job_id: str, body: dict[str, Any]) -> EditResult:
    data = body.get("data")
    images = data.get("images") if isinstance(data, dict) else None
    if not isinstance(images, list) or not images or not isinstance(images[0], dict) \
            or not images[0].get("url"):
        raise UpstreamFailureError("No image result found")
    return EditResult(job_id=job_id, image_url=images[0]["url"])


def default_poll_policy() -> PollPolicy:
    settings = get_settings()
    return PollPolicy(
        interval=settings.EDIT_POLL_INTERVAL,
        max_attempts=settings.EDIT_MAX_ATTEMPTS,
        backoff=settings.POLL_BACKOFF,
        max_interval=settings.POLL_MAX_INTERVAL,
        deadline=settings.EDIT_POLL_TIMEOUT,
        delay_first=True,
    )


async def edit_image(
    *,
    image_path: str,
    prompt: str,
    mimetype: str | None = None,
    mailbox: Mailbox | None = None,
    http_client: httpx.AsyncClient | None = None,
    poll_policy: PollPolicy | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> EditResult:
    """Edit the image at `image_path` according to `prompt`.

    Returns EditResult with the job id and the edited image URL.
    """
    if not prompt:
        raise MissingInputError("prompt is required")

    client = http_client or httpx.AsyncClient(timeout=get_settings().HTTP_TIMEOUT)
    own_client = http_client is None

    try:
        session = await authenticate(client, mailbox or AkunlamaMailbox(client, sleep=sleep))
        uploaded = await upload_image(client, image_path, session, mimetype)
        job_id = await create_job(client, uploaded, prompt, session)
        logger.info("nanana job created: %s", job_id)

        body = await poll_job(
            lambda: check_job(client, job_id, session),
            poll_policy or default_poll_policy(),
            label=f"nanana job {job_id}",
            sleep=sleep,
        )
        return extract_result(job_id, body)
    finally:
        if own_client:
            await client.aclose()
