"""Disposable mailbox used to receive one-time sign-in codes.

The image-edit flow only needs `Mailbox.new_address()` and
`Mailbox.request_code()`; `AkunlamaMailbox` is the akunlama.com scraper.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
from typing import Any, Awaitable, Callable, Protocol

import httpx
from bs4 import BeautifulSoup

from mediabot.config import get_settings
from mediabot.errors import UpstreamFailureError
from mediabot.services.job_poller import JobStatus, PollPolicy, poll_job
from mediabot.services.responses import json_payload

logger = logging.getLogger(__name__)

_OTP_RE = re.compile(r"\b\d{6}\b")


class Mailbox(Protocol):
    def new_address(self) -> str:
        ...

    async def request_code(self, address: str) -> str:
        ...


def extract_otp(text: str) -> str:
    """Return the first standalone 6-digit code in `text`."""
    match = _OTP_RE.search(text)
    if not match:
        raise UpstreamFailureError("OTP not found")
    return match.group(0)


def html_to_text(html: str) -> str:
    """Strip markup (scripts and styles included) and collapse whitespace."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    root = soup.body or soup
    return " ".join(root.get_text(" ").split())


class AkunlamaMailbox:
    """akunlama.com disposable inbox."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str | None = None,
        domain: str | None = None,
        policy: PollPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        settings = get_settings()
        self.client = client
        self.base_url = (base_url or settings.MAILBOX_BASE_URL).rstrip("/")
        self.domain = domain or settings.MAILBOX_DOMAIN
        self.policy = policy or PollPolicy(
            interval=settings.OTP_POLL_INTERVAL,
            max_attempts=settings.OTP_MAX_ATTEMPTS,
            backoff=settings.POLL_BACKOFF,
            max_interval=settings.POLL_MAX_INTERVAL,
            deadline=settings.OTP_POLL_TIMEOUT,
        )
        self._sleep = sleep

    def new_address(self) -> str:
        return f"{secrets.token_hex(6)}@{self.domain}"

    async def inbox(self, recipient: str) -> list[dict[str, Any]]:
        resp = await self.client.get(
            f"{self.base_url}/api/v1/mail/list",
            params={"recipient": recipient},
        )
        resp.raise_for_status()
        data = json_payload(resp, "mailbox inbox")
        return data if isinstance(data, list) else []

    async def get_text(self, region: str, key: str) -> str:
        resp = await self.client.get(
            f"{self.base_url}/api/v1/mail/getHtml",
            params={"region": region, "key": key},
        )
        resp.raise_for_status()
        return html_to_text(resp.text)

    async def request_code(self, address: str) -> str:
        recipient = address.split("@", 1)[0]

        async def check() -> JobStatus:
            mails = await self.inbox(recipient)
            if mails:
                return JobStatus.completed(mails[0])
            return JobStatus.pending()

        mail = await poll_job(check, self.policy, label="OTP", sleep=self._sleep)

        storage = mail.get("storage") if isinstance(mail, dict) else None
        if not isinstance(storage, dict) or not storage.get("key") or not storage.get("region"):
            raise UpstreamFailureError("OTP mail has no storage reference")

        text = await self.get_text(storage["region"], storage["key"])
        code = extract_otp(text)
        logger.info("OTP received for %s", recipient)
        return code
