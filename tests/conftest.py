"""Pytest configuration helpers.

Puts the project root on `sys.path` so tests can import the `mediabot`
package however pytest is invoked, and provides fakes for the chat host,
the HTTP transport and the clock.
"""
import json
import os
import sys

import httpx
import pytest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


class FakeClock:
    """Monotonic clock that only advances when `sleep` is awaited."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, delay):
        self.sleeps.append(delay)
        self.now += delay


class FakeChat:
    def __init__(self):
        self.replies = []
        self.reactions = []
        self.media = []

    async def reply(self, text):
        self.replies.append(text)

    async def react(self, emoji):
        self.reactions.append(emoji)

    async def send_media(self, url, *, caption, filename=None):
        self.media.append({"url": url, "caption": caption, "filename": filename})


class FakeMessage:
    def __init__(self, mimetype, data=b"\x89PNG fake"):
        self.mimetype = mimetype
        self.data = data

    async def download(self):
        return self.data


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _handler(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    def paths(self):
        return [r.url.path for r in self.requests]


def json_body(request):
    return json.loads(request.content)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def chat():
    return FakeChat()
