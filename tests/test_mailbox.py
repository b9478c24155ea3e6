import asyncio

import httpx
import pytest

from conftest import RecordingTransport
from mediabot.config import get_settings
from mediabot.errors import UpstreamFailureError, UpstreamTimeoutError
from mediabot.services.job_poller import PollPolicy
from mediabot.services.mailbox import AkunlamaMailbox, extract_otp, html_to_text

MAIL_HTML = """
<html><head><style>.code { color: red; }</style></head>
<body>
  <script>var trackingId = 999999;</script>
  <p>Your sign-in code is</p>
  <p class="code"><b>482913</b></p>
</body></html>
"""


def _mailbox(handler, clock, **kwargs):
    transport = RecordingTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    return AkunlamaMailbox(client, sleep=clock.sleep, **kwargs), transport


def test_html_to_text_drops_scripts_and_styles():
    text = html_to_text(MAIL_HTML)
    assert text == "Your sign-in code is 482913"


def test_extract_otp_ignores_longer_numbers():
    assert extract_otp("Order 1234567 confirmed, code 654321.") == "654321"


def test_extract_otp_missing():
    with pytest.raises(UpstreamFailureError, match="OTP not found"):
        extract_otp("no digits here")


def test_new_address_uses_fixed_domain(clock):
    mailbox, _ = _mailbox(lambda r: httpx.Response(200, json=[]), clock)
    a, b = mailbox.new_address(), mailbox.new_address()
    assert a.endswith("@akunlama.com")
    assert len(a.split("@")[0]) == 12
    assert a != b


def test_request_code_polls_until_mail_arrives(clock):
    inbox_calls = []

    def handler(request):
        if request.url.path == "/api/v1/mail/list":
            inbox_calls.append(request.url.params["recipient"])
            if len(inbox_calls) < 3:
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=[{"storage": {"key": "k1", "region": "us-east"}}])
        if request.url.path == "/api/v1/mail/getHtml":
            assert request.url.params["key"] == "k1"
            assert request.url.params["region"] == "us-east"
            return httpx.Response(200, text=MAIL_HTML)
        return httpx.Response(404)

    mailbox, _ = _mailbox(handler, clock)
    code = asyncio.run(mailbox.request_code("deadbeef0001@akunlama.com"))

    assert code == "482913"
    assert inbox_calls == ["deadbeef0001"] * 3
    assert clock.sleeps == [3.0, 3.0]


def test_request_code_times_out(clock):
    def handler(request):
        return httpx.Response(200, json={"error": "not a list"})

    policy = PollPolicy(interval=3, max_attempts=4)
    mailbox, transport = _mailbox(handler, clock, policy=policy)

    with pytest.raises(UpstreamTimeoutError):
        asyncio.run(mailbox.request_code("abc@akunlama.com"))

    assert transport.paths() == ["/api/v1/mail/list"] * 4


def test_request_code_without_code_in_body(clock):
    def handler(request):
        if request.url.path == "/api/v1/mail/list":
            return httpx.Response(200, json=[{"storage": {"key": "k", "region": "r"}}])
        return httpx.Response(200, text="<body>Welcome aboard!</body>")

    mailbox, _ = _mailbox(handler, clock)

    with pytest.raises(UpstreamFailureError, match="OTP not found"):
        asyncio.run(mailbox.request_code("abc@akunlama.com"))


@pytest.mark.parametrize("inbox", [
    ["not-an-object"],
    [{"storage": "k1/us-east"}],
    [{"storage": {"key": "k1"}}],
])
def test_request_code_rejects_malformed_mail_entry(inbox, clock):
    mailbox, transport = _mailbox(lambda r: httpx.Response(200, json=inbox), clock)

    with pytest.raises(UpstreamFailureError, match="no storage reference"):
        asyncio.run(mailbox.request_code("abc@akunlama.com"))

    assert transport.paths() == ["/api/v1/mail/list"]


def test_non_json_inbox_is_upstream_failure(clock):
    mailbox, _ = _mailbox(lambda r: httpx.Response(200, text="<html>rate limited</html>"), clock)

    with pytest.raises(UpstreamFailureError, match="mailbox inbox: malformed response"):
        asyncio.run(mailbox.request_code("abc@akunlama.com"))


@pytest.fixture
def backoff_settings(monkeypatch):
    monkeypatch.setenv("POLL_BACKOFF", "2.0")
    monkeypatch.setenv("POLL_MAX_INTERVAL", "10")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_default_otp_policy_follows_backoff_settings(backoff_settings, clock):
    mailbox, _ = _mailbox(lambda r: httpx.Response(200, json=[]), clock)

    assert mailbox.policy.backoff == 2.0
    assert mailbox.policy.max_interval == 10.0

    with pytest.raises(UpstreamTimeoutError):
        asyncio.run(mailbox.request_code("abc@akunlama.com"))

    assert clock.sleeps[:4] == [3.0, 6.0, 10.0, 10.0]
