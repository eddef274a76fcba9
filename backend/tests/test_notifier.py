from __future__ import annotations

import email
import smtplib
from email import policy

import httpx
import pytest

from core.config import Settings
from core.errors import NotifierError
from services import mail_transport
from services.mail_transport import OutboundEmail, ResendTransport, SmtpTransport, build_transport
from utils.templates import (
    AdminDashboardContext,
    DashboardRow,
    WelcomeEmailContext,
    render_admin_dashboard,
    render_welcome_email,
)

MESSAGE = OutboundEmail(sender="noreply@hanti.com", to="user@example.com", subject="Hello", html="<p>Hi</p>")


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_on_send = False
    extensions: set[str] = set()

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls: list[tuple] = []
        self.mail_options: list[str] = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.calls.append(("starttls",))

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def ehlo_or_helo_if_needed(self):
        pass

    def has_extn(self, name):
        return name.lower() in FakeSMTP.extensions

    def sendmail(self, sender, recipients, body, mail_options=()):
        if FakeSMTP.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({recipients[0]: (550, b"no such user")})
        if "SMTPUTF8" not in mail_options:
            # Mirrors smtplib, which encodes envelope commands as ASCII.
            for address in [sender, *recipients]:
                address.encode("ascii")
        self.mail_options = list(mail_options)
        self.calls.append(("sendmail", sender, recipients, body))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_on_send = False
    FakeSMTP.extensions = set()
    monkeypatch.setattr(mail_transport.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_welcome_email_has_role_specific_copy():
    buyer = render_welcome_email(WelcomeEmailContext(brand_name="Hanti", role="buyer"))
    investor = render_welcome_email(WelcomeEmailContext(brand_name="Hanti", role="investor"))

    assert "As a property buyer" in buyer
    assert "As a property investor" not in buyer
    assert "market analytics and investment" in investor
    assert '<span class="role-badge">Investor</span>' in investor


def test_welcome_email_without_role_omits_tailored_section():
    html = render_welcome_email(WelcomeEmailContext(brand_name="Hanti"))

    assert "Tailored for You" not in html
    assert "role-badge\">" not in html


def test_dashboard_escapes_stored_values():
    row = DashboardRow(
        position=1,
        full_name="<script>alert(1)</script>",
        email="x@example.com",
        phone="N/A",
        role="buyer",
        role_display="Buyer",
        date="Oct 19, 2026",
        time="9:00:00 AM",
    )

    html = render_admin_dashboard(AdminDashboardContext(brand_name="Hanti", rows=[row]))

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_launch_email_links_to_app(notifier, transport):
    notifier.send_launch("user@example.com")

    (message,) = transport.sent
    assert message.subject == "🎉 Hanti is Now Live - Your Early Access is Ready!"
    assert 'href="https://hanti.com/app"' in message.html
    assert message.sender == "noreply@hanti.com"


def test_smtp_transport_logs_in_and_sends(fake_smtp):
    transport = SmtpTransport("smtp.example.com", 587, username="mailer", password="secret")

    transport.send(MESSAGE)

    (server,) = fake_smtp.instances
    assert (server.host, server.port) == ("smtp.example.com", 587)
    assert server.calls[0] == ("starttls",)
    assert server.calls[1] == ("login", "mailer", "secret")
    _, sender, recipients, body = server.calls[2]
    assert sender == "noreply@hanti.com"
    assert recipients == ["user@example.com"]
    parsed = email.message_from_string(body, policy=policy.default)
    assert parsed["Subject"] == "Hello"
    assert "<p>Hi</p>" in parsed.get_body(preferencelist=("html",)).get_content()


def test_smtp_message_is_ascii_safe_with_emoji_subject(fake_smtp):
    message = OutboundEmail(sender="noreply@hanti.com", to="user@example.com", subject="Welcome! 🏠", html="<p>🏠</p>")

    SmtpTransport("smtp.example.com", 587).send(message)

    body = fake_smtp.instances[0].calls[-1][3]
    assert body.isascii()
    assert email.message_from_string(body, policy=policy.default)["Subject"] == "Welcome! 🏠"


def test_smtp_transport_skips_login_without_credentials(fake_smtp):
    SmtpTransport("localhost", 1025, starttls=False).send(MESSAGE)

    (server,) = fake_smtp.instances
    assert [call[0] for call in server.calls] == ["sendmail"]


def test_smtp_failure_raises_notifier_error(fake_smtp):
    fake_smtp.fail_on_send = True

    with pytest.raises(NotifierError):
        SmtpTransport("smtp.example.com", 587).send(MESSAGE)


def test_resend_transport_posts_message():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    ResendTransport("re_test", client=client).send(MESSAGE)

    (request,) = seen
    assert str(request.url) == "https://api.resend.com/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    assert b'"to":["user@example.com"]' in request.content.replace(b" ", b"")


def test_resend_error_raises_notifier_error():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))

    with pytest.raises(NotifierError):
        ResendTransport("re_test", client=client).send(MESSAGE)


def test_build_transport_prefers_resend_when_keyed():
    keyed = Settings(_env_file=None, RESEND_API_KEY="re_test")
    plain = Settings(_env_file=None, RESEND_API_KEY=None, SMTP_HOST="mail.example.com", SMTP_PORT=2525)

    assert isinstance(build_transport(keyed), ResendTransport)
    smtp = build_transport(plain)
    assert isinstance(smtp, SmtpTransport)
    assert (smtp.host, smtp.port) == ("mail.example.com", 2525)


def test_smtp_internationalized_address_without_smtputf8_raises_notifier_error(fake_smtp):
    message = OutboundEmail(sender="noreply@hanti.com", to="josé@example.com", subject="Hello", html="<p>Hi</p>")

    with pytest.raises(NotifierError):
        SmtpTransport("smtp.example.com", 587).send(message)
    assert [call[0] for call in fake_smtp.instances[0].calls] == ["starttls"]


def test_smtp_internationalized_address_uses_smtputf8(fake_smtp):
    fake_smtp.extensions = {"smtputf8"}
    message = OutboundEmail(sender="noreply@hanti.com", to="josé@example.com", subject="Hello", html="<p>Hi</p>")

    SmtpTransport("smtp.example.com", 587).send(message)

    (server,) = fake_smtp.instances
    assert server.mail_options == ["SMTPUTF8"]
    assert server.calls[-1][2] == ["josé@example.com"]


def test_smtp_encoding_errors_raise_notifier_error(monkeypatch):
    class AsciiOnlySMTP(FakeSMTP):
        def sendmail(self, sender, recipients, body, mail_options=()):
            raise UnicodeEncodeError("ascii", "é", 0, 1, "ordinal not in range(128)")

    monkeypatch.setattr(mail_transport.smtplib, "SMTP", AsciiOnlySMTP)

    with pytest.raises(NotifierError):
        SmtpTransport("smtp.example.com", 587).send(MESSAGE)
