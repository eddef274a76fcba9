"""Outbound mail transports: SMTP by default, Resend's HTTP API when keyed."""
from __future__ import annotations

import logging
import smtplib
import uuid
from dataclasses import dataclass
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from typing import Protocol

import httpx

from core.config import Settings
from core.errors import NotifierError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
PLAIN_TEXT_FALLBACK = "Open this email in an HTML-capable email client."


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    to: str
    subject: str
    html: str
    text: str = PLAIN_TEXT_FALLBACK


class MailTransport(Protocol):
    def send(self, message: OutboundEmail) -> None: ...


def build_mime_message(message: OutboundEmail) -> MIMEMultipart:
    domain = message.sender.rsplit("@", 1)[-1].strip(">") or "localhost"
    mime = MIMEMultipart("alternative")
    mime["Subject"] = Header(message.subject, "utf-8")
    mime["From"] = message.sender
    mime["To"] = message.to
    mime["Message-ID"] = f"<{uuid.uuid4()}@{domain}>"
    mime["Date"] = formatdate(usegmt=True)
    mime.attach(MIMEText(message.text, "plain", _charset="utf-8"))
    mime.attach(MIMEText(message.html, "html", _charset="utf-8"))
    return mime


class SmtpTransport:
    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = True,
        timeout: float = 20.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def send(self, message: OutboundEmail) -> None:
        mime = build_mime_message(message)
        # Internationalized mailbox names need the server's SMTPUTF8 extension.
        needs_utf8 = not (message.sender + message.to).isascii()
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.starttls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                mail_options: list[str] = []
                if needs_utf8:
                    server.ehlo_or_helo_if_needed()
                    if not server.has_extn("smtputf8"):
                        raise NotifierError(f"SMTP server does not accept internationalized address {message.to}")
                    mail_options.append("SMTPUTF8")
                server.sendmail(message.sender, [message.to], mime.as_string(), mail_options=mail_options)
        except (smtplib.SMTPException, OSError, UnicodeError) as exc:
            raise NotifierError(f"SMTP send to {message.to} failed: {exc}") from exc


class ResendTransport:
    def __init__(self, api_key: str, timeout: float = 20.0, client: httpx.Client | None = None) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _post(self, client: httpx.Client, message: OutboundEmail) -> None:
        client.post(
            RESEND_API_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "from": message.sender,
                "to": [message.to],
                "subject": message.subject,
                "html": message.html,
                "text": message.text,
            },
        ).raise_for_status()

    def send(self, message: OutboundEmail) -> None:
        try:
            if self._client is not None:
                self._post(self._client, message)
                return
            with httpx.Client(timeout=self.timeout) as client:
                self._post(client, message)
        except httpx.HTTPError as exc:
            raise NotifierError(f"Resend send to {message.to} failed: {exc}") from exc


def build_transport(settings: Settings) -> MailTransport:
    if settings.resend_api_key:
        logger.info("Mail transport: Resend API")
        return ResendTransport(settings.resend_api_key, timeout=settings.mail_timeout_seconds)
    logger.info("Mail transport: SMTP %s:%s", settings.smtp_host, settings.smtp_port)
    return SmtpTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        starttls=settings.smtp_starttls,
        timeout=settings.mail_timeout_seconds,
    )
