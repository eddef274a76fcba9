"""Welcome and launch emails for waitlist members.

One send attempt per call. Failures surface as ``NotifierError``; callers
decide whether to log, count or retry.
"""
from __future__ import annotations

from functools import lru_cache

from core.config import get_settings
from services.mail_transport import MailTransport, OutboundEmail, build_transport
from utils.templates import (
    LaunchEmailContext,
    WelcomeEmailContext,
    render_launch_email,
    render_welcome_email,
)


class Notifier:
    def __init__(self, transport: MailTransport, from_address: str, brand_name: str = "Hanti", app_url: str = "") -> None:
        self.transport = transport
        self.from_address = from_address
        self.brand_name = brand_name
        self.app_url = app_url

    def send_welcome(self, email: str, role: str | None) -> None:
        html = render_welcome_email(WelcomeEmailContext(brand_name=self.brand_name, role=role))
        self.transport.send(
            OutboundEmail(
                sender=self.from_address,
                to=email,
                subject=f"Welcome to {self.brand_name} Waitlist! 🏠",
                html=html,
            )
        )

    def send_launch(self, email: str) -> None:
        html = render_launch_email(LaunchEmailContext(brand_name=self.brand_name, app_url=self.app_url))
        self.transport.send(
            OutboundEmail(
                sender=self.from_address,
                to=email,
                subject=f"🎉 {self.brand_name} is Now Live - Your Early Access is Ready!",
                html=html,
            )
        )


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    settings = get_settings()
    return Notifier(
        transport=build_transport(settings),
        from_address=settings.from_email,
        brand_name=settings.brand_name,
        app_url=settings.app_url,
    )
