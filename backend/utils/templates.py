"""Jinja2 rendering of email bodies and the admin dashboard.

Each renderer takes a typed context record and returns HTML. Autoescaping is
on for every template, so stored values are never injected as markup.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field

from jinja2 import Environment, FileSystemLoader, select_autoescape

_templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
_jinja_env = Environment(
    loader=FileSystemLoader(_templates_dir),
    autoescape=select_autoescape(["html", "xml"]),
)

ROLE_COPY = {
    "buyer": (
        "As a property buyer, you'll get early access to verified listings and smart search "
        "features to find your perfect home."
    ),
    "seller": (
        "As a property seller, you'll be first to list on our platform with our verified listing "
        "system and market intelligence tools."
    ),
    "investor": (
        "As a property investor, you'll get access to market analytics and investment "
        "opportunities across African real estate markets."
    ),
}


@dataclass(frozen=True)
class WelcomeEmailContext:
    brand_name: str
    role: str | None = None

    @property
    def role_display(self) -> str:
        return self.role.capitalize() if self.role else ""

    @property
    def role_copy(self) -> str | None:
        return ROLE_COPY.get(self.role or "")


@dataclass(frozen=True)
class LaunchEmailContext:
    brand_name: str
    app_url: str


@dataclass(frozen=True)
class DashboardRow:
    position: int
    full_name: str
    email: str
    phone: str
    role: str
    role_display: str
    date: str
    time: str


@dataclass(frozen=True)
class AdminDashboardContext:
    brand_name: str
    rows: list[DashboardRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.rows)


def render_template(template_name: str, **context) -> str:
    return _jinja_env.get_template(template_name).render(**context)


def render_welcome_email(context: WelcomeEmailContext) -> str:
    return render_template(
        "welcome_email.html",
        brand_name=context.brand_name,
        role=context.role,
        role_display=context.role_display,
        role_copy=context.role_copy,
    )


def render_launch_email(context: LaunchEmailContext) -> str:
    return render_template("launch_email.html", **asdict(context))


def render_admin_dashboard(context: AdminDashboardContext) -> str:
    return render_template(
        "admin_dashboard.html",
        brand_name=context.brand_name,
        rows=context.rows,
        total=context.total,
    )
