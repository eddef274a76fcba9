from __future__ import annotations

import html

import bleach


ALLOWED_TAGS: list[str] = []
ALLOWED_ATTRIBUTES: dict[str, list[str]] = {}


def sanitize_text(value: str) -> str:
    return bleach.clean(value, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True)


def clean_optional_text(value: object) -> str | None:
    """Trimmed plain text with markup stripped.

    Returns ``None`` when the value is absent and ``""`` when it is blank.
    Entities escaped by bleach are decoded again; templates escape on render.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return ""
    return html.unescape(sanitize_text(text)).strip()
