"""Supported locales and normalization helpers."""

from __future__ import annotations

LOCALES: tuple[str, ...] = ("en", "es")
DEFAULT_LOCALE = "en"


def normalize_locale(value: str | None) -> str:
    """Return a bare lower-case language code, e.g. ``es-MX`` -> ``es``."""
    text = (value or "").strip().lower().replace("_", "-")
    if not text:
        return DEFAULT_LOCALE
    return text.split("-", 1)[0]


def is_default_locale(locale: str | None) -> bool:
    """Return whether a locale resolves to canonical content."""
    return normalize_locale(locale) == DEFAULT_LOCALE
