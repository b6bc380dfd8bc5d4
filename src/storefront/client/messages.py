"""Localized user-facing messages for normalized HTTP errors.

``en`` is the fallback for unknown locales and for keys missing from a
locale. ``ru`` carries the storefront's customer-facing wording.
"""

from __future__ import annotations

DEFAULT_LOCALE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "bad_request": "Bad request",
        "unauthorized": "Authorization required",
        "forbidden": "Access denied",
        "not_found": "Resource not found",
        "too_many_requests": "Too many requests, try again later",
        "server_error": "Server error, try again later",
        "connection": "Could not connect to the server",
        "default": "Request failed",
    },
    "ru": {
        "bad_request": "Некорректный запрос",
        "unauthorized": "Требуется авторизация",
        "forbidden": "Доступ запрещён",
        "not_found": "Ресурс не найден",
        "too_many_requests": "Слишком много запросов, попробуйте позже",
        "server_error": "Ошибка сервера, попробуйте позже",
        "connection": "Не удалось подключиться к серверу",
        "default": "Произошла ошибка",
    },
}


def available_locales() -> list[str]:
    return sorted(MESSAGES)


def _language(locale: str) -> str:
    return locale.replace("_", "-").split("-", 1)[0].lower()


def is_supported_locale(locale: str) -> bool:
    """True if *locale* (region suffix allowed) has its own message table."""
    return bool(locale) and _language(locale) in available_locales()


def get_message(kind: str, locale: str = DEFAULT_LOCALE) -> str:
    """Return the message for *kind* in *locale*.

    Region suffixes are ignored (``ru-RU`` and ``ru_RU`` resolve to ``ru``).
    """
    lang = _language(locale) if locale else DEFAULT_LOCALE
    catalog = MESSAGES.get(lang, MESSAGES[DEFAULT_LOCALE])
    return catalog.get(kind, MESSAGES[DEFAULT_LOCALE][kind])
