"""Tests for HTTP error normalization."""

from __future__ import annotations

import json

import httpx
import pytest

from storefront.client.errors import (
    anormalize_response,
    araise_for_status,
    connection_error,
    error_class_for_status,
    message_from_body,
    normalize_error,
    normalize_response,
    raise_for_status,
    status_message,
)
from storefront.client.messages import available_locales, get_message, is_supported_locale
from storefront.exceptions import (
    AuthError,
    BadRequestError,
    ConnectionError_,
    HTTPError,
    NormalizedHttpError,
    NotFoundError,
    RateLimitError,
    ServerError,
)
from storefront.exit_codes import EXIT_AUTH_FAILURE, EXIT_NOT_FOUND, EXIT_SERVER_ERROR


def _response(status_code: int, content: bytes = b"", headers: dict | None = None) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=content,
        headers=headers or {},
        request=httpx.Request("GET", "https://shop.example.com/api/products"),
    )


# ------------------------------------------------------------------ #
# Core scenarios
# ------------------------------------------------------------------ #


class TestNormalizeError:
    def test_json_message_used_verbatim(self) -> None:
        err = normalize_error(400, '{"message":"Custom failure"}')
        assert err.message == "Custom failure"
        assert err.status == 400

    def test_empty_body_401(self) -> None:
        err = normalize_error(401, "")
        assert err.message == "Authorization required"
        assert err.status == 401

    def test_malformed_body_500(self) -> None:
        err = normalize_error(500, "<html><body>Bad Gateway</body></html>")
        assert err.message == "Server error, try again later"
        assert err.status == 500

    def test_empty_body_404(self) -> None:
        err = normalize_error(404, None)
        assert err.message == "Resource not found"

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (400, "Bad request"),
            (401, "Authorization required"),
            (403, "Access denied"),
            (404, "Resource not found"),
            (429, "Too many requests, try again later"),
            (500, "Server error, try again later"),
            (502, "Server error, try again later"),
            (503, "Server error, try again later"),
            (409, "Request failed"),
            (418, "Request failed"),
        ],
    )
    def test_status_mapping(self, status: int, expected: str) -> None:
        assert normalize_error(status, "").message == expected

    def test_unknown_status_none(self) -> None:
        err = normalize_error(None, "")
        assert err.message == "Request failed"
        assert err.status is None
        assert type(err) is HTTPError

    def test_message_preserved_for_server_errors(self) -> None:
        body = json.dumps({"success": False, "message": "Товар не найден"})
        err = normalize_error(404, body)
        assert err.message == "Товар не найден"
        assert isinstance(err, NotFoundError)

    def test_bytes_body(self) -> None:
        err = normalize_error(400, '{"message": "Неверный email"}'.encode())
        assert err.message == "Неверный email"

    def test_invalid_utf8_bytes_fall_back(self) -> None:
        err = normalize_error(500, b"\xff\xfe\x00garbage")
        assert err.message == "Server error, try again later"

    def test_result_is_the_normalized_error_type(self) -> None:
        assert isinstance(normalize_error(500, ""), NormalizedHttpError)


class TestMessageFromBody:
    @pytest.mark.parametrize(
        "body",
        [
            "",
            "   \n",
            "not json",
            "[1, 2, 3]",
            '"just a string"',
            "null",
            '{"error": "something"}',
            '{"message": ""}',
            '{"message": "   "}',
            '{"message": null}',
            '{"message": {"nested": true}}',
            '{"message": ["a", "b"]}',
        ],
    )
    def test_no_usable_message(self, body: str) -> None:
        assert message_from_body(body) is None

    def test_non_string_scalar_message_is_stringified(self) -> None:
        assert message_from_body('{"message": 42}') == "42"

    def test_deeply_nested_json_does_not_raise(self) -> None:
        body = "[" * 100_000 + "]" * 100_000
        assert message_from_body(body) is None


# ------------------------------------------------------------------ #
# Error classes
# ------------------------------------------------------------------ #


class TestErrorClasses:
    @pytest.mark.parametrize(
        ("status", "cls"),
        [
            (400, BadRequestError),
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (429, RateLimitError),
            (500, ServerError),
            (504, ServerError),
            (422, HTTPError),
        ],
    )
    def test_class_for_status(self, status: int, cls: type) -> None:
        assert error_class_for_status(status) is cls
        assert type(normalize_error(status, "")) is cls

    def test_exit_codes(self) -> None:
        assert normalize_error(401, "").exit_code == EXIT_AUTH_FAILURE
        assert normalize_error(404, "").exit_code == EXIT_NOT_FOUND
        assert normalize_error(503, "").exit_code == EXIT_SERVER_ERROR

    def test_to_dict(self) -> None:
        err = normalize_error(403, "")
        assert err.to_dict() == {"message": "Access denied", "status": 403}

    def test_str_is_message(self) -> None:
        assert str(normalize_error(404, "")) == "Resource not found"

    def test_connection_error(self) -> None:
        err = connection_error()
        assert isinstance(err, ConnectionError_)
        assert err.status is None
        assert err.message == "Could not connect to the server"


# ------------------------------------------------------------------ #
# Localization
# ------------------------------------------------------------------ #


class TestLocales:
    def test_available(self) -> None:
        assert available_locales() == ["en", "ru"]

    @pytest.mark.parametrize(
        ("locale", "supported"),
        [("en", True), ("ru_RU", True), ("EN-gb", True), ("de", False), ("", False)],
    )
    def test_is_supported_locale(self, locale: str, supported: bool) -> None:
        assert is_supported_locale(locale) is supported

    @pytest.mark.parametrize("locale", ["ru", "ru-RU", "ru_RU", "RU"])
    def test_russian_messages(self, locale: str) -> None:
        assert normalize_error(401, "", locale).message == "Требуется авторизация"
        assert status_message(500, locale) == "Ошибка сервера, попробуйте позже"

    def test_unknown_locale_falls_back_to_english(self) -> None:
        assert normalize_error(404, "", "de").message == "Resource not found"

    def test_empty_locale_falls_back_to_english(self) -> None:
        assert get_message("forbidden", "") == "Access denied"

    def test_body_message_is_not_translated(self) -> None:
        assert normalize_error(400, '{"message":"Custom failure"}', "ru").message == "Custom failure"


# ------------------------------------------------------------------ #
# httpx helpers
# ------------------------------------------------------------------ #


class TestNormalizeResponse:
    def test_json_body(self) -> None:
        resp = _response(400, b'{"message": "Promo code expired"}')
        err = normalize_response(resp)
        assert err.message == "Promo code expired"
        assert err.status == 400

    def test_empty_body(self) -> None:
        err = normalize_response(_response(401))
        assert err.message == "Authorization required"

    def test_unreadable_stream_falls_back_to_status(self) -> None:
        class _Broken(httpx.SyncByteStream):
            def __iter__(self):
                raise httpx.ReadError("connection reset")
                yield b""  # pragma: no cover

        resp = httpx.Response(502, stream=_Broken())
        err = normalize_response(resp)
        assert err.message == "Server error, try again later"
        assert err.status == 502

    def test_raise_for_status_success_returns_response(self) -> None:
        resp = _response(200, b"{}")
        assert raise_for_status(resp) is resp

    def test_raise_for_status_raises_normalized(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            raise_for_status(_response(404), locale="ru")
        assert exc_info.value.message == "Ресурс не найден"
        assert exc_info.value.status == 404

    def test_redirect_is_not_success(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            raise_for_status(_response(304))
        assert exc_info.value.status == 304


class TestAsyncNormalizeResponse:
    @pytest.mark.asyncio
    async def test_reads_streamed_body(self) -> None:
        class _Stream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b'{"message": '
                yield b'"Out of stock"}'

        resp = httpx.Response(409, stream=_Stream())
        err = await anormalize_response(resp)
        assert err.message == "Out of stock"
        assert err.status == 409

    @pytest.mark.asyncio
    async def test_broken_stream_falls_back(self) -> None:
        class _Broken(httpx.AsyncByteStream):
            async def __aiter__(self):
                raise httpx.ReadError("reset")
                yield b""  # pragma: no cover

        err = await anormalize_response(httpx.Response(500, stream=_Broken()))
        assert err.message == "Server error, try again later"

    @pytest.mark.asyncio
    async def test_araise_for_status(self) -> None:
        with pytest.raises(AuthError):
            await araise_for_status(_response(403))
        ok = _response(204)
        assert await araise_for_status(ok) is ok
