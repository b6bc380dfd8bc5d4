"""Response body extraction and display for the CLI."""

from __future__ import annotations

from typing import Any

import httpx

from storefront.output import get_output


def extract_response_data(response: httpx.Response) -> Any:
    """Return the body as decoded JSON, falling back to text; ``None`` if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data)
