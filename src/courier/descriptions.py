"""Human readable descriptions of requests, responses and bodies for logging."""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

import httpx

from .types import HeaderField

_PRIVATE = "<private>"


def byte_count(data: bytes) -> str:
    """Describe a body size, e.g. ``"764 bytes"`` or ``"1.2 KB (1,234 bytes)"``."""
    count = len(data)
    if count < 1000:
        return f"{count} bytes"
    size = float(count)
    for unit in ("KB", "MB", "GB"):
        size /= 1000
        if size < 1000:
            break
    return f"{size:.1f} {unit} ({count:,} bytes)"


def status_description(status_code: int) -> str:
    """Simple user friendly description, e.g. ``"200 OK"``."""
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)
    return f"{status_code} {phrase}"


def describe_request(request: httpx.Request) -> str:
    """Describe a wire-level request; the ``Authorization`` value is redacted."""
    props: dict[str, Any] = {}
    if request.content:
        props["body"] = byte_count(request.content)
    headers = dict(request.headers)
    for name in headers:
        if HeaderField(name) == HeaderField.AUTHORIZATION:
            headers[name] = _PRIVATE
    props["headers"] = headers
    timeout = request.extensions.get("timeout")
    if timeout:
        props["timeout"] = timeout
    return f"<Request> {request.method} {request.url}, {props}"


def describe_response(response: httpx.Response) -> str:
    props: dict[str, Any] = {
        "url": str(response.url),
        "http_version": response.http_version,
        "headers": dict(response.headers),
    }
    return f"<Response> {status_description(response.status_code)}, {props}"


def to_json(data: bytes, pretty_printed: bool = False) -> str:
    """Re-serialize a JSON body, optionally pretty-printed.

    Raises:
        ValueError: If ``data`` is not valid JSON
    """
    value = json.loads(data)
    if pretty_printed:
        return json.dumps(value, indent=2, ensure_ascii=False)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
