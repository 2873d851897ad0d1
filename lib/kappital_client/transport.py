from __future__ import annotations

import io
import json
import logging
from typing import Any

import httpx

from .config_types import RequestInfo
from .errors import BodyTypeError, NetworkError, RequestBuildError
from .tls import client_ssl_context

log = logging.getLogger(__name__)

_BINARY_TYPES = (bytes, bytearray, io.BytesIO)


def _encode_body(body: Any, is_file: bool) -> bytes:
    if not is_file:
        try:
            return json.dumps(body, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RequestBuildError(f"marshal body failed, err: {e}") from e
    if not isinstance(body, _BINARY_TYPES):
        raise BodyTypeError(type(body))
    if isinstance(body, io.BytesIO):
        return body.getvalue()
    return bytes(body)


def build_request(info: RequestInfo) -> httpx.Request:
    content = None
    if info.body is not None:
        content = _encode_body(info.body, info.is_file)

    items: list[tuple[str, str]] = list(info.header_adder.items())
    headers = httpx.Headers(items)
    for key, value in info.header_setter.items():
        headers[key] = value

    try:
        return httpx.Request(info.method, info.path, content=content, headers=headers)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, TypeError) as e:
        raise RequestBuildError(f"create http request failed, err: {e}") from e


def build_client(info: RequestInfo, *, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    if not info.ca_crt or info.path.startswith("http://"):
        return httpx.Client(transport=transport)
    ctx = client_ssl_context(info.ca_crt, info.client_crt, info.client_key, skip_verify=info.skip)
    return httpx.Client(verify=ctx, transport=transport)


def execute(info: RequestInfo, *, transport: httpx.BaseTransport | None = None) -> tuple[int, bytes]:
    """Perform exactly one round trip and return ``(status, body)``.

    The status code is never interpreted here; the body is read fully and the
    response closed before returning.
    """
    request = build_request(info)
    client = build_client(info, transport=transport)
    with client:
        log.debug("%s %s", request.method, request.url)
        try:
            response = client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise NetworkError(f"perform request failed, err: {e}") from e
        try:
            body = response.read()
        except httpx.HTTPError as e:
            raise NetworkError(f"read response body failed, err: {e}") from e
        finally:
            response.close()
    return response.status_code, body
