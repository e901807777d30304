"""Response decoding and status checking.

The dispatcher returns every response as-is; deciding whether a status is an
error belongs to the caller. :func:`extract_response_data` decodes a body and
:func:`check_response` maps HTTP error statuses onto the
:class:`~specdrive.exceptions.ApiStatusError` family for callers (like the
CLI) that want exceptions.
"""

from __future__ import annotations

from typing import Any

import httpx

from specdrive.exceptions import ApiStatusError, AuthError, NotFoundError


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. the
    response is HTML or plain text), returns the raw text. Returns ``None``
    for responses with no content.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def check_response(response: httpx.Response) -> None:
    """Raise a typed exception when *response* has an error status.

    Raises:
        AuthError: On 401 / 403.
        NotFoundError: On 404.
        ApiStatusError: On any other status >= 400.
    """
    status = response.status_code
    if status < 400:
        return

    detail = extract_response_data(response)
    if isinstance(detail, dict):
        msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
    elif detail is None:
        msg = ""
    else:
        msg = str(detail)[:200]

    # The sent URL may carry a query-string API key; report it without the query.
    url = str(response.request.url).split("?", 1)[0]
    prefix = f"HTTP {status} from {response.request.method} {url}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg, status_code=status)
    if status == 404:
        raise NotFoundError(full_msg, status_code=status)
    raise ApiStatusError(full_msg, status_code=status)
