"""Response error extraction for load test observability.

Parses MuStore API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Header checks (400/401): {"detail": "msg"}
- Domain errors (400/404/409/500): {"error": {"code": "...", "message": "..."}}
  or {"error": {"field": ["msg", ...]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Compact error message suitable for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    detail = body.get("detail")
    if isinstance(detail, list):
        parts = []
        for err in detail:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)
    if isinstance(detail, str):
        return detail

    error = body.get("error")
    if isinstance(error, dict):
        if "code" in error:
            return f"{error['code']}: {error.get('message', '')}"
        return " | ".join(f"{k}: {v}" for k, v in error.items())
    if error is not None:
        return str(error)

    return str(body)[:300]


def error_code(response: Response) -> str | None:
    """The domain error code of a failed response, if it carries one."""
    try:
        error = response.json().get("error")
    except ValueError:
        return None
    return error.get("code") if isinstance(error, dict) else None
