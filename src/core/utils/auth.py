"""Requester identity from the API Gateway authorizer context.

Tokens are verified by the authorizer in front of the API; handlers only
read the identity it attaches to the event.
"""

from typing import Any


def get_requester_id(event: dict[str, Any]) -> str | None:
    """Return the authenticated user id, or None for anonymous requests."""
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}

    for field in ("user_id", "principalId"):
        value = authorizer.get(field)
        if value is not None and str(value).strip():
            return str(value).strip()

    return None
