# meeting_scheduler/api/dependencies/internal_auth.py
from typing import Optional

from fastapi import Header, HTTPException, status

from meeting_scheduler.core.config import get_settings


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Internal API key required for /internal endpoints in non-local environments.",
    ),
) -> None:
    """
    Dependency to protect /internal endpoints (user provisioning).

    Rules
    -----
    - APP_ENV in ("local", "test"):
        - INTERNAL_API_KEY unset -> no auth enforced.
        - INTERNAL_API_KEY set   -> header must match the configured key.
    - Any other APP_ENV:
        - INTERNAL_API_KEY must be set, otherwise 500 (misconfiguration).
        - Header must be present and match, otherwise 401.
    """
    settings = get_settings()
    env = (settings.APP_ENV or "local").lower()
    expected = settings.INTERNAL_API_KEY

    if env in ("local", "test") and not expected:
        return

    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="INTERNAL_API_KEY not configured for this environment.",
        )

    if not internal_api_key or internal_api_key != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing internal API key.",
        )
