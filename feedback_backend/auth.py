from __future__ import annotations

import secrets

from fastapi import Header, HTTPException

from feedback_backend.config import get_settings


def require_admin_key(x_admin_key: str = Header(default="", alias="x-admin-key")):
    """
    Guards the admin API with a static key.
    - If ADMIN_API_KEY is unset: allow all requests (local development).
    - If it is set: require a matching x-admin-key header.
    """
    expected = get_settings().admin_api_key
    if not expected:
        return
    if not secrets.compare_digest(x_admin_key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid admin key")
