# fleetrecon/core/dependencies.py

from typing import Optional

from fastapi import Header, HTTPException, status


def get_session_id(x_session_id: Optional[str] = Header(None, alias="X-Session-Id")) -> str:
    """
    Work session identity for the request.

    Cookie and auth plumbing live in front of this service; it only needs the
    opaque partition key.
    """
    if not x_session_id or not x_session_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Session-Id header",
        )
    session_id = x_session_id.strip()
    if len(session_id) > 64:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Session-Id must be at most 64 characters",
        )
    return session_id
