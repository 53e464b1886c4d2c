from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from app.services.commission_audit import Actor


async def get_current_actor(
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
    x_actor_name: Optional[str] = Header(default=None, alias="X-Actor-Name"),
) -> Actor:
    """
    Resolve who is acting from the X-Actor-Id / X-Actor-Name headers.
    Authentication happens upstream; the ids are only recorded in the audit trail.
    """
    actor_id = (x_actor_id or "").strip()
    if not actor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Actor-Id header is required",
        )
    if len(actor_id) > 64:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="X-Actor-Id must be at most 64 characters",
        )

    name = (x_actor_name or "").strip() or None
    return Actor(id=actor_id, name=name[:200] if name else None)
