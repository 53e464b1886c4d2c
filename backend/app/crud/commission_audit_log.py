from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.commission_audit_log import CommissionAuditLog

MAX_AUDIT_LIST_LIMIT = 500


class CommissionAuditLogRepository:
    """Insert-only storage for audit entries. There is no update or delete."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, entry: CommissionAuditLog) -> CommissionAuditLog:
        self.db.add(entry)
        # flush now so a failed write raises here, before the caller moves on
        await self.db.flush()
        return entry

    async def list(
        self,
        *,
        commission_id: Optional[uuid.UUID] = None,
        limit: int = MAX_AUDIT_LIST_LIMIT,
    ) -> list[CommissionAuditLog]:
        stmt = select(CommissionAuditLog)
        if commission_id is not None:
            stmt = stmt.where(CommissionAuditLog.commission_id == commission_id)

        stmt = stmt.order_by(CommissionAuditLog.created_at.desc()).limit(
            max(1, min(limit, MAX_AUDIT_LIST_LIMIT))
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def commission_ids_with_action(
        self,
        commission_ids: Sequence[uuid.UUID],
        action_type: str,
    ) -> set[uuid.UUID]:
        """Which of the given commissions have at least one entry of `action_type`."""
        ids = list(dict.fromkeys(commission_ids))
        if not ids:
            return set()
        stmt = (
            select(CommissionAuditLog.commission_id)
            .where(CommissionAuditLog.commission_id.in_(ids))
            .where(CommissionAuditLog.action_type == action_type)
            .distinct()
        )
        return set((await self.db.execute(stmt)).scalars().all())
