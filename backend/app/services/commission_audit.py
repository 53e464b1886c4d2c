"""Audit trail for commission mutations."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.commission_status import CommissionStatus
from app.core.commission_types import AuditAction
from app.crud.commission_audit_log import CommissionAuditLogRepository
from app.models.commission_audit_log import CommissionAuditLog

# new_status written when a commission is superseded by a sale edit;
# the regenerated row gets its own "created" entry.
RECALCULATED_MARKER = "recalculated"


@dataclass(frozen=True)
class Actor:
    """Who triggered a mutation (operator or sale workflow user)."""

    id: str
    name: Optional[str] = None


def _status_value(status: CommissionStatus | str | None) -> Optional[str]:
    if status is None:
        return None
    if isinstance(status, CommissionStatus):
        return status.value
    return str(status)


class CommissionAuditRecorder:
    """
    Appends one immutable entry per commission value/status change.

    Write failures propagate: the entry is flushed in the same transaction as
    the mutation it describes, so neither survives without the other.
    """

    def __init__(self, db: AsyncSession, repository: Optional[CommissionAuditLogRepository] = None):
        self.repository = repository or CommissionAuditLogRepository(db)

    async def record(
        self,
        commission_id: uuid.UUID,
        action_type: AuditAction,
        old_value: Optional[Decimal],
        new_value: Optional[Decimal],
        old_status: CommissionStatus | str | None,
        new_status: CommissionStatus | str | None,
        reason: str,
        actor: Actor,
    ) -> CommissionAuditLog:
        entry = CommissionAuditLog(
            commission_id=commission_id,
            action_type=AuditAction(action_type).value,
            old_value=old_value,
            new_value=new_value,
            old_status=_status_value(old_status),
            new_status=_status_value(new_status),
            reason=reason,
            actor_id=actor.id,
            actor_name=actor.name,
        )
        return await self.repository.insert(entry)

    async def list_entries(
        self,
        commission_id: Optional[uuid.UUID] = None,
        limit: int = 500,
    ) -> list[CommissionAuditLog]:
        return await self.repository.list(commission_id=commission_id, limit=limit)

    async def commissions_with_action(
        self,
        commission_ids: Sequence[uuid.UUID],
        action_type: AuditAction,
    ) -> set[uuid.UUID]:
        return await self.repository.commission_ids_with_action(commission_ids, AuditAction(action_type).value)
