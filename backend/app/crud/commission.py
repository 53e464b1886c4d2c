from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.commission_status import CommissionStatus
from app.models.commission import Commission

MAX_LIST_LIMIT = 2000


def _status_values(statuses: Iterable[CommissionStatus | str]) -> list[str]:
    return [CommissionStatus(s).value for s in statuses]


class CommissionRepository:
    """
    Storage collaborator for commission rows.

    Every method only flushes; committing is the caller's job so that a
    mutation and its audit entries share one transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self,
        *,
        ids: Optional[Sequence[uuid.UUID]] = None,
        sale_id: Optional[str] = None,
        seller_id: Optional[str] = None,
        statuses: Optional[Iterable[CommissionStatus | str]] = None,
        period_reference: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Commission]:
        stmt = select(Commission)

        if ids is not None:
            if not ids:
                return []
            stmt = stmt.where(Commission.id.in_(list(ids)))
        if sale_id is not None:
            stmt = stmt.where(Commission.sale_id == sale_id)
        if seller_id is not None:
            stmt = stmt.where(Commission.seller_id == seller_id)
        if statuses is not None:
            stmt = stmt.where(Commission.status.in_(_status_values(statuses)))
        if period_reference is not None:
            stmt = stmt.where(Commission.period_reference == period_reference)
        if start_date is not None:
            stmt = stmt.where(Commission.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
        if end_date is not None:
            # end_date covers the whole day
            stmt = stmt.where(Commission.created_at < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc))

        stmt = stmt.order_by(Commission.created_at.desc(), Commission.line_index.asc())
        if limit is not None:
            stmt = stmt.limit(max(1, min(limit, MAX_LIST_LIMIT)))

        return list((await self.db.execute(stmt)).scalars().all())

    async def insert_batch(self, records: Sequence[Commission]) -> list[Commission]:
        if not records:
            return []
        self.db.add_all(records)
        await self.db.flush()
        return list(records)

    async def update_batch(
        self,
        ids: Sequence[uuid.UUID],
        patch: dict[str, Any],
        *,
        expected_status: Optional[Iterable[CommissionStatus | str]] = None,
    ) -> list[uuid.UUID]:
        """
        Apply `patch` to the given ids and return the ids actually updated.

        With `expected_status`, a row is only updated while its status is still
        one of those values (compare-and-set), so a concurrent transition makes
        the row drop out of the result instead of being overwritten.
        """
        if not ids:
            return []

        stmt = update(Commission).where(Commission.id.in_(list(ids)))
        if expected_status is not None:
            stmt = stmt.where(Commission.status.in_(_status_values(expected_status)))

        stmt = stmt.values(**patch).returning(Commission.id)
        updated = (await self.db.execute(stmt)).scalars().all()
        return list(updated)

    async def delete_batch(self, ids: Sequence[uuid.UUID]) -> None:
        if not ids:
            return
        await self.db.execute(delete(Commission).where(Commission.id.in_(list(ids))))
        await self.db.flush()

    async def sum_by_status(
        self,
        *,
        seller_id: Optional[str] = None,
        period_reference: Optional[str] = None,
    ) -> dict[str, Decimal]:
        stmt = select(
            Commission.status,
            func.coalesce(func.sum(Commission.commission_amount), 0),
        ).group_by(Commission.status)

        if seller_id is not None:
            stmt = stmt.where(Commission.seller_id == seller_id)
        if period_reference is not None:
            stmt = stmt.where(Commission.period_reference == period_reference)

        rows = (await self.db.execute(stmt)).all()
        return {status: Decimal(str(amount)) for status, amount in rows}
