"""Commission lifecycle: generation, cancellation, recalculation, closing and payment."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.commission_rates import ZERO, Skipped, period_reference_for, resolve
from app.core.commission_status import (
    FROZEN_STATUSES,
    CommissionEvent,
    CommissionStatus,
    initial_status,
    transition,
)
from app.core.commission_types import AuditAction
from app.core.config import settings
from app.crud.catalog import get_products_by_ids
from app.crud.commission import CommissionRepository
from app.models.commission import Commission
from app.schemas.commission import CommissionConfig, SaleLineInput
from app.services.commission_audit import RECALCULATED_MARKER, Actor, CommissionAuditRecorder

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "Product"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommissionLifecycleManager:
    """
    Owns every status change of a commission.

    Stateless between calls: all state lives in the database session passed
    in. Nothing here commits; the caller commits once per operation so that
    rows and their audit entries are written atomically.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        hold_sale_statuses: Optional[Iterable[str]] = None,
        cancel_on_hold: Optional[bool] = None,
    ):
        self.db = db
        self.commissions = CommissionRepository(db)
        self.audit = CommissionAuditRecorder(db)

        if hold_sale_statuses is None:
            self.hold_sale_statuses = settings.hold_sale_statuses
        else:
            self.hold_sale_statuses = frozenset(s.strip().lower() for s in hold_sale_statuses)
        self.cancel_on_hold = settings.COMMISSION_CANCEL_ON_HOLD if cancel_on_hold is None else cancel_on_hold

    def is_sale_final(self, sale_status: Optional[str]) -> bool:
        if sale_status is None:
            return True
        return sale_status.strip().lower() not in self.hold_sale_statuses

    # =========================================================================
    # Sale workflow hooks
    # =========================================================================

    async def generate(
        self,
        sale_id: str,
        seller_id: str,
        lines: Sequence[SaleLineInput],
        *,
        actor: Actor,
        sale_date: date | datetime | None = None,
        sale_status: Optional[str] = None,
        skip_line_indexes: Iterable[int] = (),
        period_reference: Optional[str] = None,
    ) -> list[Commission]:
        """
        Create one commission per line whose product has commission enabled.

        Not idempotent: calling it twice for the same sale without a cancel or
        recalculation in between duplicates the rows.

        `period_reference` pins the period (recalculation keeps the sale's
        original one); otherwise it is derived from `sale_date`.
        """
        if not lines:
            return []

        products = await get_products_by_ids(self.db, [line.product_id for line in lines])
        product_map = {p.id: p for p in products}

        period_ref = period_reference or period_reference_for(sale_date)
        sale_is_final = self.is_sale_final(sale_status)
        skip = set(skip_line_indexes)

        to_insert: list[Commission] = []
        for idx, line in enumerate(lines):
            if idx in skip:
                continue
            product = product_map.get(line.product_id)
            if product is None:
                continue

            outcome = resolve(CommissionConfig.from_catalog_item(product), line)
            if isinstance(outcome, Skipped):
                continue

            status = initial_status(outcome.amount, sale_is_final=sale_is_final)
            to_insert.append(
                Commission(
                    sale_id=sale_id,
                    line_index=idx,
                    seller_id=seller_id,
                    product_id=line.product_id,
                    product_name=line.product_name or product.title or DEFAULT_PRODUCT_NAME,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    discount_value=line.discount_value,
                    discount_type=line.discount_type.value,
                    net_total=line.net_total,
                    commission_type=outcome.commission_type.value,
                    commission_rate=outcome.rate,
                    commission_amount=outcome.amount,
                    status=status.value,
                    period_reference=period_ref,
                )
            )

        if not to_insert:
            return []

        inserted = await self.commissions.insert_batch(to_insert)

        for comm in inserted:
            await self.audit.record(
                comm.id,
                AuditAction.CREATED,
                None,
                comm.commission_amount,
                None,
                comm.status,
                f"Commission generated for sale {sale_id}",
                actor,
            )

        logger.info(f"Generated {len(inserted)} commission(s) for sale {sale_id} (period {period_ref})")
        return inserted

    async def cancel_for_sale(
        self,
        sale_id: str,
        *,
        actor: Actor,
        reason: str = "Sale cancelled",
    ) -> list[Commission]:
        """
        Void the sale's pending commissions (and on_hold ones when
        cancel_on_hold is set). Closed and paid rows are never touched.
        The amount is zeroed; the previous amount lives in the audit entry.
        """
        statuses = {CommissionStatus.PENDING}
        if self.cancel_on_hold:
            statuses.add(CommissionStatus.ON_HOLD)

        existing = await self.commissions.find(sale_id=sale_id, statuses=statuses)
        if not existing:
            return []

        before = {c.id: (c.commission_amount, c.status) for c in existing}
        target = {transition(c.status, CommissionEvent.SALE_CANCELLED) for c in existing}.pop()

        updated_ids = await self.commissions.update_batch(
            list(before),
            {"status": target.value, "commission_amount": ZERO, "updated_at": _utcnow()},
            expected_status=statuses,
        )
        self._warn_partial("cancel", sale_id, len(before), len(updated_ids))

        updated = set(updated_ids)
        for comm_id, (old_amount, old_status) in before.items():
            if comm_id not in updated:
                continue
            await self.audit.record(
                comm_id,
                AuditAction.CANCELLED,
                old_amount,
                ZERO,
                old_status,
                target,
                reason,
                actor,
            )

        logger.info(f"Cancelled {len(updated)} commission(s) for sale {sale_id}")
        return [c for c in existing if c.id in updated]

    async def recalculate_for_sale(
        self,
        sale_id: str,
        seller_id: str,
        lines: Sequence[SaleLineInput],
        *,
        actor: Actor,
        sale_date: date | datetime | None = None,
        sale_status: Optional[str] = None,
    ) -> list[Commission]:
        """
        Replace the sale's commissions with freshly computed ones.

        Pending and on_hold rows are superseded, and so are rows cancelled at
        generation (disqualified or non-positive), since the edit may change
        their outcome. Closed/paid rows and rows voided by cancel_for_sale are
        kept and their lines are not regenerated, so no line ever gains a
        second row from an edit. A sale with nothing to supersede is not
        touched at all.

        The regenerated rows keep the sale's existing period_reference;
        `sale_date` only matters for a sale that has no commissions yet.
        """
        existing = await self.commissions.find(sale_id=sale_id)
        if not existing:
            return await self.generate(
                sale_id,
                seller_id,
                lines,
                actor=actor,
                sale_date=sale_date,
                sale_status=sale_status,
            )

        cancelled_ids = [c.id for c in existing if CommissionStatus(c.status) == CommissionStatus.CANCELLED]
        voided_ids = await self.audit.commissions_with_action(cancelled_ids, AuditAction.CANCELLED)

        kept = [
            c for c in existing
            if CommissionStatus(c.status) in FROZEN_STATUSES or c.id in voided_ids
        ]
        kept_ids = {c.id for c in kept}
        superseded = [c for c in existing if c.id not in kept_ids]

        if not superseded:
            logger.info(f"Sale {sale_id} has no open commissions; recalculation skipped")
            return []

        # every row of a sale shares the period fixed at first generation
        period_ref = existing[-1].period_reference

        for comm in superseded:
            await self.audit.record(
                comm.id,
                AuditAction.RECALCULATED,
                comm.commission_amount,
                None,
                comm.status,
                RECALCULATED_MARKER,
                "Commission recalculated after sale edit",
                actor,
            )

        await self.commissions.delete_batch([c.id for c in superseded])

        return await self.generate(
            sale_id,
            seller_id,
            lines,
            actor=actor,
            sale_date=sale_date,
            sale_status=sale_status,
            skip_line_indexes={c.line_index for c in kept},
            period_reference=period_ref,
        )

    # =========================================================================
    # Operator actions
    # =========================================================================

    async def close_period(self, period_reference: str, *, actor: Actor) -> int:
        """
        Freeze every pending commission of the period. on_hold rows stay open
        for a later close. Returns the number of commissions closed.
        """
        pending = await self.commissions.find(
            period_reference=period_reference,
            statuses=[CommissionStatus.PENDING],
        )
        if not pending:
            return 0

        amounts = {c.id: c.commission_amount for c in pending}
        target = transition(CommissionStatus.PENDING, CommissionEvent.PERIOD_CLOSED)

        updated_ids = await self.commissions.update_batch(
            list(amounts),
            {"status": target.value, "updated_at": _utcnow()},
            expected_status=[CommissionStatus.PENDING],
        )
        self._warn_partial("close", period_reference, len(amounts), len(updated_ids))

        for comm_id in updated_ids:
            amount = amounts[comm_id]
            await self.audit.record(
                comm_id,
                AuditAction.CLOSED,
                amount,
                amount,
                CommissionStatus.PENDING,
                target,
                f"Period {period_reference} closed",
                actor,
            )

        logger.info(f"Closed {len(updated_ids)} commission(s) for period {period_reference}")
        return len(updated_ids)

    async def mark_paid(
        self,
        commission_ids: Sequence[uuid.UUID],
        *,
        payment_date: date,
        payment_method: str,
        payment_notes: Optional[str],
        actor: Actor,
    ) -> list[Commission]:
        """
        Pay the given commissions. Ids not currently closed are ignored.
        Returns the commissions that were marked paid.
        """
        ids = list(dict.fromkeys(commission_ids))
        closed = await self.commissions.find(ids=ids, statuses=[CommissionStatus.CLOSED])
        if not closed:
            return []

        amounts = {c.id: c.commission_amount for c in closed}
        target = transition(CommissionStatus.CLOSED, CommissionEvent.PAYMENT_MARKED)

        updated_ids = await self.commissions.update_batch(
            list(amounts),
            {
                "status": target.value,
                "payment_date": payment_date,
                "payment_method": payment_method,
                "payment_notes": payment_notes,
                "updated_at": _utcnow(),
            },
            expected_status=[CommissionStatus.CLOSED],
        )
        self._warn_partial("pay", "payment batch", len(amounts), len(updated_ids))

        for comm_id in updated_ids:
            amount = amounts[comm_id]
            await self.audit.record(
                comm_id,
                AuditAction.PAID,
                amount,
                amount,
                CommissionStatus.CLOSED,
                target,
                f"Payment: {payment_method} - {payment_notes or 'no notes'}",
                actor,
            )

        logger.info(f"Marked {len(updated_ids)} of {len(ids)} commission(s) as paid")
        updated = set(updated_ids)
        return [c for c in closed if c.id in updated]

    @staticmethod
    def _warn_partial(operation: str, key: str, selected: int, updated: int) -> None:
        if updated < selected:
            logger.warning(
                f"Commission {operation} for {key}: {selected - updated} of {selected} row(s) "
                f"changed status concurrently and were skipped"
            )
