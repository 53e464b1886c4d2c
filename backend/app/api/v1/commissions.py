# app/api/v1/commissions.py
from __future__ import annotations

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.actor import get_current_actor
from app.core.commission_status import CommissionStatus
from app.crud.catalog import bulk_update_commission_config
from app.crud.commission import MAX_LIST_LIMIT, CommissionRepository
from app.db.session import get_db
from app.schemas.commission import (
    PERIOD_REFERENCE_PATTERN,
    ClosePeriodOut,
    CommissionAuditLogOut,
    CommissionConfigUpdate,
    CommissionConfigUpdateOut,
    CommissionOut,
    CommissionSummaryOut,
    MarkPaidIn,
    SaleCancelIn,
    SaleCommissionsIn,
)
from app.services.commission_audit import Actor, CommissionAuditRecorder
from app.services.commission_lifecycle import CommissionLifecycleManager
from app.services.commission_summary import summarize

router = APIRouter(prefix="/commissions", tags=["commissions"])


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Conflict writing commissions")


# =========================================================================
# Sale workflow hooks
# =========================================================================

@router.post("/sales/{sale_id}/generate", response_model=List[CommissionOut], status_code=status.HTTP_201_CREATED)
async def generate_sale_commissions(
    payload: SaleCommissionsIn,
    sale_id: str = Path(..., min_length=1, max_length=64),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Called once when a sale is finalized."""
    manager = CommissionLifecycleManager(db)
    created = await manager.generate(
        sale_id,
        payload.seller_id,
        payload.lines,
        actor=actor,
        sale_date=payload.sale_date,
        sale_status=payload.sale_status,
    )
    await _commit(db)
    return created


@router.post("/sales/{sale_id}/recalculate", response_model=List[CommissionOut])
async def recalculate_sale_commissions(
    payload: SaleCommissionsIn,
    sale_id: str = Path(..., min_length=1, max_length=64),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Called after a sale is edited. Pending/on_hold commissions are replaced;
    closed/paid ones are never changed.
    """
    manager = CommissionLifecycleManager(db)
    regenerated = await manager.recalculate_for_sale(
        sale_id,
        payload.seller_id,
        payload.lines,
        actor=actor,
        sale_date=payload.sale_date,
        sale_status=payload.sale_status,
    )
    # delete + insert + audit commit together
    await _commit(db)
    return regenerated


@router.post("/sales/{sale_id}/cancel", response_model=List[CommissionOut])
async def cancel_sale_commissions(
    sale_id: str = Path(..., min_length=1, max_length=64),
    payload: Optional[SaleCancelIn] = Body(default=None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    manager = CommissionLifecycleManager(db)
    reason = payload.reason if payload else SaleCancelIn().reason
    cancelled = await manager.cancel_for_sale(sale_id, actor=actor, reason=reason)
    await _commit(db)
    return cancelled


# =========================================================================
# Operator actions
# =========================================================================

@router.post("/periods/{period_reference}/close", response_model=ClosePeriodOut)
async def close_commission_period(
    period_reference: str = Path(..., pattern=PERIOD_REFERENCE_PATTERN),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    manager = CommissionLifecycleManager(db)
    count = await manager.close_period(period_reference, actor=actor)
    await _commit(db)
    return ClosePeriodOut(period_reference=period_reference, closed=count)


@router.post("/pay", response_model=List[CommissionOut])
async def mark_commissions_paid(
    payload: MarkPaidIn,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Only closed commissions are paid; other ids are ignored."""
    manager = CommissionLifecycleManager(db)
    paid = await manager.mark_paid(
        payload.commission_ids,
        payment_date=payload.payment_date,
        payment_method=payload.payment_method,
        payment_notes=payload.payment_notes,
        actor=actor,
    )
    await _commit(db)
    return paid


@router.patch("/catalog-config", response_model=CommissionConfigUpdateOut)
async def update_products_commission_config(
    payload: CommissionConfigUpdate,
    db: AsyncSession = Depends(get_db),
    _: Actor = Depends(get_current_actor),
):
    try:
        updated = await bulk_update_commission_config(db, payload.product_ids, payload.config_patch())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await _commit(db)
    return CommissionConfigUpdateOut(updated=updated)


# =========================================================================
# Reads
# =========================================================================

@router.get("", response_model=List[CommissionOut])
async def list_commissions(
    seller_id: Optional[str] = Query(None, max_length=64),
    status_filter: Optional[CommissionStatus] = Query(None, alias="status"),
    period_reference: Optional[str] = Query(None, pattern=PERIOD_REFERENCE_PATTERN),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(MAX_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
):
    """Newest first."""
    return await CommissionRepository(db).find(
        seller_id=seller_id,
        statuses=[status_filter] if status_filter else None,
        period_reference=period_reference,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )


@router.get("/summary", response_model=CommissionSummaryOut)
async def get_commission_summary(
    seller_id: Optional[str] = Query(None, max_length=64),
    period_reference: Optional[str] = Query(None, pattern=PERIOD_REFERENCE_PATTERN),
    db: AsyncSession = Depends(get_db),
):
    return await summarize(db, seller_id=seller_id, period_reference=period_reference)


@router.get("/audit-logs", response_model=List[CommissionAuditLogOut])
async def list_commission_audit_logs(
    commission_id: Optional[uuid.UUID] = None,
    limit: int = Query(500, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await CommissionAuditRecorder(db).list_entries(commission_id=commission_id, limit=limit)
