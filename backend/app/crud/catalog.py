from __future__ import annotations

import uuid
from typing import Any, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog_item import CatalogItem

CONFIG_UPDATE_BATCH_SIZE = 50

COMMISSION_CONFIG_FIELDS = {
    "commission_enabled",
    "commission_type",
    "commission_value",
    "discount_limit_type",
    "discount_limit_value",
}


async def get_products_by_ids(db: AsyncSession, ids: Sequence[uuid.UUID]) -> list[CatalogItem]:
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return []
    stmt = select(CatalogItem).where(CatalogItem.id.in_(unique_ids))
    return list((await db.execute(stmt)).scalars().all())


async def bulk_update_commission_config(
    db: AsyncSession,
    product_ids: Sequence[uuid.UUID],
    patch: dict[str, Any],
) -> int:
    """
    Apply the same commission configuration to many products.
    Only commission fields are accepted; unset fields are left alone.
    Returns the number of catalog rows updated.
    """
    unknown = set(patch) - COMMISSION_CONFIG_FIELDS
    if unknown:
        raise ValueError(f"Not commission config field(s): {sorted(unknown)}")
    if not patch or not product_ids:
        return 0

    ids = list(dict.fromkeys(product_ids))
    updated = 0
    for start in range(0, len(ids), CONFIG_UPDATE_BATCH_SIZE):
        batch = ids[start:start + CONFIG_UPDATE_BATCH_SIZE]
        res = await db.execute(
            update(CatalogItem)
            .where(CatalogItem.id.in_(batch))
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        updated += res.rowcount or 0
    return updated
