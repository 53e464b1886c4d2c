from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Numeric, String, Uuid

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogItem(Base):
    """
    Product catalog row, owned by the catalog module.
    The commission engine only reads the commission_* / discount_limit_* columns.
    """

    __tablename__ = "catalog_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False)
    sku = Column(String(128), nullable=True)

    price_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(32), nullable=False, default="active")  # active | archived

    # commission configuration
    commission_enabled = Column(Boolean, nullable=False, default=False)
    commission_type = Column(String(16), nullable=False, default="percentage")  # fixed | percentage
    commission_value = Column(Numeric(12, 2), nullable=False, default=0)
    discount_limit_type = Column(String(16), nullable=False, default="percentage")  # fixed | percentage
    discount_limit_value = Column(Numeric(12, 2), nullable=False, default=0)  # 0 = no limit

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
