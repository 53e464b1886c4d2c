# app/schemas/commission.py
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from app.core.commission_types import AuditAction, CommissionType, DiscountType
from app.core.commission_status import CommissionStatus

PERIOD_REFERENCE_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"  # YYYY-MM


class CommissionConfig(BaseModel):
    """
    Commission settings attached to a catalog item.
    Defaults mirror the catalog columns: percentage commission, percentage
    discount limit, 0 meaning "no limit".
    """
    enabled: bool = False
    type: CommissionType = CommissionType.PERCENTAGE
    value: Decimal = Decimal("0")
    discount_limit_type: CommissionType = CommissionType.PERCENTAGE
    discount_limit_value: Decimal = Decimal("0")

    @classmethod
    def from_catalog_item(cls, item: Any) -> "CommissionConfig":
        return cls(
            enabled=bool(item.commission_enabled),
            type=item.commission_type or CommissionType.PERCENTAGE,
            value=item.commission_value or Decimal("0"),
            discount_limit_type=item.discount_limit_type or CommissionType.PERCENTAGE,
            discount_limit_value=item.discount_limit_value or Decimal("0"),
        )


class SaleLineInput(BaseModel):
    product_id: uuid.UUID
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    discount_type: DiscountType = DiscountType.PERCENT
    discount_value: Decimal = Field(default=Decimal("0"), ge=0)
    # post-discount total, trusted as sent (may be negative on bad data)
    net_total: Decimal
    product_name: Optional[str] = Field(default=None, max_length=255)


class SaleCommissionsIn(BaseModel):
    """Payload sent by the sale workflow when a sale is finalized or edited."""
    seller_id: str = Field(..., min_length=1, max_length=64)
    sale_date: Optional[datetime] = None
    sale_status: Optional[str] = Field(default=None, max_length=32)
    lines: List[SaleLineInput] = Field(default_factory=list)


class SaleCancelIn(BaseModel):
    reason: str = Field(default="Sale cancelled", min_length=1, max_length=500)


class MarkPaidIn(BaseModel):
    commission_ids: List[uuid.UUID] = Field(..., min_length=1)
    payment_date: date
    payment_method: str = Field(..., min_length=1, max_length=50)
    payment_notes: Optional[str] = Field(default=None, max_length=1000)


class CommissionConfigUpdate(BaseModel):
    product_ids: List[uuid.UUID] = Field(..., min_length=1)

    commission_enabled: Optional[bool] = None
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[Decimal] = Field(default=None, ge=0)
    discount_limit_type: Optional[CommissionType] = None
    discount_limit_value: Optional[Decimal] = Field(default=None, ge=0)

    def config_patch(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude={"product_ids"})
        return {k: (v.value if isinstance(v, CommissionType) else v) for k, v in data.items() if v is not None}


class CommissionOut(BaseModel):
    id: uuid.UUID
    sale_id: str
    line_index: int
    seller_id: str
    product_id: uuid.UUID
    product_name: str

    unit_price: Decimal
    quantity: int
    discount_value: Decimal
    discount_type: DiscountType
    net_total: Decimal

    commission_type: CommissionType
    commission_rate: Decimal
    commission_amount: Decimal

    status: CommissionStatus
    period_reference: str

    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    payment_notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommissionAuditLogOut(BaseModel):
    id: uuid.UUID
    commission_id: uuid.UUID
    action_type: AuditAction

    old_value: Optional[Decimal] = None
    new_value: Optional[Decimal] = None
    old_status: Optional[str] = None
    new_status: Optional[str] = None

    reason: str
    actor_id: str
    actor_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CommissionSummaryOut(BaseModel):
    on_hold: Decimal
    pending: Decimal
    closed: Decimal
    paid: Decimal
    cancelled: Decimal
    total: Decimal


class ClosePeriodOut(BaseModel):
    period_reference: str
    closed: int


class CommissionConfigUpdateOut(BaseModel):
    updated: int
