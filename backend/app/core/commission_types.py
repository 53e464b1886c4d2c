# app/core/commission_types.py

import enum


class CommissionType(str, enum.Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class DiscountType(str, enum.Enum):
    PERCENT = "percent"
    ABSOLUTE = "absolute"


class AuditAction(str, enum.Enum):
    CREATED = "created"
    RECALCULATED = "recalculated"
    CANCELLED = "cancelled"
    CLOSED = "closed"
    PAID = "paid"
    STATUS_CHANGE = "status_change"
