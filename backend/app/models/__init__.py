# Import models here so Alembic can discover metadata.
from app.models.catalog_item import CatalogItem  # noqa: F401

# Commission engine
from app.models.commission import Commission  # noqa: F401
from app.models.commission_audit_log import CommissionAuditLog  # noqa: F401
