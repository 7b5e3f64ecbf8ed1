# backend/compliancedb/__init__.py
"""
Import ORM models from each app so that Alembic and
Base.metadata.create_all() see all tables.
"""

from .apps.accounts import models as accounts_models          # organizations / members
from .apps.audit import models as audit_models                # audit trail
from .apps.notifications import models as notifications_models  # email log
from .apps.training import models as training_models          # assignments / certificates / ledger

__all__ = [
    "accounts_models",
    "audit_models",
    "notifications_models",
    "training_models",
]
