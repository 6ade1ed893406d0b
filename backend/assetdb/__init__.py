# backend/assetdb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in assetdb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models      # companies / users
from .apps.catalog import models as catalog_models        # categories + locations
from .apps.assets import models as assets_models          # checkout targets
from .apps.components import models as components_models  # components + assignments
from .apps.audit import models as audit_models            # audit trail

__all__ = [
    "accounts_models",
    "catalog_models",
    "assets_models",
    "components_models",
    "audit_models",
]
