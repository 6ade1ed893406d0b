# backend/assetdb/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- Companies (tenant boundary for inventory records)
- User accounts and roles
- Company scoping rules used by the other apps

Authentication itself lives in assetdb.security.
"""

from . import models, services  # noqa: F401

__all__ = ["models", "services"]
