"""
Audit app.

Append-only event trail shared by the other apps.
"""

from . import models, schemas, services  # noqa: F401

__all__ = ["models", "schemas", "services"]
