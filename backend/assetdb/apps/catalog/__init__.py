"""
Catalog lookups: categories and locations referenced by inventory records.
"""

from . import models, services  # noqa: F401
