"""
Components module.

Bulk-quantity inventory items, their stock accounting and checkout to assets.
The HTTP surface lives in .router and is mounted by assetdb.main.
"""

from . import models  # noqa: F401
