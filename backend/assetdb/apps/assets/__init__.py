"""
Assets app: the tracked hardware that components are checked out to.
"""

from . import models, services  # noqa: F401
