"""
Storage drivers.

Every backend implements the Driver contract from drivers.base. LocalDisk is
the reference implementation for directories on the host filesystem.
"""

from .base import Driver, FileContent
from .local import LocalDisk

__all__ = ["Driver", "FileContent", "LocalDisk"]
