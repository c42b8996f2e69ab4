"""
diskstore: one filesystem contract over many named storage disks.

Provides:
- StorageManager: registry resolving disk names to live driver instances
- Driver: the async operation contract every backend implements
- LocalDisk: reference backend confined to a host directory
- FileInfo and friends: metadata records returned by inspection and listing
"""

from .config import DiskConfig, DriverSettings, LocalDiskSettings, StorageConfig
from .data_models import ExistsResult, FileInfo, FileKind, ListKind, ListOptions
from .drivers import Driver, LocalDisk
from .exceptions import (
    DiskConfigurationError,
    ForbiddenError,
    NotFoundError,
    PathTraversalError,
    RegistryError,
    StorageError,
    UnconfiguredDriverError,
    UnknownDiskError,
)
from .manager import StorageManager
from .utils import init_storage_logging

__all__ = [
    # Main interface
    "StorageManager",
    "Driver",
    "LocalDisk",
    # Configuration
    "StorageConfig",
    "DiskConfig",
    "DriverSettings",
    "LocalDiskSettings",
    # Data models
    "FileInfo",
    "FileKind",
    "ExistsResult",
    "ListKind",
    "ListOptions",
    # Errors
    "StorageError",
    "NotFoundError",
    "ForbiddenError",
    "PathTraversalError",
    "RegistryError",
    "UnconfiguredDriverError",
    "UnknownDiskError",
    "DiskConfigurationError",
    # Logging
    "init_storage_logging",
]

__version__ = "0.1.0"
