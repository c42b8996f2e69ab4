"""
Storage Exception Hierarchy

This module defines the exception hierarchy for diskstore. Every error raised
by a driver or by the disk registry derives from StorageError and carries
structured context (disk name, logical path, error code) for logging and
programmatic handling.

Categories:
1. Path errors: the target does not exist, or the operation is forbidden
2. Registry errors: unknown disks, unconfigured drivers, invalid disk settings

Underlying I/O failures (OSError) are not wrapped; they propagate unchanged.
"""

import time
from typing import Any, Dict, Optional


class StorageError(Exception):
    """
    Base exception class for all diskstore errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        disk_name: Name of the disk where the error occurred (if applicable)
        path: Logical path the operation targeted (if applicable)
        timestamp: When the error occurred
        context: Additional context information
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "STORAGE_ERROR",
        disk_name: Optional[str] = None,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.disk_name = disk_name
        self.path = path
        self.timestamp = time.time()
        self.context = context or {}
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "disk_name": self.disk_name,
            "path": self.path,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]"]
        if self.disk_name:
            parts.append(f"Disk:{self.disk_name}")
        parts.append(self.message)
        return " ".join(parts)


# =============================================================================
# PATH ERRORS
# =============================================================================

class NotFoundError(StorageError):
    """
    Raised when an operation requires an existing path and none exists.

    Examples:
    - get_file / get_file_stream on a missing file
    - stat on a missing entry
    - copy_file from a missing source
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("suggestion", "Check the path, or call exists() before reading.")
        super().__init__(message, error_code="NOT_FOUND", **kwargs)


class ForbiddenError(StorageError):
    """
    Raised when an operation is refused outright.

    The canonical case is delete_directory("/"): wiping a disk root is never
    a recoverable request.
    """

    def __init__(self, message: str, **kwargs):
        error_code = kwargs.pop("error_code", "FORBIDDEN")
        super().__init__(message, error_code=error_code, **kwargs)


class PathTraversalError(ForbiddenError):
    """
    Raised when a logical path resolves outside the disk root.

    Examples:
    - "/../../etc/passwd"
    - "a/../../outside.txt"
    - a symlink inside the root pointing elsewhere (unless follow_symlinks)
    """

    def __init__(self, message: str, resolved: Optional[str] = None, **kwargs):
        self.resolved = resolved
        context = kwargs.pop("context", {})
        if resolved:
            context["resolved"] = resolved
        super().__init__(
            message,
            error_code="PATH_TRAVERSAL",
            context=context,
            suggestion="Use paths relative to the disk root without '..' segments that climb above it.",
            **kwargs
        )


# =============================================================================
# REGISTRY ERRORS
# =============================================================================

class RegistryError(StorageError):
    """Base class for disk registry and driver resolution errors."""

    def __init__(self, message: str, **kwargs):
        error_code = kwargs.pop("error_code", "REGISTRY_ERROR")
        super().__init__(message, error_code=error_code, **kwargs)


class UnconfiguredDriverError(RegistryError):
    """Raised when a disk names a driver that was never registered."""

    def __init__(self, message: str, driver_name: Optional[str] = None, **kwargs):
        self.driver_name = driver_name
        context = kwargs.pop("context", {})
        if driver_name:
            context["driver_name"] = driver_name
        super().__init__(
            message,
            error_code="UNCONFIGURED_DRIVER",
            context=context,
            suggestion="Register the driver with StorageManager.add_driver() before adding disks that use it.",
            **kwargs
        )


class UnknownDiskError(RegistryError):
    """Raised when a disk name does not resolve to a configured disk."""

    def __init__(self, message: str, available: Optional[list] = None, **kwargs):
        self.available = available or []
        context = kwargs.pop("context", {})
        context["available"] = list(self.available)
        super().__init__(
            message,
            error_code="UNKNOWN_DISK",
            context=context,
            suggestion="Check the disk name against the 'disks' section of the storage configuration.",
            **kwargs
        )


class DiskConfigurationError(RegistryError):
    """
    Raised when a disk definition or driver settings are invalid.

    Examples:
    - Unknown fields in a backend's settings
    - Missing root for the local driver
    - Two disks sharing one name
    """

    def __init__(
        self,
        message: str,
        config_field: Optional[str] = None,
        **kwargs
    ):
        self.config_field = config_field
        context = kwargs.pop("context", {})
        if config_field:
            context["config_field"] = config_field
        super().__init__(
            message,
            error_code="DISK_CONFIGURATION",
            context=context,
            suggestion="Check the disk definition for missing or unsupported fields.",
            **kwargs
        )
