"""
Tests for the diskstore.exceptions module.

This module tests:
- Error codes and class hierarchy
- Structured context and serialization
- String formatting with the disk name
"""

import pytest

from diskstore.exceptions import (
    DiskConfigurationError,
    ForbiddenError,
    NotFoundError,
    PathTraversalError,
    RegistryError,
    StorageError,
    UnconfiguredDriverError,
    UnknownDiskError,
)


class TestHierarchy:
    """Every error derives from StorageError."""

    @pytest.mark.parametrize(
        "error_cls, parent",
        [
            (NotFoundError, StorageError),
            (ForbiddenError, StorageError),
            (PathTraversalError, ForbiddenError),
            (RegistryError, StorageError),
            (UnconfiguredDriverError, RegistryError),
            (UnknownDiskError, RegistryError),
            (DiskConfigurationError, RegistryError),
        ],
    )
    def test_parent(self, error_cls, parent):
        assert issubclass(error_cls, parent)

    def test_os_errors_are_not_storage_errors(self):
        """Test that raw I/O failures stay outside the hierarchy."""
        assert not issubclass(OSError, StorageError)


class TestErrorCodes:
    """Tests for the error_code attribute."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (StorageError("x"), "STORAGE_ERROR"),
            (NotFoundError("x"), "NOT_FOUND"),
            (ForbiddenError("x"), "FORBIDDEN"),
            (PathTraversalError("x"), "PATH_TRAVERSAL"),
            (RegistryError("x"), "REGISTRY_ERROR"),
            (UnconfiguredDriverError("x"), "UNCONFIGURED_DRIVER"),
            (UnknownDiskError("x"), "UNKNOWN_DISK"),
            (DiskConfigurationError("x"), "DISK_CONFIGURATION"),
        ],
    )
    def test_code(self, error, code):
        assert error.error_code == code


class TestContext:
    """Tests for structured context and serialization."""

    def test_str_includes_disk(self):
        error = NotFoundError("File /a.txt not found", disk_name="local", path="/a.txt")

        assert str(error) == "[NOT_FOUND] Disk:local File /a.txt not found"

    def test_str_without_disk(self):
        assert str(ForbiddenError("nope")) == "[FORBIDDEN] nope"

    def test_to_dict(self):
        error = NotFoundError("missing", disk_name="local", path="/a.txt")

        data = error.to_dict()

        assert data["error_type"] == "NotFoundError"
        assert data["error_code"] == "NOT_FOUND"
        assert data["disk_name"] == "local"
        assert data["path"] == "/a.txt"
        assert data["suggestion"]
        assert isinstance(data["timestamp"], float)

    def test_traversal_records_resolved_path(self):
        error = PathTraversalError("escape", resolved="/etc/passwd", path="/../../etc/passwd")

        assert error.resolved == "/etc/passwd"
        assert error.context["resolved"] == "/etc/passwd"
        assert error.path == "/../../etc/passwd"

    def test_unknown_disk_lists_available(self):
        error = UnknownDiskError("The disk s3 is not configured!", available=["a", "b"])

        assert error.available == ["a", "b"]
        assert error.context["available"] == ["a", "b"]

    def test_unconfigured_driver_name(self):
        error = UnconfiguredDriverError("The driver ftp is not configured!", driver_name="ftp")

        assert error.driver_name == "ftp"
        assert error.context == {"driver_name": "ftp"}

    def test_configuration_field(self):
        error = DiskConfigurationError("bad", config_field="root", context={"errors": []})

        assert error.context == {"errors": [], "config_field": "root"}

    def test_forbidden_is_catchable_as_storage_error(self):
        with pytest.raises(StorageError):
            raise ForbiddenError("Cannot delete root directory", disk_name="local", path="/")
