"""
Abstract base class for storage drivers.

This module defines the operation contract every backend implements. The
concrete primitives are abstract; the convenience narrowings (file_exists,
list_files, delete_files, ...) have default implementations built on top of
them so a new backend only has to provide the primitives.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterable, AsyncIterator, BinaryIO, ClassVar, Dict, List, Optional, Type, Union

from ..config import DriverSettings
from ..data_models import ExistsResult, FileInfo, ListKind, ListOptions

logger = logging.getLogger(__name__)

FileContent = Union[bytes, bytearray, memoryview, str, BinaryIO, AsyncIterable[bytes]]
"""Accepted put_file contents: a byte buffer, text, or a readable byte stream."""


class Driver(ABC):
    """
    Operation contract shared by all storage backends.

    Logical paths are POSIX paths rooted at '/', relative to the disk root.
    Every operation is a coroutine; nothing is cached between calls.
    """

    driver_name: ClassVar[str] = ""
    settings_model: ClassVar[Type[DriverSettings]] = DriverSettings

    def __init__(self, name: str, settings: DriverSettings):
        """
        Args:
            name: Disk name this driver instance serves
            settings: Validated backend settings
        """
        self.name = name
        self.settings = settings

    @classmethod
    def from_config(cls, name: str, payload: dict) -> "Driver":
        """Validate raw settings with settings_model and build the driver."""
        return cls(name, cls.settings_model.model_validate(payload))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"

    # ========== Primitives ==========

    @abstractmethod
    async def test(self) -> bool:
        """Return whether the backend root is usable. Never raises."""

    @abstractmethod
    async def make_directory(self, path: str, mode: int = 0o777) -> bool:
        """Create path and all missing ancestors. Existing directories succeed."""

    @abstractmethod
    async def delete_directory(self, path: str) -> bool:
        """
        Recursively remove path.

        Raises:
            ForbiddenError: If path is the disk root
        """

    @abstractmethod
    async def empty_directory(self, path: str) -> bool:
        """Remove the contents of path, keeping (or creating) path itself."""

    @abstractmethod
    async def move_directory(self, src: str, dest: str) -> bool:
        """Move src to dest, replacing whatever dest held."""

    @abstractmethod
    async def copy_directory(self, src: str, dest: str) -> bool:
        """Copy src to dest, replacing whatever dest held."""

    @abstractmethod
    async def exists(self, path: str) -> ExistsResult:
        """Tri-state existence check. Absence is ExistsResult.NONE, not an error."""

    @abstractmethod
    async def stat(self, path: str) -> FileInfo:
        """
        Inspect one entry.

        Raises:
            NotFoundError: If path does not exist
        """

    @abstractmethod
    async def list(
        self,
        path: str,
        pattern: Optional[str] = None,
        options: Optional[ListOptions] = None,
    ) -> List[FileInfo]:
        """
        Expand path + pattern as a glob against the disk root.

        The result is unordered and never contains the root itself.
        """

    @abstractmethod
    async def put_file(self, path: str, content: FileContent) -> bool:
        """Write content to path, creating missing ancestor directories."""

    @abstractmethod
    async def get_file(self, path: str) -> bytes:
        """
        Read a whole file.

        Raises:
            NotFoundError: If path is not an existing file
        """

    @abstractmethod
    async def get_file_stream(self, path: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """
        Open a lazy, single-pass byte stream over a file.

        Raises:
            NotFoundError: If path is not an existing file
        """

    @abstractmethod
    async def copy_file(self, src: str, dest: str) -> bool:
        """
        Copy one file, creating missing ancestors of dest.

        Raises:
            NotFoundError: If src is not an existing file
        """

    @abstractmethod
    async def delete_file(self, path: str) -> bool:
        """Delete one file. Returns False when it was already missing."""

    # ========== Derived operations ==========

    async def directory_exists(self, path: str) -> bool:
        return await self.exists(path) is ExistsResult.DIRECTORY

    async def file_exists(self, path: str) -> bool:
        return await self.exists(path) is ExistsResult.FILE

    async def get_file_info(self, path: str) -> FileInfo:
        """Alias of stat()."""
        return await self.stat(path)

    async def list_directories(self, path: str, pattern: str = "/*/") -> List[FileInfo]:
        """List directories; the default pattern covers one level."""
        return await self.list(path, pattern, ListOptions(kind=ListKind.DIRECTORY))

    async def list_files(self, path: str, pattern: str = "/*") -> List[FileInfo]:
        """List files; the default pattern covers one level."""
        return await self.list(path, pattern, ListOptions(kind=ListKind.FILE))

    async def delete_files(self, path: str, pattern: str = "/*") -> List[str]:
        """
        Delete every file matched by path + pattern.

        Deletion is best effort: a failure on one file is logged and the batch
        continues.

        Returns:
            Filenames that were targeted, whether or not each delete succeeded
        """
        files = await self.list(path, pattern, ListOptions(kind=ListKind.FILE))
        targeted: List[str] = []
        for info in files:
            targeted.append(info.filename)
            try:
                deleted = await self.delete_file(info.filename)
            except OSError as e:
                logger.warning(
                    f"Failed to delete {info.filename}: {e}",
                    extra={"disk_name": self.name},
                )
                continue
            if not deleted:
                logger.warning(
                    f"File vanished before it could be deleted: {info.filename}",
                    extra={"disk_name": self.name},
                )
        return targeted

    def describe(self) -> Dict[str, Any]:
        """Summary of this disk for diagnostics."""
        return {
            "name": self.name,
            "driver": self.driver_name,
            "settings": self.settings.model_dump(mode="json"),
        }
