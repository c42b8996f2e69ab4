"""Local filesystem driver confined to a root directory on the host."""

from __future__ import annotations

import asyncio
import glob
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from stat import S_ISDIR, S_ISREG
from typing import AsyncIterator, List, Optional, Tuple

import aiofiles

from ..config import LocalDiskSettings
from ..data_models import ExistsResult, FileInfo, FileKind, ListOptions
from ..exceptions import ForbiddenError, NotFoundError, PathTraversalError
from ..utils import lookup_mime
from .base import Driver, FileContent

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalDisk(Driver):
    """
    Driver for a directory on the local filesystem.

    Every logical path is resolved inside settings.root; '..' segments that
    would climb above the root raise PathTraversalError, and so do symlinks
    leading outside the root unless follow_symlinks is enabled.

    Example:
        >>> disk = LocalDisk("default", LocalDiskSettings(root="/tmp/store", create_root=True))
        >>> await disk.put_file("/docs/readme.txt", "hello")
        >>> disk.resolve_path("/docs/readme.txt")
        PosixPath('/tmp/store/docs/readme.txt')
    """

    driver_name = "local"
    settings_model = LocalDiskSettings

    def __init__(self, name: str, settings: LocalDiskSettings):
        super().__init__(name, settings)
        self.root: Path = settings.root
        if settings.create_root:
            self.root.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Local disk '{name}' rooted at {self.root}", extra={"disk_name": name})

    # ========== Path resolution ==========

    @staticmethod
    def _split(path: Optional[str], keep_trailing: bool = False) -> Tuple[List[str], bool]:
        """
        Normalize a logical path into root-relative segments.

        Returns:
            (segments, trailing_slash)

        Raises:
            ValueError: If '..' climbs above the root
        """
        text = str(path or "").replace("\\", "/")
        trailing = keep_trailing and text.endswith("/") and text.strip("/") != ""

        segments: List[str] = []
        for part in text.split("/"):
            if part in ("", "."):
                continue
            if part == "..":
                if not segments:
                    raise ValueError(path)
                segments.pop()
                continue
            segments.append(part)
        return segments, trailing

    def _segments(self, path: Optional[str]) -> List[str]:
        try:
            segments, _ = self._split(path)
        except ValueError:
            raise PathTraversalError(
                f"Path escapes disk root: {path}", disk_name=self.name, path=str(path)
            ) from None
        return segments

    def _confine(self, host: Path, logical: str) -> Path:
        """Check that host stays under the root once symlinks are followed."""
        if self.settings.follow_symlinks:
            return host
        resolved = host.resolve(strict=False)
        try:
            resolved.relative_to(self.root)
        except ValueError as exc:
            raise PathTraversalError(
                f"Resolved path escapes disk root: {logical}",
                resolved=str(resolved),
                disk_name=self.name,
                path=logical,
            ) from exc
        return host

    def resolve_path(self, path: Optional[str]) -> Path:
        """
        Resolve a logical path to a host path inside the root.

        An empty path or '/' resolves to the root itself.

        Raises:
            PathTraversalError: If the path would escape the root
        """
        segments = self._segments(path)
        host = self.root.joinpath(*segments) if segments else self.root
        return self._confine(host, self.to_logical(segments))

    @staticmethod
    def to_logical(segments: List[str]) -> str:
        return "/" + "/".join(segments)

    def _is_root(self, path: Optional[str]) -> bool:
        return not self._segments(path)

    # ========== Inspection ==========

    def _build_info(self, host: Path, logical: str) -> FileInfo:
        st = host.stat()
        is_dir = host.is_dir()
        pure = PurePosixPath(logical)
        mime, content_type = (None, None) if is_dir else lookup_mime(pure.name)
        return FileInfo(
            filename=logical,
            path=str(pure.parent),
            basename=pure.name,
            extension=pure.suffix,
            kind=FileKind.DIRECTORY if is_dir else FileKind.FILE,
            size=int(st.st_size),
            created_at=datetime.fromtimestamp(st.st_ctime, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            mime=mime,
            content_type=content_type,
            resolved_path=host,
            disk=self.name,
        )

    async def test(self) -> bool:
        try:
            return await asyncio.to_thread(
                lambda: self.root.is_dir() and os.access(self.root, os.R_OK | os.W_OK)
            )
        except OSError as e:
            logger.warning(f"Disk root {self.root} is not usable: {e}", extra={"disk_name": self.name})
            return False

    async def exists(self, path: str) -> ExistsResult:
        host = self.resolve_path(path)
        try:
            st = await asyncio.to_thread(host.stat)
        except (FileNotFoundError, NotADirectoryError):
            return ExistsResult.NONE
        if S_ISDIR(st.st_mode):
            return ExistsResult.DIRECTORY
        if S_ISREG(st.st_mode):
            return ExistsResult.FILE
        return ExistsResult.NONE

    async def stat(self, path: str) -> FileInfo:
        segments = self._segments(path)
        logical = self.to_logical(segments)
        host = self.resolve_path(logical)
        try:
            return await asyncio.to_thread(self._build_info, host, logical)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFoundError(
                f"No such file or directory: {logical}", disk_name=self.name, path=logical
            ) from e

    # ========== Listing ==========

    def _glob_pattern(self, path: str, pattern: Optional[str]) -> str:
        """Compose path + pattern into a root-relative glob expression."""
        combined = "/" + f"{path or ''}{pattern or ''}".lstrip("/")
        try:
            segments, trailing = self._split(combined, keep_trailing=True)
        except ValueError:
            raise PathTraversalError(
                f"Listing pattern escapes disk root: {combined}",
                disk_name=self.name,
                path=combined,
            ) from None
        return "/".join(segments) + ("/" if trailing else "")

    def _list_sync(self, rel_pattern: str, options: ListOptions) -> List[FileInfo]:
        matches = glob.glob(rel_pattern, root_dir=self.root, recursive=True)

        results: List[FileInfo] = []
        seen = set()
        for match in matches:
            segments = [p for p in match.replace(os.sep, "/").split("/") if p not in ("", ".")]
            if not segments:
                continue  # the root itself is never listed
            logical = self.to_logical(segments)
            if logical in seen:
                continue
            seen.add(logical)

            host = self.root.joinpath(*segments)
            try:
                self._confine(host, logical)
            except PathTraversalError:
                logger.debug(f"Skipping {logical}: links outside the root", extra={"disk_name": self.name})
                continue

            try:
                info = self._build_info(host, logical)
            except FileNotFoundError:
                continue  # removed between expansion and stat
            if options.accepts(info.kind):
                results.append(info)
        return results

    async def list(
        self,
        path: str,
        pattern: Optional[str] = None,
        options: Optional[ListOptions] = None,
    ) -> List[FileInfo]:
        options = options or ListOptions()
        rel_pattern = self._glob_pattern(path, pattern)
        if not rel_pattern.strip("/"):
            return []
        results = await asyncio.to_thread(self._list_sync, rel_pattern, options)
        logger.debug(
            f"Listed '{rel_pattern}' ({options.kind.value}): {len(results)} entries",
            extra={"disk_name": self.name},
        )
        return results

    # ========== Directory operations ==========

    async def make_directory(self, path: str, mode: int = 0o777) -> bool:
        host = self.resolve_path(path)
        await asyncio.to_thread(host.mkdir, mode=mode, parents=True, exist_ok=True)
        return True

    def _forbid_root(self, path: str, operation: str) -> None:
        if self._is_root(path):
            raise ForbiddenError(
                f"Cannot {operation} the root directory of disk '{self.name}'",
                disk_name=self.name,
                path="/",
            )

    @staticmethod
    def _remove_sync(host: Path) -> None:
        if host.is_dir() and not host.is_symlink():
            shutil.rmtree(host)
        elif host.exists() or host.is_symlink():
            host.unlink()

    async def delete_directory(self, path: str) -> bool:
        self._forbid_root(path, "delete")
        host = self.resolve_path(path)
        await asyncio.to_thread(self._remove_sync, host)
        logger.debug(f"Deleted directory {path}", extra={"disk_name": self.name})
        return True

    async def empty_directory(self, path: str) -> bool:
        host = self.resolve_path(path)

        def _empty() -> None:
            if not host.exists():
                host.mkdir(parents=True, exist_ok=True)
                return
            for child in host.iterdir():
                self._remove_sync(child)

        await asyncio.to_thread(_empty)
        return True

    def _forbid_nested(self, src: str, dest: str) -> None:
        src_parts = self._segments(src)
        dest_parts = self._segments(dest)
        if dest_parts[: len(src_parts)] == src_parts:
            raise ForbiddenError(
                f"Cannot place {src} inside itself at {dest}",
                disk_name=self.name,
                path=dest,
            )
        # Replacing an ancestor of src would remove src before it is read
        if src_parts[: len(dest_parts)] == dest_parts:
            raise ForbiddenError(
                f"Cannot replace {dest} with its own descendant {src}",
                disk_name=self.name,
                path=dest,
            )

    def _require_source(self, src: str) -> Path:
        host = self.resolve_path(src)
        if not host.exists():
            raise NotFoundError(
                f"Source does not exist: {src}", disk_name=self.name, path=src
            )
        return host

    async def move_directory(self, src: str, dest: str) -> bool:
        self._forbid_root(src, "move")
        self._forbid_root(dest, "overwrite")
        self._forbid_nested(src, dest)
        src_host = self._require_source(src)
        dest_host = self.resolve_path(dest)

        def _move() -> None:
            self._remove_sync(dest_host)
            dest_host.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(src_host), str(dest_host))

        await asyncio.to_thread(_move)
        logger.debug(f"Moved {src} -> {dest}", extra={"disk_name": self.name})
        return True

    async def copy_directory(self, src: str, dest: str) -> bool:
        self._forbid_root(dest, "overwrite")
        self._forbid_nested(src, dest)
        src_host = self._require_source(src)
        dest_host = self.resolve_path(dest)

        def _copy() -> None:
            self._remove_sync(dest_host)
            dest_host.parent.mkdir(parents=True, exist_ok=True)
            if src_host.is_dir():
                shutil.copytree(src_host, dest_host, symlinks=True)
            else:
                shutil.copy2(src_host, dest_host)

        await asyncio.to_thread(_copy)
        logger.debug(f"Copied {src} -> {dest}", extra={"disk_name": self.name})
        return True

    # ========== File operations ==========

    async def put_file(self, path: str, content: FileContent) -> bool:
        if isinstance(content, str):
            content = content.encode("utf-8")
        if not (
            isinstance(content, (bytes, bytearray, memoryview))
            or hasattr(content, "__aiter__")
            or hasattr(content, "read")
        ):
            raise TypeError(
                f"Unsupported content type for put_file: {type(content).__name__}"
            )

        host = self.resolve_path(path)
        await asyncio.to_thread(host.parent.mkdir, parents=True, exist_ok=True)

        try:
            async with aiofiles.open(host, "wb") as f:
                if isinstance(content, (bytes, bytearray, memoryview)):
                    await f.write(bytes(content))
                elif hasattr(content, "__aiter__"):
                    async for chunk in content:
                        await f.write(chunk)
                elif hasattr(content, "read"):
                    while True:
                        chunk = await asyncio.to_thread(content.read, DEFAULT_CHUNK_SIZE)
                        if not chunk:
                            break
                        await f.write(chunk)
        except BaseException:
            # A failed or cancelled write leaves no partial file behind
            await asyncio.to_thread(host.unlink, missing_ok=True)
            raise

        logger.debug(f"Wrote {path}", extra={"disk_name": self.name})
        return True

    def _require_file(self, path: str) -> Path:
        host = self.resolve_path(path)
        if not host.is_file():
            raise NotFoundError(f"No such file: {path}", disk_name=self.name, path=path)
        return host

    async def get_file(self, path: str) -> bytes:
        host = self._require_file(path)
        try:
            async with aiofiles.open(host, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"No such file: {path}", disk_name=self.name, path=path) from e

    async def get_file_stream(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        host = self._require_file(path)
        return _iter_file(host, chunk_size)

    async def copy_file(self, src: str, dest: str) -> bool:
        src_host = self._require_file(src)
        dest_host = self.resolve_path(dest)

        def _copy() -> None:
            dest_host.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src_host, dest_host)

        await asyncio.to_thread(_copy)
        logger.debug(f"Copied file {src} -> {dest}", extra={"disk_name": self.name})
        return True

    async def delete_file(self, path: str) -> bool:
        host = self.resolve_path(path)
        try:
            await asyncio.to_thread(host.unlink)
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted file {path}", extra={"disk_name": self.name})
        return True


async def _iter_file(host: Path, chunk_size: int) -> AsyncIterator[bytes]:
    async with aiofiles.open(host, "rb") as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            yield chunk
