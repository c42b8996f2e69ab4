"""
Tests for root confinement on LocalDisk.

This module tests:
- Logical path resolution onto the disk root
- Rejection of '..' traversal in every operation
- Symlinks leading outside the root
"""

import os

import pytest

from diskstore.config import LocalDiskSettings
from diskstore.drivers.local import LocalDisk
from diskstore.exceptions import ForbiddenError, PathTraversalError


TRAVERSAL_PATHS = [
    "/../../etc/passwd",
    "../outside.txt",
    "a/../../outside.txt",
    "/a/b/../../../outside.txt",
    "..\\..\\outside.txt",
    "/./../outside.txt",
]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sandbox(tmp_path):
    """Root directory plus a sibling directory that must stay untouched."""
    root = tmp_path / "root"
    outside = tmp_path / "outside"
    root.mkdir()
    outside.mkdir()
    (outside / "secret.txt").write_text("top secret")
    return root, outside


@pytest.fixture
def disk(sandbox):
    root, _ = sandbox
    return LocalDisk("jail", LocalDiskSettings(root=root))


# =============================================================================
# Resolution Tests
# =============================================================================

class TestResolvePath:
    """Tests for resolve_path()."""

    @pytest.mark.parametrize("logical", ["", "/", ".", "//", "/a/.."])
    def test_root_spellings(self, disk, logical):
        """Test that every spelling of the root resolves to the root."""
        assert disk.resolve_path(logical) == disk.root

    def test_leading_slash_is_optional(self, disk):
        """Test that '/a/b' and 'a/b' resolve identically."""
        assert disk.resolve_path("/a/b") == disk.resolve_path("a/b") == disk.root / "a" / "b"

    def test_inner_parent_segments_are_normalized(self, disk):
        """Test that '..' staying inside the root is allowed."""
        assert disk.resolve_path("/a/b/../c") == disk.root / "a" / "c"

    @pytest.mark.parametrize("logical", TRAVERSAL_PATHS)
    def test_traversal_is_rejected(self, disk, logical):
        """Test that climbing above the root raises PathTraversalError."""
        with pytest.raises(PathTraversalError) as exc_info:
            disk.resolve_path(logical)

        assert exc_info.value.disk_name == "jail"
        assert exc_info.value.error_code == "PATH_TRAVERSAL"

    def test_traversal_error_is_forbidden(self, disk):
        """Test that traversal errors are a kind of ForbiddenError."""
        with pytest.raises(ForbiddenError):
            disk.resolve_path("/../x")

    @pytest.mark.parametrize(
        "logical",
        ["/a/b/c", "x/../y", "/deep/./er/../path.txt", "a/b/../../c", "...", "/a..b/c"],
    )
    def test_valid_paths_stay_inside_root(self, disk, logical):
        """Test that well-formed paths always land under the root."""
        resolved = disk.resolve_path(logical)

        assert os.path.commonpath([resolved, disk.root]) == str(disk.root)


# =============================================================================
# Operation Confinement Tests
# =============================================================================

class TestOperationsAreConfined:
    """Every operation refuses traversal before touching the host."""

    @pytest.mark.asyncio
    async def test_put_file_does_not_escape(self, disk, sandbox):
        """Test that a write through '..' raises and creates nothing outside."""
        _, outside = sandbox

        with pytest.raises(PathTraversalError):
            await disk.put_file("/../outside/planted.txt", "pwned")

        assert not (outside / "planted.txt").exists()

    @pytest.mark.asyncio
    async def test_get_file_does_not_escape(self, disk):
        """Test that a read through '..' raises."""
        with pytest.raises(PathTraversalError):
            await disk.get_file("/../outside/secret.txt")

    @pytest.mark.asyncio
    async def test_delete_does_not_escape(self, disk, sandbox):
        """Test that deletes through '..' raise and leave the target."""
        _, outside = sandbox

        with pytest.raises(PathTraversalError):
            await disk.delete_file("/../outside/secret.txt")
        with pytest.raises(PathTraversalError):
            await disk.delete_directory("/../outside")

        assert (outside / "secret.txt").read_text() == "top secret"

    @pytest.mark.asyncio
    async def test_inspection_does_not_escape(self, disk):
        """Test that exists/stat refuse traversal instead of reporting on it."""
        with pytest.raises(PathTraversalError):
            await disk.exists("/../outside")
        with pytest.raises(PathTraversalError):
            await disk.stat("/../outside/secret.txt")

    @pytest.mark.asyncio
    async def test_copy_and_move_do_not_escape(self, disk, sandbox):
        """Test that copy and move refuse traversal on either side."""
        _, outside = sandbox
        await disk.put_file("/inside.txt", "inside")

        with pytest.raises(PathTraversalError):
            await disk.copy_file("/inside.txt", "/../outside/copied.txt")
        with pytest.raises(PathTraversalError):
            await disk.copy_file("/../outside/secret.txt", "/stolen.txt")
        with pytest.raises(PathTraversalError):
            await disk.move_directory("/../outside", "/moved")

        assert sorted(p.name for p in outside.iterdir()) == ["secret.txt"]


# =============================================================================
# Symlink Tests
# =============================================================================

class TestSymlinks:
    """Symlinks pointing outside the root."""

    @pytest.fixture
    def linked(self, sandbox):
        root, outside = sandbox
        (root / "link").symlink_to(outside, target_is_directory=True)
        return root

    @pytest.mark.asyncio
    async def test_escaping_symlink_is_rejected(self, disk, linked):
        """Test that a symlink out of the root cannot be read through."""
        with pytest.raises(PathTraversalError):
            await disk.get_file("/link/secret.txt")

    @pytest.mark.asyncio
    async def test_escaping_symlink_is_not_listed(self, disk, linked):
        """Test that listings skip entries that lead outside the root."""
        assert await disk.list_files("/link") == []
        assert "/link" not in {info.filename for info in await disk.list("/", "/*")}

    @pytest.mark.asyncio
    async def test_follow_symlinks_allows_escape(self, sandbox, linked):
        """Test that follow_symlinks opts into reading through the link."""
        root, _ = sandbox
        disk = LocalDisk("trusting", LocalDiskSettings(root=root, follow_symlinks=True))

        assert await disk.get_file("/link/secret.txt") == b"top secret"

    @pytest.mark.asyncio
    async def test_follow_symlinks_still_rejects_dotdot(self, sandbox):
        """Test that follow_symlinks does not relax '..' handling."""
        root, _ = sandbox
        disk = LocalDisk("trusting", LocalDiskSettings(root=root, follow_symlinks=True))

        with pytest.raises(PathTraversalError):
            await disk.get_file("/../outside/secret.txt")
