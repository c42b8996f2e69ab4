"""
Data models for diskstore.

This module defines the records and enums shared by every driver: the
FileInfo metadata snapshot, entry kinds, the tri-state existence result and
listing options.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class FileKind(str, Enum):
    """Kind of an existing filesystem entry."""
    FILE = "FILE"
    DIRECTORY = "DIRECTORY"


class ExistsResult(str, Enum):
    """Outcome of an existence check. NONE is a valid answer, not an error."""
    FILE = "FILE"
    DIRECTORY = "DIRECTORY"
    NONE = "NONE"

    def __bool__(self) -> bool:
        return self is not ExistsResult.NONE


class ListKind(str, Enum):
    """Which entry kinds a listing keeps."""
    FILE = "FILE"
    DIRECTORY = "DIRECTORY"
    BOTH = "BOTH"


@dataclass(frozen=True)
class ListOptions:
    """Options for Driver.list()."""
    kind: ListKind = ListKind.BOTH

    def __post_init__(self):
        # Accept plain strings ("FILE") as well as enum members
        if not isinstance(self.kind, ListKind):
            object.__setattr__(self, "kind", ListKind(str(self.kind).upper()))

    def accepts(self, kind: FileKind) -> bool:
        if self.kind is ListKind.BOTH:
            return True
        return self.kind.value == kind.value


@dataclass(frozen=True)
class FileInfo:
    """
    Immutable snapshot of one filesystem entry at inspection time.

    A FileInfo only ever describes an entry that existed when it was built;
    absence is reported by NotFoundError, never by a record.
    """
    filename: str  # Logical, '/'-anchored path on the disk
    path: str  # Logical parent directory of filename
    basename: str
    extension: str  # Includes the leading dot, "" when none
    kind: FileKind
    size: int
    created_at: datetime
    modified_at: datetime
    mime: Optional[str] = None
    content_type: Optional[str] = None
    resolved_path: Optional[Path] = None  # Host path actually touched
    disk: Optional[str] = None
    exists: bool = field(default=True, init=False)

    @property
    def is_file(self) -> bool:
        return self.kind is FileKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    def __str__(self) -> str:
        type_str = "dir" if self.is_dir else "file"
        return f"FileInfo({type_str}: {self.filename}, {self.size} bytes)"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        result = {
            "filename": self.filename,
            "path": self.path,
            "basename": self.basename,
            "extension": self.extension,
            "type": self.kind.value,
            "size": self.size,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
            "exists": self.exists,
        }
        if self.mime:
            result["mime"] = self.mime
        if self.content_type:
            result["content_type"] = self.content_type
        if self.resolved_path is not None:
            result["resolved_path"] = str(self.resolved_path)
        if self.disk:
            result["disk"] = self.disk
        return result
