"""
Configuration for diskstore.

This module defines the declarative storage configuration consumed by
StorageManager: a default disk name plus an ordered list of disk definitions.
Each definition names a driver; the driver's own settings model validates
the backend-specific fields and rejects anything it does not declare.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import DiskConfigurationError

CONFIG_ENV_VAR = "DISKSTORE_CONFIG"
"""Environment variable naming a YAML config file for StorageConfig.load()."""

DEFAULT_DRIVER = "local"


class DiskConfig(BaseModel):
    """
    One disk definition.

    Examples:
        DiskConfig(name="default", root="storage")
        DiskConfig(name="uploads", driver="local", root="/srv/uploads",
                   config={"create_root": True})
    """
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    driver: str = DEFAULT_DRIVER
    root: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    """Backend-specific settings, validated by the driver's settings model."""

    def settings_payload(self) -> Dict[str, Any]:
        """Merge root into the backend-specific settings."""
        payload = dict(self.config)
        if self.root is not None:
            if "root" in payload and payload["root"] != self.root:
                raise DiskConfigurationError(
                    f"Disk '{self.name}' sets root both at top level and in config",
                    config_field="root",
                    disk_name=self.name,
                )
            payload["root"] = self.root
        return payload


class StorageConfig(BaseModel):
    """
    Top-level storage configuration.

    The 'disks' section accepts either a list of definitions or a mapping of
    disk name to definition:

        default: default
        disks:
          default:
            driver: local
            root: storage
    """
    model_config = ConfigDict(extra="forbid")

    default: str = "default"
    disks: List[DiskConfig] = Field(default_factory=list)

    @field_validator("disks", mode="before")
    @classmethod
    def _disks_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            disks = []
            for name, definition in value.items():
                definition = dict(definition or {})
                if definition.setdefault("name", name) != name:
                    raise ValueError(
                        f"Disk key '{name}' does not match its name field '{definition['name']}'"
                    )
                disks.append(definition)
            return disks
        return value

    @model_validator(mode="after")
    def _check_unique_names(self) -> "StorageConfig":
        seen = set()
        for disk in self.disks:
            if disk.name in seen:
                raise ValueError(f"Duplicate disk name: '{disk.name}'")
            seen.add(disk.name)
        return self

    def get_disk(self, name: str) -> Optional[DiskConfig]:
        for disk in self.disks:
            if disk.name == name:
                return disk
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        """
        Build a configuration from a plain mapping.

        Raises:
            DiskConfigurationError: If the mapping does not validate
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DiskConfigurationError(
                f"Invalid storage configuration: {e}",
                context={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "StorageConfig":
        """
        Load a configuration from a YAML file.

        Args:
            config_path: Path to the YAML file

        Returns:
            StorageConfig instance
        """
        config_path = Path(config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise DiskConfigurationError(
                f"Storage configuration in {config_path} must be a mapping, got {type(data).__name__}"
            )
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "StorageConfig":
        """
        Load configuration from an explicit path or from $DISKSTORE_CONFIG.

        Raises:
            DiskConfigurationError: If neither a path nor the variable is set
        """
        if config_path is None:
            config_path = os.getenv(CONFIG_ENV_VAR)
        if not config_path:
            raise DiskConfigurationError(
                f"No storage configuration given and {CONFIG_ENV_VAR} is not set",
                config_field=CONFIG_ENV_VAR,
            )
        return cls.from_yaml(config_path)


# === Backend settings ===

class DriverSettings(BaseModel):
    """Base class for backend-specific settings. Unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid", frozen=True)


class LocalDiskSettings(DriverSettings):
    """Settings for the local driver."""

    root: Path
    """Host directory the disk is confined to. Relative roots resolve against the cwd."""

    create_root: bool = False
    """Create the root directory when the disk is built."""

    follow_symlinks: bool = False
    """Allow symlinks inside the root that point outside it."""

    @field_validator("root", mode="before")
    @classmethod
    def _non_empty_root(cls, value: Any) -> Any:
        if value is None or str(value).strip() == "":
            raise ValueError("root must be a non-empty path")
        return value

    @field_validator("root")
    @classmethod
    def _absolute_root(cls, value: Path) -> Path:
        return value.expanduser().resolve()
