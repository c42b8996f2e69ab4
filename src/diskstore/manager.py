import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from pydantic import ValidationError

from .config import DiskConfig, StorageConfig
from .drivers.base import Driver
from .drivers.local import LocalDisk
from .exceptions import DiskConfigurationError, UnconfiguredDriverError, UnknownDiskError

logger = logging.getLogger(__name__)

DriverFactory = Union[Type[Driver], Callable[[str, Dict[str, Any]], Driver]]
"""A Driver subclass, or any callable taking (disk_name, settings_payload)."""


class StorageManager:
    """
    Registry of storage drivers and the disks built from them.

    Construction consumes a StorageConfig and builds every disk eagerly; a
    single unresolvable driver fails the whole construction. Afterwards the
    registry is read-only for normal use: disk(name) hands out the live
    driver instance.

    Examples:
        >>> storage = StorageManager({
        ...     "default": "default",
        ...     "disks": [{"name": "default", "driver": "local", "root": "storage"}],
        ... })
        >>> disk = storage.disk()
        >>> await disk.put_file("/hello.txt", "hi")
    """

    def __init__(self, config: Optional[Union[StorageConfig, Mapping[str, Any]]] = None):
        """
        Args:
            config: StorageConfig or an equivalent mapping. None builds an
                    empty registry whose default disk name is 'default'.

        Raises:
            DiskConfigurationError: If the configuration or a disk's settings are invalid
            UnconfiguredDriverError: If a disk names an unregistered driver
        """
        if config is None:
            config = StorageConfig()
        elif not isinstance(config, StorageConfig):
            config = StorageConfig.from_dict(dict(config))

        self.config = config
        self.default_disk_name = config.default
        self._drivers: Dict[str, DriverFactory] = {}
        self._disks: Dict[str, Driver] = {}
        self._lock = threading.Lock()

        self.add_driver(LocalDisk.driver_name, LocalDisk)

        for definition in config.disks:
            self.add_disk(definition)

        logger.info(
            f"StorageManager ready with {len(self._disks)} disk(s), default '{self.default_disk_name}'"
        )

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "StorageManager":
        return cls(StorageConfig.from_yaml(config_path))

    @classmethod
    def from_env(cls) -> "StorageManager":
        """Build from the YAML file named by $DISKSTORE_CONFIG."""
        return cls(StorageConfig.load())

    # ========== Drivers ==========

    def add_driver(self, name: str, factory: DriverFactory) -> None:
        """
        Register a driver constructor under a name.

        Disks that were already built keep the driver they were built with.
        """
        if not callable(factory):
            raise TypeError(f"Driver factory for '{name}' must be callable")
        with self._lock:
            replaced = name in self._drivers
            self._drivers[name] = factory
        logger.info(
            f"Driver {'replaced' if replaced else 'registered'}: {name} "
            f"({getattr(factory, '__name__', type(factory).__name__)})"
        )

    def resolve_driver(self, name: str) -> DriverFactory:
        """
        Raises:
            UnconfiguredDriverError: If no driver is registered under name
        """
        factory = self._drivers.get(name)
        if factory is None:
            raise UnconfiguredDriverError(
                f"The driver {name} is not configured!", driver_name=name
            )
        return factory

    @property
    def drivers(self) -> List[str]:
        return list(self._drivers.keys())

    # ========== Disks ==========

    def add_disk(self, definition: Union[DiskConfig, Mapping[str, Any]]) -> Driver:
        """
        Build a disk from its definition and register it.

        Returns:
            The live driver instance for the new disk
        """
        if not isinstance(definition, DiskConfig):
            try:
                definition = DiskConfig.model_validate(dict(definition))
            except ValidationError as e:
                raise DiskConfigurationError(
                    f"Invalid disk definition: {e}",
                    context={"errors": e.errors(include_url=False)},
                ) from e

        factory = self.resolve_driver(definition.driver)
        payload = definition.settings_payload()

        try:
            if isinstance(factory, type) and issubclass(factory, Driver):
                disk = factory.from_config(definition.name, payload)
            else:
                disk = factory(definition.name, payload)
        except ValidationError as e:
            raise DiskConfigurationError(
                f"Invalid settings for disk '{definition.name}' (driver '{definition.driver}'): {e}",
                disk_name=definition.name,
                context={"errors": e.errors(include_url=False)},
            ) from e

        if not isinstance(disk, Driver):
            raise DiskConfigurationError(
                f"Driver '{definition.driver}' built {type(disk).__name__}, not a Driver",
                disk_name=definition.name,
                config_field="driver",
            )

        self.add_disk_with_driver(definition.name, disk)
        return disk

    def add_disk_with_driver(self, name: str, driver: Driver) -> None:
        """
        Register an already-built driver instance as a disk.

        Raises:
            DiskConfigurationError: If name is taken by a different instance
        """
        with self._lock:
            existing = self._disks.get(name)
            if existing is not None and existing is not driver:
                raise DiskConfigurationError(
                    f"Disk name '{name}' already exists and refers to a different driver instance.",
                    disk_name=name,
                    config_field="name",
                )
            self._disks[name] = driver
        logger.info(
            f"Disk registered: {name} (Driver: {driver.__class__.__name__})",
            extra={"disk_name": name},
        )

    def disk(self, name: Optional[str] = None) -> Driver:
        """
        Resolve a disk by name; no name means the configured default disk.

        Raises:
            UnknownDiskError: If the name is not configured
        """
        name = name or self.default_disk_name
        disk = self._disks.get(name)
        if disk is None:
            raise UnknownDiskError(
                f"The disk {name} is not configured!",
                available=sorted(self._disks.keys()),
                disk_name=name,
            )
        return disk

    def has_disk(self, name: str) -> bool:
        return name in self._disks

    def list_disks(self) -> List[str]:
        return list(self._disks.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._disks

    def __repr__(self) -> str:
        return (
            f"StorageManager(default={self.default_disk_name!r}, "
            f"disks={self.list_disks()}, drivers={self.drivers})"
        )
