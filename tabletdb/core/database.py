"""The in-memory tablet and stylus database."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType

from tabletdb.core import match as match_codec
from tabletdb.core.descriptor_loader import parse_device, parse_stylus_entries
from tabletdb.core.errors import DescriptorParseError, InvalidDatabaseError, MatchKeyError
from tabletdb.core.model import Device, Stylus

SUFFIX = ".tablet"
STYLUS_DATA_FILE = "wacom.stylus"
DATADIR_ENV = "TABLETDB_DATADIR"
LOGGER = logging.getLogger(__name__)


class DeviceDatabase:
    """Read-only index of tablet descriptors by match key and styli by ID.

    The database is filled once by :func:`build_database` and never changes
    afterwards, so any number of threads may read from it. There is no
    locking: ``close()`` must not race with readers.
    """

    def __init__(
        self,
        devices: Mapping[str, Device] | None = None,
        styli: Mapping[int, Stylus] | None = None,
        warnings: Iterable[str] = (),
    ) -> None:
        self._devices: dict[str, Device] = dict(devices or {})
        self._styli: dict[int, Stylus] = dict(styli or {})
        self.warnings = tuple(warnings)
        self._closed = False

    def __enter__(self) -> DeviceDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        self._check_open()
        return len(self._devices)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def devices(self) -> Mapping[str, Device]:
        self._check_open()
        return MappingProxyType(self._devices)

    @property
    def styli(self) -> Mapping[int, Stylus]:
        self._check_open()
        return MappingProxyType(self._styli)

    def iter_devices(self) -> Iterator[Device]:
        # Dict order; callers must not rely on it.
        return iter(self.devices.values())

    def lookup_device(self, match: str | None) -> Device | None:
        self._check_open()
        if not match:
            return None
        try:
            key = match_codec.normalize(match)
        except MatchKeyError:
            return None
        return self._devices.get(key)

    def lookup_stylus(self, stylus_id: int) -> Stylus | None:
        self._check_open()
        return self._styli.get(stylus_id)

    def close(self) -> None:
        self._devices.clear()
        self._styli.clear()
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise InvalidDatabaseError("Database has been closed")


def _warn(warnings: list[str], message: str) -> None:
    LOGGER.warning(message)
    warnings.append(message)


def _iter_tablet_paths(directory: Path | Traversable) -> list[Path | Traversable]:
    if not directory.is_dir():
        return []
    paths = [
        item
        for item in directory.iterdir()
        if not item.name.startswith(".") and item.name.endswith(SUFFIX) and len(item.name) > len(SUFFIX)
    ]
    return sorted(paths, key=lambda p: p.name)


def _insert_device(
    devices: dict[str, Device],
    device: Device,
    source: Path | Traversable,
    warnings: list[str],
) -> None:
    """Insert or replace; a later file wins over an earlier one with the same key."""
    if device.match in devices:
        _warn(warnings, f"Device '{device.match}' from {source} overrides an earlier definition")
    devices[device.match] = device


def _load_tablets(
    directory: Path | Traversable,
    devices: dict[str, Device],
    warnings: list[str],
) -> None:
    for path in _iter_tablet_paths(directory):
        try:
            device = parse_device(path, warnings=warnings)
        except DescriptorParseError as exc:
            _warn(warnings, f"Skipping {path}: {exc}")
            continue
        if not device.match:
            _warn(warnings, f"Skipping {path}: no usable DeviceMatch")
            continue
        _insert_device(devices, device, path, warnings)


def build_database(
    directory: Path | Traversable,
    stylus_file: Path | Traversable,
    *,
    overlay_dirs: Iterable[Path | Traversable] = (),
) -> DeviceDatabase:
    """Scan ``directory`` for .tablet files and load ``stylus_file``.

    Files are read in filename order, then the ``overlay_dirs`` in turn.
    Unreadable files, devices without a match key and a missing stylus file
    are recorded as warnings; none of them fails the build.
    """
    warnings: list[str] = []
    devices: dict[str, Device] = {}

    _load_tablets(directory, devices, warnings)
    for overlay in overlay_dirs:
        _load_tablets(overlay, devices, warnings)

    try:
        styli = parse_stylus_entries(stylus_file, warnings=warnings)
    except DescriptorParseError as exc:
        _warn(warnings, f"No stylus definitions loaded: {exc}")
        styli = {}

    LOGGER.debug("Loaded %d tablets and %d styli", len(devices), len(styli))
    return DeviceDatabase(devices=devices, styli=styli, warnings=warnings)


def default_data_dir() -> Path | Traversable:
    override = os.environ.get(DATADIR_ENV)
    if override:
        return Path(override)
    return resources.files("tabletdb.data")


def user_tablet_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "tabletdb/tablets", xdg_data / "tabletdb/tablets"


def load_database(
    datadir: Path | Traversable | None = None,
    stylus_file: Path | Traversable | None = None,
) -> DeviceDatabase:
    """Build the database from its configured location.

    Without an explicit ``datadir`` the packaged data (or ``$TABLETDB_DATADIR``)
    is used and the per-user tablet directories are layered on top of it.
    """
    overlay_dirs: tuple[Path, ...] = ()
    if datadir is None:
        datadir = default_data_dir()
        overlay_dirs = user_tablet_dirs()
    if stylus_file is None:
        stylus_file = datadir.joinpath(STYLUS_DATA_FILE)
    return build_database(datadir, stylus_file, overlay_dirs=overlay_dirs)
