"""Stable public API for building tooling on top of tabletdb.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from importlib.resources.abc import Traversable
from pathlib import Path

from tabletdb.core.database import DeviceDatabase, build_database, load_database
from tabletdb.core.errors import (
    DescriptorParseError,
    EnumeratorError,
    InvalidArgumentError,
    InvalidDatabaseError,
    InvalidPathError,
    MatchKeyError,
    TabletdbError,
    UnknownModelError,
    UnsupportedBusError,
)
from tabletdb.core.match import decode, encode
from tabletdb.core.model import (
    BusType,
    Device,
    DeviceClass,
    Feature,
    Stylus,
    StylusType,
)
from tabletdb.core.resolver import (
    resolve_by_ids,
    resolve_by_name,
    resolve_by_path,
    resolve_by_usb_id,
)
from tabletdb.enumerators.base import DeviceEnumerator

__all__ = [
    "TabletdbError",
    "DescriptorParseError",
    "EnumeratorError",
    "InvalidArgumentError",
    "InvalidDatabaseError",
    "InvalidPathError",
    "MatchKeyError",
    "UnknownModelError",
    "UnsupportedBusError",
    "BusType",
    "Device",
    "DeviceClass",
    "Feature",
    "Stylus",
    "StylusType",
    "DeviceDatabase",
    "DeviceEnumerator",
    "build_database",
    "decode",
    "encode",
    "Client",
]


class Client:
    """Public client for tablet lookups.

    A `Client` loads the database once and answers lookups by device path,
    USB ID, product name, or match key. Every device it returns is a private
    copy, and stays usable after the client is closed.
    """

    def __init__(
        self,
        *,
        datadir: Path | Traversable | None = None,
        stylus_file: Path | Traversable | None = None,
        enumerator: DeviceEnumerator | None = None,
    ) -> None:
        self._db = load_database(datadir, stylus_file)
        self._enumerator = enumerator

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def database(self) -> DeviceDatabase:
        return self._db

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._db.warnings

    def list_devices(self) -> list[Device]:
        return sorted(
            (device.clone() for device in self._db.iter_devices()),
            key=lambda d: (d.bus.value, d.vendor_id, d.product_id, d.match or ""),
        )

    def list_styli(self) -> list[Stylus]:
        return sorted(self._db.styli.values(), key=lambda s: s.id)

    def device_from_path(self, path: str, *, fallback: bool = False) -> Device:
        return resolve_by_path(self._db, path, fallback=fallback, enumerator=self._enumerator)

    def device_from_usbid(self, vendor_id: int, product_id: int) -> Device:
        return resolve_by_usb_id(self._db, vendor_id, product_id)

    def device_from_ids(
        self, vendor_id: int, product_id: int, bus: BusType, *, fallback: bool = False
    ) -> Device:
        return resolve_by_ids(self._db, vendor_id, product_id, bus, fallback=fallback)

    def device_from_name(self, name: str) -> Device:
        return resolve_by_name(self._db, name)

    def device_from_match(self, match: str) -> Device:
        device = self._db.lookup_device(match)
        if device is None:
            raise UnknownModelError(f"No tablet known for match '{match}'")
        return device.clone()

    def stylus(self, stylus_id: int) -> Stylus:
        stylus = self._db.lookup_stylus(stylus_id)
        if stylus is None:
            raise UnknownModelError(f"No stylus with ID 0x{stylus_id:x}")
        return stylus

    def close(self) -> None:
        self._db.close()
