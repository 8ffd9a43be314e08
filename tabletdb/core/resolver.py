"""Resolution of device paths, USB IDs, and product names to tablet records."""

from __future__ import annotations

import re

from tabletdb.core import match as match_codec
from tabletdb.core.database import DeviceDatabase
from tabletdb.core.errors import (
    InvalidArgumentError,
    InvalidDatabaseError,
    InvalidPathError,
    UnknownModelError,
    UnsupportedBusError,
)
from tabletdb.core.model import GENERIC_MATCH, BusType, Device
from tabletdb.enumerators.base import DeviceEnumerator, DeviceNode

# PRODUCT=5/56a/81/100 -> bus type, vendor, product, version.
_PRODUCT_RE = re.compile(r"^\s*[+-]?\d+/([0-9a-fA-F]+)/([0-9a-fA-F]+)/[+-]?\d+")
_TRUE_VALUES = {"1", "true"}


def _check_db(db: DeviceDatabase | None) -> DeviceDatabase:
    if db is None:
        raise InvalidDatabaseError("Database is None")
    if db.closed:
        raise InvalidDatabaseError("Database has been closed")
    return db


def _hex_property(node: DeviceNode, name: str) -> int:
    value = node.properties.get(name)
    if not value:
        raise UnknownModelError(f"Device is missing the {name} property")
    try:
        return int(value.strip(), 16)
    except ValueError as exc:
        raise UnknownModelError(f"Invalid {name} property '{value}'") from exc


def device_info_from_node(node: DeviceNode) -> tuple[int, int, BusType]:
    """Extract (vendor_id, product_id, bus) from an enumerated input device."""
    if node.properties.get("ID_INPUT_TABLET", "").strip().lower() not in _TRUE_VALUES:
        raise InvalidPathError("Device is not a tablet")

    bus_str = node.properties.get("ID_BUS")
    if bus_str is None:
        # Bluetooth tablets carry their IDs on the parent device.
        parent = node.parent
        if parent is None:
            raise UnknownModelError("Bluetooth device has no parent to read IDs from")
        node = parent
        bus_str = "bluetooth"

    bus = match_codec.bus_from_str(bus_str)
    if bus is BusType.USB:
        vendor_id = _hex_property(node, "ID_VENDOR_ID")
        product_id = _hex_property(node, "ID_MODEL_ID")
    elif bus is BusType.BLUETOOTH:
        product = node.properties.get("PRODUCT") or ""
        parsed = _PRODUCT_RE.match(product)
        if parsed is None:
            raise UnknownModelError(f"Could not parse Bluetooth PRODUCT '{product}'")
        vendor_id, product_id = int(parsed.group(1), 16), int(parsed.group(2), 16)
    elif bus is BusType.SERIAL:
        # TODO: read IDs of serial (ISDV4) tablets from the serial port's sysfs node.
        raise UnsupportedBusError("Unimplemented serial bus")
    else:
        raise UnsupportedBusError(f"Unsupported bus '{bus_str}'")

    if vendor_id == 0 or product_id == 0:
        raise UnknownModelError(f"Device reports vendor/product 0x{vendor_id:x}/0x{product_id:x}")
    return vendor_id, product_id, bus


def resolve_by_ids(
    db: DeviceDatabase | None,
    vendor_id: int,
    product_id: int,
    bus: BusType,
    *,
    fallback: bool = False,
) -> Device:
    db = _check_db(db)
    if bus is BusType.UNKNOWN:
        raise InvalidArgumentError("Bus type is unknown")
    if vendor_id < 0 or product_id < 0:
        raise InvalidArgumentError(f"Invalid vendor/product ID {vendor_id}/{product_id}")
    device = db.lookup_device(match_codec.encode(bus, vendor_id, product_id))
    if device is None and fallback:
        device = db.lookup_device(GENERIC_MATCH)
    if device is None:
        raise UnknownModelError(
            f"No tablet known for {bus} vendor 0x{vendor_id:04x} product 0x{product_id:04x}"
        )
    return device.clone()


def resolve_by_path(
    db: DeviceDatabase | None,
    path: str | None,
    *,
    fallback: bool = False,
    enumerator: DeviceEnumerator | None = None,
) -> Device:
    if not path:
        raise InvalidArgumentError("Device path is empty")
    db = _check_db(db)

    if enumerator is None:
        from tabletdb.enumerators.udev import UdevEnumerator

        enumerator = UdevEnumerator()

    node = enumerator.lookup(path)
    if node is None:
        raise InvalidPathError(f"Could not find device '{path}'")
    try:
        vendor_id, product_id, bus = device_info_from_node(node)
    except InvalidPathError as exc:
        raise InvalidPathError(f"Device '{path}': {exc}") from exc

    return resolve_by_ids(db, vendor_id, product_id, bus, fallback=fallback)


def resolve_by_usb_id(db: DeviceDatabase | None, vendor_id: int, product_id: int) -> Device:
    return resolve_by_ids(db, vendor_id, product_id, BusType.USB)


def resolve_by_name(db: DeviceDatabase | None, name: str | None) -> Device:
    """Find a tablet by exact product name.

    If several tablets share a name, which one is returned is unspecified.
    """
    if not name:
        raise InvalidArgumentError("Product name is empty")
    db = _check_db(db)
    for device in db.iter_devices():
        if device.product == name:
            return device.clone()
    raise UnknownModelError(f"No tablet named '{name}'")
