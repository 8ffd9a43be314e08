"""Conversion between match-key strings and (bus, vendor, product) tuples."""

from __future__ import annotations

import re

from tabletdb.core.errors import MatchKeyError
from tabletdb.core.model import GENERIC_MATCH, BusType

# "<bus>:<hex vendor>:<hex product>", hex fields with an optional 0x prefix.
_MATCH_RE = re.compile(
    r"^(?P<bus>[^:]{1,63}):\s*(?:0[xX])?(?P<vendor>[0-9a-fA-F]+):\s*(?:0[xX])?(?P<product>[0-9a-fA-F]+)$"
)


def bus_to_str(bus: BusType) -> str:
    return bus.value


def bus_from_str(value: str | None) -> BusType:
    return BusType.from_str(value)


def encode(bus: BusType, vendor_id: int, product_id: int) -> str:
    if bus is BusType.UNKNOWN:
        raise MatchKeyError("Cannot build a match key for an unknown bus")
    if vendor_id < 0 or product_id < 0:
        raise MatchKeyError(f"Invalid vendor/product ID {vendor_id}/{product_id}")
    return f"{bus_to_str(bus)}:0x{vendor_id:x}:0x{product_id:x}"


def decode(match: str) -> tuple[BusType, int, int]:
    parsed = _MATCH_RE.match(match.strip())
    if parsed is None:
        raise MatchKeyError(f"Malformed match key '{match}'")
    bus = bus_from_str(parsed.group("bus"))
    if bus is BusType.UNKNOWN:
        raise MatchKeyError(f"Unknown bus '{parsed.group('bus')}' in match key '{match}'")
    return bus, int(parsed.group("vendor"), 16), int(parsed.group("product"), 16)


def normalize(match: str) -> str:
    """Return the canonical spelling of a match key.

    The generic sentinel is kept verbatim; anything else is decoded and
    re-encoded, so ``usb:0x056A:0x0081`` becomes ``usb:0x56a:0x81``.
    """
    if match == GENERIC_MATCH:
        return match
    return encode(*decode(match))
