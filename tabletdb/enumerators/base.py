"""Device enumeration interfaces."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class DeviceNode(Protocol):
    @property
    def properties(self) -> Mapping[str, str]:
        """Device properties, e.g. ID_BUS or ID_VENDOR_ID."""

    @property
    def parent(self) -> DeviceNode | None:
        """The parent device, if any."""


class DeviceEnumerator(Protocol):
    def lookup(self, path: str) -> DeviceNode | None:
        """Return the device behind a device file, or None if there is none."""
