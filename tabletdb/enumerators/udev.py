"""udev-backed device enumeration using pyudev."""

from __future__ import annotations

from tabletdb.core.errors import EnumeratorError
from tabletdb.enumerators.base import DeviceNode


class UdevEnumerator:
    def __init__(self) -> None:
        self._context = None

    def lookup(self, path: str) -> DeviceNode | None:
        try:
            import pyudev  # type: ignore
        except ImportError as exc:  # pragma: no cover - import failure path
            raise EnumeratorError(
                "Path lookups require 'pyudev'. Install dependency and retry."
            ) from exc

        if self._context is None:
            try:
                self._context = pyudev.Context()
            except OSError as exc:
                raise EnumeratorError(f"Could not open udev context: {exc}") from exc

        try:
            return pyudev.Devices.from_device_file(self._context, path)
        except (pyudev.DeviceNotFoundError, OSError, ValueError):
            return None
