"""Core data models used across loader, database, resolver, and CLI."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Any

LOGGER = logging.getLogger(__name__)

GENERIC_MATCH = "generic"


class BusType(enum.Enum):
    UNKNOWN = "unknown"
    USB = "usb"
    SERIAL = "serial"
    BLUETOOTH = "bluetooth"

    @classmethod
    def from_str(cls, value: str | None) -> BusType:
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class DeviceClass(enum.Enum):
    UNKNOWN = "Unknown"
    INTUOS3 = "Intuos3"
    INTUOS4 = "Intuos4"
    CINTIQ = "Cintiq"
    BAMBOO = "Bamboo"
    GRAPHIRE = "Graphire"

    @classmethod
    def from_str(cls, value: str | None) -> DeviceClass:
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class StylusType(enum.Enum):
    UNKNOWN = "Unknown"
    GENERAL = "General"
    INKING = "Inking"
    AIRBRUSH = "Airbrush"
    CLASSIC = "Classic"
    MARKER = "Marker"

    @classmethod
    def from_str(cls, value: str | None) -> StylusType:
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class Feature(enum.Flag):
    NONE = 0
    STYLUS = 1 << 0
    TOUCH = 1 << 1
    RING = 1 << 2
    RING2 = 1 << 3
    VSTRIP = 1 << 4
    HSTRIP = 1 << 5
    BUILTIN = 1 << 6
    REVERSIBLE = 1 << 7


# Keys of the [Features] section, in file order.
FEATURE_KEYS: dict[str, Feature] = {
    "Stylus": Feature.STYLUS,
    "Touch": Feature.TOUCH,
    "Ring": Feature.RING,
    "Ring2": Feature.RING2,
    "VStrip": Feature.VSTRIP,
    "HStrip": Feature.HSTRIP,
    "BuiltIn": Feature.BUILTIN,
    "Reversible": Feature.REVERSIBLE,
}


@dataclass
class Device:
    """A tablet descriptor.

    Records handed out by the resolver are clones, so callers may modify them
    without touching the database.
    """

    vendor: str | None = None
    product: str | None = None
    width: int = 0
    height: int = 0
    cls: DeviceClass = DeviceClass.UNKNOWN
    match: str | None = None
    vendor_id: int = 0
    product_id: int = 0
    bus: BusType = BusType.UNKNOWN
    num_buttons: int = 0
    features: Feature = Feature.NONE
    supported_styli: list[int] = field(default_factory=list)

    def clone(self) -> Device:
        return replace(self, supported_styli=list(self.supported_styli))

    @property
    def is_generic(self) -> bool:
        return self.match == GENERIC_MATCH

    @property
    def has_stylus(self) -> bool:
        return Feature.STYLUS in self.features

    @property
    def has_touch(self) -> bool:
        return Feature.TOUCH in self.features

    @property
    def has_ring(self) -> bool:
        return Feature.RING in self.features

    @property
    def has_ring2(self) -> bool:
        return Feature.RING2 in self.features

    @property
    def has_vstrip(self) -> bool:
        return Feature.VSTRIP in self.features

    @property
    def has_hstrip(self) -> bool:
        return Feature.HSTRIP in self.features

    @property
    def is_builtin(self) -> bool:
        return Feature.BUILTIN in self.features

    @property
    def is_reversible(self) -> bool:
        return Feature.REVERSIBLE in self.features

    def as_dict(self) -> dict[str, Any]:
        return {
            "match": self.match,
            "vendor": self.vendor,
            "product": self.product,
            "vendor_id": f"0x{self.vendor_id:04x}",
            "product_id": f"0x{self.product_id:04x}",
            "bus": str(self.bus),
            "class": str(self.cls),
            "width": self.width,
            "height": self.height,
            "buttons": self.num_buttons,
            "features": [name for name, flag in FEATURE_KEYS.items() if flag in self.features],
            "styli": [f"0x{stylus_id:x}" for stylus_id in self.supported_styli],
        }


@dataclass(frozen=True)
class Stylus:
    id: int
    name: str = ""
    is_eraser: bool = False
    has_eraser: bool = False
    num_buttons: int = -1
    stylus_type: StylusType = StylusType.UNKNOWN

    def __post_init__(self) -> None:
        # An eraser has no buttons and no eraser of its own.
        if self.is_eraser:
            object.__setattr__(self, "has_eraser", False)
            object.__setattr__(self, "num_buttons", 0)

    @property
    def buttons(self) -> int:
        if self.num_buttons == -1:
            LOGGER.warning(
                "Stylus '0x%x' has no number of buttons defined, falling back to 2", self.id
            )
            return 2
        return self.num_buttons

    @property
    def type(self) -> StylusType:
        if self.stylus_type is StylusType.UNKNOWN:
            LOGGER.warning("Stylus '0x%x' has no type defined, falling back to 'General'", self.id)
            return StylusType.GENERAL
        return self.stylus_type

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": f"0x{self.id:x}",
            "name": self.name,
            "type": str(self.type),
            "buttons": self.buttons,
            "is_eraser": self.is_eraser,
            "has_eraser": self.has_eraser,
        }
