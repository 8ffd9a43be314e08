from __future__ import annotations

from pathlib import Path

import pytest

from tabletdb.core.descriptor_loader import parse_device, parse_stylus_entries
from tabletdb.core.errors import DescriptorParseError
from tabletdb.core.model import BusType, DeviceClass, Feature, StylusType


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


INTUOS4 = """
[Device]
Vendor=Wacom
Product=Intuos4 6x9
Width=9
Height=6
Class=Intuos4
DeviceMatch=usb:056a:00B9
Styli=0x802;0x80a;

[Features]
Stylus=true
Touch=false
Ring=true
Ring2=false
VStrip=false
HStrip=false
BuiltIn=false
Reversible=true
Buttons=9
"""


def test_parse_full_device(tmp_path: Path) -> None:
    device = parse_device(_write(tmp_path / "intuos4-6x9.tablet", INTUOS4))
    assert device.vendor == "Wacom"
    assert device.product == "Intuos4 6x9"
    assert (device.width, device.height) == (9, 6)
    assert device.cls is DeviceClass.INTUOS4
    assert device.match == "usb:0x56a:0xb9"
    assert (device.bus, device.vendor_id, device.product_id) == (BusType.USB, 0x56A, 0xB9)
    assert device.num_buttons == 9
    assert device.features == Feature.STYLUS | Feature.RING | Feature.REVERSIBLE
    assert device.supported_styli == [0x802, 0x80A]


def test_generic_match_is_kept_verbatim(tmp_path: Path) -> None:
    device = parse_device(
        _write(tmp_path / "generic.tablet", "[Device]\nProduct=Generic\nDeviceMatch=generic\n")
    )
    assert device.match == "generic"
    assert device.is_generic
    assert (device.bus, device.vendor_id, device.product_id) == (BusType.UNKNOWN, 0, 0)


def test_malformed_match_keeps_device_without_key(tmp_path: Path) -> None:
    warnings: list[str] = []
    device = parse_device(
        _write(tmp_path / "bad.tablet", "[Device]\nProduct=Bad\nDeviceMatch=firewire:1:2\n"),
        warnings=warnings,
    )
    assert device.product == "Bad"
    assert device.match is None
    assert any("DeviceMatch" in warning for warning in warnings)


def test_missing_match_is_reported(tmp_path: Path) -> None:
    warnings: list[str] = []
    device = parse_device(_write(tmp_path / "nomatch.tablet", "[Device]\nProduct=None\n"), warnings=warnings)
    assert device.match is None
    assert any("'DeviceMatch' is a required property" in warning for warning in warnings)


def test_missing_keys_take_defaults(tmp_path: Path) -> None:
    device = parse_device(_write(tmp_path / "min.tablet", "[Device]\nDeviceMatch=usb:1:2\n"))
    assert device.vendor is None
    assert device.product is None
    assert (device.width, device.height, device.num_buttons) == (0, 0, 0)
    assert device.cls is DeviceClass.UNKNOWN
    assert device.features == Feature.NONE
    assert device.supported_styli == []


def test_unknown_class_maps_to_unknown(tmp_path: Path) -> None:
    device = parse_device(
        _write(tmp_path / "c.tablet", "[Device]\nClass=Intuos9\nDeviceMatch=usb:1:2\n")
    )
    assert device.cls is DeviceClass.UNKNOWN


def test_styli_radix_detection(tmp_path: Path) -> None:
    device = parse_device(
        _write(tmp_path / "s.tablet", "[Device]\nDeviceMatch=usb:1:2\nStyli=0x10;16,010;\n")
    )
    assert device.supported_styli == [16, 16, 8]


def test_invalid_value_falls_back_with_warning(tmp_path: Path) -> None:
    warnings: list[str] = []
    device = parse_device(
        _write(
            tmp_path / "w.tablet",
            "[Device]\nWidth=wide\nHeight=4\nDeviceMatch=usb:1:2\n[Features]\nRing=maybe\nTouch=true\n",
        ),
        warnings=warnings,
    )
    assert device.width == 0
    assert device.height == 4
    assert device.features == Feature.TOUCH
    assert any("Device.Width" in warning for warning in warnings)
    assert any("Features.Ring" in warning for warning in warnings)


def test_indented_keys_are_read_as_keys(tmp_path: Path) -> None:
    warnings: list[str] = []
    device = parse_device(
        _write(
            tmp_path / "indented.tablet",
            "[Device]\n  Product=Indented\n\tDeviceMatch=usb:056a:00b9\n"
            "[Features]\nRing=true\n  Buttons=9\n",
        ),
        warnings=warnings,
    )
    assert device.product == "Indented"
    assert device.match == "usb:0x56a:0xb9"
    assert device.num_buttons == 9
    assert device.features == Feature.RING
    assert warnings == []


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(DescriptorParseError):
        parse_device(tmp_path / "missing.tablet")


def test_invalid_syntax_raises(tmp_path: Path) -> None:
    with pytest.raises(DescriptorParseError):
        parse_device(_write(tmp_path / "junk.tablet", "DeviceMatch=usb:1:2\n"))


STYLI = """
[0x802]
Name=Grip Pen
Buttons=2
HasEraser=true
Type=General

[0x80a]
Name=Grip Pen Eraser
IsEraser=true
HasEraser=true
Buttons=3
Type=General

[0x885]
Name=Marker Pen

[zzz]
Name=Broken

[0x0]
Name=Zero
"""


def test_parse_stylus_entries(tmp_path: Path) -> None:
    warnings: list[str] = []
    styli = parse_stylus_entries(_write(tmp_path / "wacom.stylus", STYLI), warnings=warnings)
    assert sorted(styli) == [0x802, 0x80A, 0x885]

    pen = styli[0x802]
    assert pen.name == "Grip Pen"
    assert pen.num_buttons == 2
    assert pen.has_eraser is True
    assert pen.stylus_type is StylusType.GENERAL

    eraser = styli[0x80A]
    assert eraser.is_eraser is True
    assert eraser.has_eraser is False
    assert eraser.num_buttons == 0

    marker = styli[0x885]
    assert marker.num_buttons == -1
    assert marker.stylus_type is StylusType.UNKNOWN
    assert marker.is_eraser is False
    assert marker.has_eraser is False


def test_stylus_id_zero_is_skipped(tmp_path: Path) -> None:
    warnings: list[str] = []
    styli = parse_stylus_entries(_write(tmp_path / "wacom.stylus", STYLI), warnings=warnings)
    assert 0 not in styli
    assert any("'zzz'" in warning for warning in warnings)
    assert any("'0x0'" in warning for warning in warnings)


def test_duplicate_stylus_id_later_wins(tmp_path: Path) -> None:
    warnings: list[str] = []
    styli = parse_stylus_entries(
        _write(tmp_path / "wacom.stylus", "[0x802]\nName=First\n\n[802]\nName=Second\n"),
        warnings=warnings,
    )
    assert styli[0x802].name == "Second"
    assert any("Duplicate definition for stylus ID '0x802'" in warning for warning in warnings)
