"""Parsing of .tablet descriptor files and the stylus definition file."""

from __future__ import annotations

import configparser
import json
import logging
import re
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from jsonschema import validators

from tabletdb.core import match as match_codec
from tabletdb.core.errors import DescriptorParseError, MatchKeyError
from tabletdb.core.model import (
    FEATURE_KEYS,
    GENERIC_MATCH,
    Device,
    DeviceClass,
    Stylus,
    StylusType,
)

DEVICE_GROUP = "Device"
FEATURE_GROUP = "Features"

_TRUE_VALUES = {"true", "1"}
_LIST_SPLIT_RE = re.compile(r"[;,]")
_HEX_PREFIX_RE = re.compile(r"^\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")
_AUTO_PREFIX_RE = re.compile(r"^\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
LOGGER = logging.getLogger(__name__)


class KeyFileParser(configparser.ConfigParser):
    """INI reader following keyfile conventions: case-sensitive keys, '#'
    comments, no interpolation, repeated groups merged.

    Keyfiles have no continuation lines, so callers strip leading whitespace
    before feeding text in (see :func:`_read_keyfile`).
    """

    def __init__(self) -> None:
        super().__init__(
            interpolation=None,
            strict=False,
            delimiters=("=",),
            comment_prefixes=("#",),
            default_section="\x00defaults",
        )

    def optionxform(self, optionstr: str) -> str:
        return optionstr


def _warn(warnings: list[str] | None, message: str) -> None:
    LOGGER.warning(message)
    if warnings is not None:
        warnings.append(message)


@lru_cache(maxsize=None)
def _load_schema_validator(name: str) -> Any:
    schema_text = resources.files("tabletdb.schemas").joinpath(name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_keyfile(path: Path | Traversable) -> KeyFileParser:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DescriptorParseError(f"Could not read descriptor file {path}: {exc}") from exc

    # Indented lines are ordinary lines, not continuations of the previous value.
    content = "\n".join(line.lstrip() for line in content.splitlines())
    parser = KeyFileParser()
    try:
        parser.read_string(content, source=str(path))
    except configparser.Error as exc:
        raise DescriptorParseError(f"Invalid keyfile syntax in {path}: {exc}") from exc
    return parser


def _strtol(text: str, base: int) -> int:
    """Parse the leading integer of ``text`` the way C's strtol does.

    Only bases 0 (auto-detect) and 16 are used. Trailing garbage is ignored
    and a string without a leading number reads as 0.
    """
    if base == 16:
        parsed = _HEX_PREFIX_RE.match(text)
        if parsed is None:
            return 0
        value = int(parsed.group(2), 16)
    else:
        parsed = _AUTO_PREFIX_RE.match(text)
        if parsed is None:
            return 0
        digits = parsed.group(2)
        if digits[:2] in ("0x", "0X"):
            value = int(digits[2:], 16)
        elif digits.startswith("0"):
            value = int(digits, 8)
        else:
            value = int(digits, 10)
    return -value if parsed.group(1) == "-" else value


class _Sections:
    """Typed access to keyfile values, with schema violations masked out.

    A key that failed validation reads as missing, so every getter falls back
    to its default for it.
    """

    def __init__(
        self,
        keyfile: KeyFileParser,
        schema_name: str,
        source: Path | Traversable,
        warnings: list[str] | None,
    ) -> None:
        self.keyfile = keyfile
        self.invalid: set[tuple[str, str]] = set()
        doc = {section: dict(keyfile.items(section)) for section in keyfile.sections()}
        validator = _load_schema_validator(schema_name)
        for error in sorted(validator.iter_errors(doc), key=lambda e: list(e.path)):
            path = [str(p) for p in error.path]
            if len(path) == 2:
                self.invalid.add((path[0], path[1]))
            where = f" ({'.'.join(path)})" if path else ""
            _warn(warnings, f"Schema validation failed for {source}{where}: {error.message}")

    def get(self, section: str, key: str) -> str | None:
        if (section, key) in self.invalid:
            return None
        if not self.keyfile.has_option(section, key):
            return None
        return self.keyfile.get(section, key).strip()

    def get_int(self, section: str, key: str, default: int = 0) -> int:
        value = self.get(section, key)
        if value is None:
            return default
        return int(value)

    def get_bool(self, section: str, key: str) -> bool:
        value = self.get(section, key)
        return value is not None and value.lower() in _TRUE_VALUES

    def get_list(self, section: str, key: str) -> list[str]:
        value = self.get(section, key)
        if value is None:
            return []
        return [item.strip() for item in _LIST_SPLIT_RE.split(value) if item.strip()]


def parse_device(path: Path | Traversable, *, warnings: list[str] | None = None) -> Device:
    """Parse one .tablet file.

    Raises DescriptorParseError when the file cannot be read or is not a
    keyfile. A missing or malformed DeviceMatch still yields a device, with
    ``match`` left as None.
    """
    sections = _Sections(_read_keyfile(path), "tablet.schema.json", path, warnings)

    device = Device(
        vendor=sections.get(DEVICE_GROUP, "Vendor"),
        product=sections.get(DEVICE_GROUP, "Product"),
        width=sections.get_int(DEVICE_GROUP, "Width"),
        height=sections.get_int(DEVICE_GROUP, "Height"),
        cls=DeviceClass.from_str(sections.get(DEVICE_GROUP, "Class")),
        num_buttons=sections.get_int(FEATURE_GROUP, "Buttons"),
    )

    match = sections.get(DEVICE_GROUP, "DeviceMatch")
    if match == GENERIC_MATCH:
        device.match = match
    elif match is not None:
        try:
            device.bus, device.vendor_id, device.product_id = match_codec.decode(match)
        except MatchKeyError as exc:
            _warn(warnings, f"Failed to parse DeviceMatch in {path}: {exc}")
        else:
            device.match = match_codec.encode(device.bus, device.vendor_id, device.product_id)

    device.supported_styli = [_strtol(item, 0) for item in sections.get_list(DEVICE_GROUP, "Styli")]

    for key, flag in FEATURE_KEYS.items():
        if sections.get_bool(FEATURE_GROUP, key):
            device.features |= flag

    return device


def parse_stylus_entries(
    path: Path | Traversable, *, warnings: list[str] | None = None
) -> dict[int, Stylus]:
    """Parse the stylus file into a mapping of stylus ID to record.

    Every group name is a hexadecimal stylus ID. Groups whose name reads as
    ID 0 are skipped with a warning; a repeated ID replaces the earlier one.
    """
    keyfile = _read_keyfile(path)
    sections = _Sections(keyfile, "stylus.schema.json", path, warnings)
    styli: dict[int, Stylus] = {}

    for group in keyfile.sections():
        stylus_id = _strtol(group, 16)
        if stylus_id == 0:
            _warn(warnings, f"Failed to parse stylus ID '{group}' in {path}")
            continue

        stylus = Stylus(
            id=stylus_id,
            name=sections.get(group, "Name") or "",
            is_eraser=sections.get_bool(group, "IsEraser"),
            has_eraser=sections.get_bool(group, "HasEraser"),
            num_buttons=sections.get_int(group, "Buttons", default=-1),
            stylus_type=StylusType.from_str(sections.get(group, "Type")),
        )

        if stylus_id in styli:
            _warn(warnings, f"Duplicate definition for stylus ID '0x{stylus_id:x}'")
        styli[stylus_id] = stylus

    return styli
