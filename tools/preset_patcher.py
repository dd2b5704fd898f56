#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
preset_patcher.py
- Patches the Pseudoregalia game preset data table (Preset_th1) in memory.
- The template has a fixed shape: export #1 is a DataTableExport, row 0 holds
  one MapProperty (upgrade name -> 0/1) and four StrProperty fields.
- Values are overwritten in place. Nothing is added, removed or reordered.

Property names carry the Blueprint struct suffix (`Title_18_<GUID>`); they are
matched as opaque keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from uasset_json import Asset, DataTableExport, IntProperty, MapProperty, NameProperty, Row, StrProperty

PRESET_EXPORT_INDEX = 1
PRESET_ROW_INDEX = 0

UPGRADES_FIELD = "Upgrades_12_339EDA2D4B022358B32C3984E9FAE5F1"

# map key (in game) -> option name (item name shown to the player)
UPGRADE_KEYS: Dict[str, str] = {
    "attack": "dream_breaker",
    "slide": "slide",
    "SlideJump": "solar_wind",
    "Light": "ascendant_light",
    "airKick": "sun_greaves",
    "projectile": "soul_cutter",
    "plunge": "sunsetter",
    "powerBoost": "indignation",
    "extraKick": "heliacal_power",
    "chargeAttack": "strikebreak",
    "wallRide": "cling_gem",
}
UPGRADE_OPTIONS: List[str] = list(UPGRADE_KEYS.values())

# StrProperty name -> PresetOptions attribute
STRING_FIELDS: Dict[str, str] = {
    "Title_18_8D403C334BBBCC29B73D3CACCDAF0A08": "title",
    "Author_6_5E436BFF41A27B8B13653A8CEC5D15A6": "author",
    "LevelName_2_392769FD4066EFFA0CC1F99E8D749886": "level",
    "PlayerStartTag_5_7797C3C742DE3A0B8EEE189EDBEF3683": "start_tag",
}

DEFAULT_START_TAG = "gameStart"


class PatchError(ValueError):
    pass


class WrongExportKind(PatchError):
    def __init__(self, kind: str):
        super().__init__(f"Export is not a DataTableExport (got {kind or 'unknown'})")
        self.kind = kind


class UnexpectedPropertyShape(PatchError):
    pass


class UnrecognizedUpgradeKey(PatchError):
    def __init__(self, name: str):
        super().__init__(f"Unrecognized key name: {name}")
        self.name = name


class UnrecognizedStringField(PatchError):
    def __init__(self, name: str):
        super().__init__(f"Unrecognized field name for StrProperty: {name}")
        self.name = name


class UnexpectedExportShape(PatchError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"Unexpected property in preset row: {kind} {name}")
        self.kind = kind
        self.name = name


@dataclass
class PresetOptions:
    title: str = ""
    author: str = ""
    level: str = ""
    start_tag: str = DEFAULT_START_TAG
    upgrades: Dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.upgrades) - set(UPGRADE_OPTIONS)
        if unknown:
            raise ValueError(f"Unknown upgrade option(s): {', '.join(sorted(unknown))}")

    def flag(self, option: str) -> bool:
        return bool(self.upgrades.get(option, False))

    def enabled_upgrades(self) -> List[str]:
        return [o for o in UPGRADE_OPTIONS if self.flag(o)]


def preset_row(asset: Asset) -> Row:
    export = asset.get_export(PRESET_EXPORT_INDEX)
    if not isinstance(export, DataTableExport):
        raise WrongExportKind(export.kind)
    # The template always carries the row; an empty table is a broken template.
    return export.rows[PRESET_ROW_INDEX]


def upgrade_entries(prop: MapProperty):
    """Yield (key name, IntProperty) for each map entry, checking the entry shape."""
    if prop.name != UPGRADES_FIELD:
        raise AssertionError(f"Unexpected map property: {prop.name} (expected {UPGRADES_FIELD})")
    for k, v in prop.entries:
        if not isinstance(k, NameProperty):
            raise UnexpectedPropertyShape(f"key is not a NameProperty ({k.kind})")
        if not isinstance(v, IntProperty):
            raise UnexpectedPropertyShape(f"value is not an IntProperty ({v.kind})")
        option = UPGRADE_KEYS.get(k.value)
        if option is None:
            raise UnrecognizedUpgradeKey(k.value)
        yield option, v


def string_option(prop: StrProperty) -> str:
    option = STRING_FIELDS.get(prop.name)
    if option is None:
        raise UnrecognizedStringField(prop.name)
    return option


def patch(asset: Asset, options: PresetOptions) -> None:
    row = preset_row(asset)
    for prop in row.properties:
        if isinstance(prop, MapProperty):
            for option, v in upgrade_entries(prop):
                v.value = 1 if options.flag(option) else 0
        elif isinstance(prop, StrProperty):
            prop.value = getattr(options, string_option(prop))
        else:
            raise UnexpectedExportShape(prop.kind, prop.name)


def read_preset(asset: Asset) -> PresetOptions:
    """Read the current field values back out of the preset row."""
    strings: Dict[str, str] = {}
    upgrades: Dict[str, bool] = {}
    for prop in preset_row(asset).properties:
        if isinstance(prop, MapProperty):
            for option, v in upgrade_entries(prop):
                upgrades[option] = v.value != 0
        elif isinstance(prop, StrProperty):
            strings[string_option(prop)] = prop.value or ""
        else:
            raise UnexpectedExportShape(prop.kind, prop.name)
    return PresetOptions(upgrades=upgrades, **strings)
