#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
uasset_json.py
- Thin typed views over a UAssetAPI JSON document (the format UAssetGUI writes
  with `tojson` and reads back with `fromjson`).
- Views do not copy anything: setters write straight into the JSON dicts, so
  the document round-trips untouched except for the values we change.

External tool (UAssetGUI, https://github.com/atenfyr/UAssetGUI):
  UAssetGUI tojson   Preset_th1.uasset Preset_th1.json VER_UE5_1
  UAssetGUI fromjson Preset_th1.json   out/Preset.uasset

Observed JSON shape (only what we touch):
  {"Exports": [
     {"$type": "UAssetAPI.ExportTypes.DataTableExport, UAssetAPI",
      "Table": {"Data": [
         {"$type": "...StructPropertyData, UAssetAPI", "Name": "th1",
          "Value": [ <property>, ... ]}]}}]}
  <property> = {"$type": "UAssetAPI.PropertyTypes.Objects.StrPropertyData, UAssetAPI",
                "Name": "Title_18_...", "Value": "..."}
  MapPropertyData "Value" = [[<key property>, <value property>], ...]
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_ENGINE_VERSION = "VER_UE5_1"
TYPE_KEY = "$type"


def type_name(raw: Dict[str, Any]) -> str:
    """'UAssetAPI.PropertyTypes.Objects.StrPropertyData, UAssetAPI' -> 'StrPropertyData'"""
    t = raw.get(TYPE_KEY) or ""
    return t.split(",", 1)[0].rsplit(".", 1)[-1]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

@dataclass
class Property:
    raw: Dict[str, Any]

    @property
    def kind(self) -> str:
        t = type_name(self.raw)
        return t[:-len("PropertyData")] if t.endswith("PropertyData") else t

    @property
    def name(self) -> str:
        return str(self.raw.get("Name", ""))


class StrProperty(Property):
    @property
    def value(self) -> Optional[str]:
        return self.raw.get("Value")

    @value.setter
    def value(self, v: Optional[str]) -> None:
        self.raw["Value"] = v


class NameProperty(Property):
    @property
    def value(self) -> str:
        return str(self.raw.get("Value", ""))


class IntProperty(Property):
    @property
    def value(self) -> int:
        return int(self.raw.get("Value", 0))

    @value.setter
    def value(self, v: int) -> None:
        self.raw["Value"] = int(v)


class MapProperty(Property):
    @property
    def entries(self) -> List[Tuple[Property, Property]]:
        pairs = self.raw.get("Value") or []
        return [(wrap_property(k), wrap_property(v)) for k, v in pairs]


PROPERTY_KINDS = {
    "StrPropertyData": StrProperty,
    "NamePropertyData": NameProperty,
    "IntPropertyData": IntProperty,
    "MapPropertyData": MapProperty,
}


def wrap_property(raw: Dict[str, Any]) -> Property:
    return PROPERTY_KINDS.get(type_name(raw), Property)(raw)


# ---------------------------------------------------------------------------
# Exports / rows
# ---------------------------------------------------------------------------

@dataclass
class Row:
    raw: Dict[str, Any]

    @property
    def name(self) -> str:
        return str(self.raw.get("Name", ""))

    @property
    def properties(self) -> List[Property]:
        return [wrap_property(p) for p in self.raw.get("Value") or []]


@dataclass
class Export:
    raw: Dict[str, Any]

    @property
    def kind(self) -> str:
        return type_name(self.raw)


class DataTableExport(Export):
    @property
    def rows(self) -> List[Row]:
        table = self.raw.get("Table") or {}
        return [Row(r) for r in table.get("Data") or []]


def wrap_export(raw: Dict[str, Any]) -> Export:
    if type_name(raw) == "DataTableExport":
        return DataTableExport(raw)
    return Export(raw)


@dataclass
class Asset:
    doc: Dict[str, Any]

    @property
    def exports(self) -> List[Export]:
        return [wrap_export(e) for e in self.doc.get("Exports") or []]

    def get_export(self, package_index: int) -> Export:
        # Positive package indices address exports, 1-based.
        exports = self.doc.get("Exports") or []
        if package_index <= 0 or package_index > len(exports):
            raise IndexError(f"No export at package index {package_index} (exports: {len(exports)})")
        return wrap_export(exports[package_index - 1])


def load_json(path: Path) -> Asset:
    return Asset(json.loads(path.read_text(encoding="utf-8-sig")))


def save_json(asset: Asset, path: Path) -> None:
    path.write_text(json.dumps(asset.doc, ensure_ascii=False, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# UAssetGUI wrapper
# ---------------------------------------------------------------------------

@dataclass
class UAssetGUI:
    exe: Path

    @staticmethod
    def locate(explicit: Optional[Path] = None) -> "UAssetGUI":
        if explicit is not None:
            if not explicit.exists():
                raise FileNotFoundError(f"UAssetGUI not found: {explicit}")
            return UAssetGUI(explicit)
        env = os.environ.get("UASSETGUI")
        if env:
            return UAssetGUI.locate(Path(env))
        found = shutil.which("UAssetGUI")
        if found is None:
            raise FileNotFoundError("UAssetGUI not found on PATH (use --uassetgui or set UASSETGUI)")
        return UAssetGUI(Path(found))

    def run(self, *args: str) -> str:
        cmd = [str(self.exe), *args]
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        if proc.returncode != 0:
            raise RuntimeError(f"UAssetGUI {args[0]} failed (code {proc.returncode}). Output:\n{proc.stdout}")
        return proc.stdout

    def to_json(self, asset_path: Path, json_path: Path, engine_version: str = DEFAULT_ENGINE_VERSION) -> None:
        self.run("tojson", str(asset_path), str(json_path), engine_version)

    def from_json(self, json_path: Path, asset_path: Path) -> None:
        self.run("fromjson", str(json_path), str(asset_path))


def companion_paths(stem: Path) -> Tuple[Path, Path]:
    """Output stem -> (.uasset, .uexp)"""
    return stem.with_suffix(".uasset"), stem.with_suffix(".uexp")


def load_asset(uasset: Path, tool: UAssetGUI, engine_version: str = DEFAULT_ENGINE_VERSION) -> Asset:
    if not uasset.exists():
        raise FileNotFoundError(f"uasset not found: {uasset}")
    uexp = uasset.with_suffix(".uexp")
    if not uexp.exists():
        raise FileNotFoundError(f"uexp not found next to uasset: {uexp}")
    with tempfile.TemporaryDirectory() as tmp:
        json_path = Path(tmp) / (uasset.stem + ".json")
        tool.to_json(uasset, json_path, engine_version)
        return load_json(json_path)


def write_asset(asset: Asset, stem: Path, tool: UAssetGUI) -> Tuple[Path, Path]:
    out_uasset, out_uexp = companion_paths(stem)
    out_uasset.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory() as tmp:
        json_path = Path(tmp) / (out_uasset.stem + ".json")
        save_json(asset, json_path)
        tool.from_json(json_path, out_uasset)
    if not out_uexp.exists():
        raise RuntimeError(f"UAssetGUI did not write {out_uexp}")
    return out_uasset, out_uexp
