import json
from pathlib import Path

import pytest

from uasset_json import Asset, UAssetGUI

STR_T = "UAssetAPI.PropertyTypes.Objects.StrPropertyData, UAssetAPI"
NAME_T = "UAssetAPI.PropertyTypes.Objects.NamePropertyData, UAssetAPI"
INT_T = "UAssetAPI.PropertyTypes.Objects.IntPropertyData, UAssetAPI"
MAP_T = "UAssetAPI.PropertyTypes.Objects.MapPropertyData, UAssetAPI"
STRUCT_T = "UAssetAPI.PropertyTypes.Structs.StructPropertyData, UAssetAPI"
DATATABLE_T = "UAssetAPI.ExportTypes.DataTableExport, UAssetAPI"
NORMAL_T = "UAssetAPI.ExportTypes.NormalExport, UAssetAPI"

# key order as stored in Preset_th1
TEMPLATE_KEYS = [
    "attack", "slide", "SlideJump", "Light", "airKick", "projectile",
    "plunge", "powerBoost", "extraKick", "chargeAttack", "wallRide",
]


def str_prop(name, value):
    return {"$type": STR_T, "Name": name, "DuplicationIndex": 0, "Value": value}


def map_entry(key, value):
    return [
        {"$type": NAME_T, "Name": key, "DuplicationIndex": 0, "Value": key},
        {"$type": INT_T, "Name": key, "DuplicationIndex": 0, "Value": value},
    ]


def map_prop(entries, name="Upgrades_12_339EDA2D4B022358B32C3984E9FAE5F1"):
    return {
        "$type": MAP_T,
        "Name": name,
        "KeyType": "NameProperty",
        "ValueType": "IntProperty",
        "Value": entries,
    }


def make_template_doc(row_props=None, export_type=DATATABLE_T):
    if row_props is None:
        row_props = [
            str_prop("LevelName_2_392769FD4066EFFA0CC1F99E8D749886", "ZONE_Dungeon"),
            str_prop("PlayerStartTag_5_7797C3C742DE3A0B8EEE189EDBEF3683", "gameStart"),
            str_prop("Author_6_5E436BFF41A27B8B13653A8CEC5D15A6", "Rittz"),
            map_prop([map_entry(k, 1) for k in TEMPLATE_KEYS]),
            str_prop("Title_18_8D403C334BBBCC29B73D3CACCDAF0A08", "Time Trial 1"),
        ]
    return {
        "Info": "Serialized with UAssetAPI",
        "NameMap": ["Preset_th1", "th1"] + TEMPLATE_KEYS,
        "Exports": [
            {
                "$type": export_type,
                "ObjectName": "Preset_th1",
                "Table": {"Data": [{"$type": STRUCT_T, "Name": "th1", "Value": row_props}]},
                "Data": [],
            },
            {"$type": NORMAL_T, "ObjectName": "Default__Preset_th1", "Data": []},
        ],
    }


@pytest.fixture()
def template_doc():
    return make_template_doc()


@pytest.fixture()
def template_asset(template_doc):
    return Asset(template_doc)


class FakeUAssetGUI(UAssetGUI):
    """Stands in for the external tool: uasset/uexp files hold the JSON document."""

    def __init__(self, doc=None, fail=None):
        super().__init__(Path("UAssetGUI"))
        self.doc = doc
        self.fail = fail
        self.calls = []

    def run(self, *args):
        self.calls.append(args)
        if self.fail == args[0]:
            raise RuntimeError(f"UAssetGUI {args[0]} failed (code 1). Output:\nboom")
        if args[0] == "tojson":
            src, dst, _version = args[1:]
            doc = self.doc if self.doc is not None else json.loads(Path(src).read_text(encoding="utf-8"))
            Path(dst).write_text(json.dumps(doc), encoding="utf-8")
        elif args[0] == "fromjson":
            src, dst = Path(args[1]), Path(args[2])
            dst.write_text(src.read_text(encoding="utf-8"), encoding="utf-8")
            dst.with_suffix(".uexp").write_bytes(b"\xc1\x83\x2a\x9e")
        return ""


@pytest.fixture()
def fake_tool(template_doc):
    return FakeUAssetGUI(template_doc)


@pytest.fixture()
def template_files(tmp_path: Path):
    uasset = tmp_path / "Preset_th1.uasset"
    uasset.write_bytes(b"\xc1\x83\x2a\x9e")
    uasset.with_suffix(".uexp").write_bytes(b"\xc1\x83\x2a\x9e")
    return uasset
