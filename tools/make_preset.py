#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
make_preset.py
- Generate game presets for Pseudoregalia custom maps.
- Loads the Preset_th1 template (uasset + uexp, UE 5.1) through UAssetGUI,
  patches title/author/level/start tag/upgrades, writes <output>.uasset + <output>.uexp.

Requirements
- UAssetGUI on PATH (or --uassetgui / UASSETGUI env)
- Preset_th1.uasset + Preset_th1.uexp next to this script (or --template)

Usage
  python make_preset.py build -o out/MyMap_preset --title "My Map" --author me ^
    --level MyMap --dream-breaker --slide

  python make_preset.py batch presets.csv --out-dir out

  python make_preset.py show out/MyMap_preset.uasset

Batch CSV columns
  output,title,author,level[,tag][,dream_breaker,slide,...]
  upgrade cells: 1/true/yes/y/x -> enabled, anything else (or empty) -> disabled
"""

from __future__ import annotations

import argparse
import copy
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from preset_patcher import (
    DEFAULT_START_TAG,
    UPGRADE_KEYS,
    UPGRADE_OPTIONS,
    PatchError,
    PresetOptions,
    patch,
    read_preset,
)
from uasset_json import DEFAULT_ENGINE_VERSION, Asset, UAssetGUI, load_asset, write_asset

DEFAULT_TEMPLATE = Path(__file__).with_name("Preset_th1.uasset")

UPGRADE_HELP = {option: key for key, option in UPGRADE_KEYS.items()}

TRUTHY = {"1", "true", "yes", "y", "x"}
REQUIRED_COLUMNS = ["output", "title", "author", "level"]


def is_truthy(cell) -> bool:
    if cell is None or (isinstance(cell, float) and pd.isna(cell)):
        return False
    return str(cell).strip().lower() in TRUTHY


def cell_text(cell) -> str:
    if cell is None or (isinstance(cell, float) and pd.isna(cell)):
        return ""
    return str(cell)


def options_from_args(args: argparse.Namespace) -> PresetOptions:
    return PresetOptions(
        title=args.title,
        author=args.author,
        level=args.level,
        start_tag=args.tag,
        upgrades={o: bool(getattr(args, o)) for o in UPGRADE_OPTIONS},
    )


def read_manifest(csv_path: Path) -> pd.DataFrame:
    # keep_default_na=False: empty title/author cells stay "" instead of NaN
    df = pd.read_csv(csv_path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Manifest CSV missing column(s): {', '.join(missing)}")
    unknown = [c for c in df.columns if c not in REQUIRED_COLUMNS and c != "tag" and c not in UPGRADE_OPTIONS]
    if unknown:
        raise ValueError(f"Manifest CSV has unknown column(s): {', '.join(unknown)}")
    return df


def options_from_row(row: Dict[str, object]) -> PresetOptions:
    tag = cell_text(row.get("tag"))
    return PresetOptions(
        title=cell_text(row["title"]),
        author=cell_text(row["author"]),
        level=cell_text(row["level"]),
        start_tag=tag or DEFAULT_START_TAG,
        upgrades={o: is_truthy(row.get(o)) for o in UPGRADE_OPTIONS},
    )


def build_one(template: Asset, options: PresetOptions, output: Path, tool: UAssetGUI) -> None:
    # Patch a fresh copy so one template load serves every preset in a batch.
    asset = Asset(copy.deepcopy(template.doc))
    patch(asset, options)
    out_uasset, out_uexp = write_asset(asset, output, tool)
    print(f"[OK] Wrote: {out_uasset}")
    print(f"     {out_uexp}")


def open_template(args: argparse.Namespace) -> tuple:
    try:
        tool = UAssetGUI.locate(args.uassetgui)
        template = load_asset(args.template, tool, args.engine_version)
    except (FileNotFoundError, RuntimeError) as e:
        raise SystemExit(f"[ERR] {e}")
    return tool, template


def cmd_build(args: argparse.Namespace) -> None:
    tool, template = open_template(args)
    options = options_from_args(args)
    try:
        build_one(template, options, args.output, tool)
    except (PatchError, RuntimeError) as e:
        raise SystemExit(f"[ERR] {e}")
    enabled = options.enabled_upgrades()
    print(f"     upgrades: {', '.join(enabled) if enabled else '(none)'}")


def cmd_batch(args: argparse.Namespace) -> None:
    if not args.csv.exists():
        raise SystemExit(f"[ERR] CSV not found: {args.csv}")
    try:
        df = read_manifest(args.csv)
    except ValueError as e:
        raise SystemExit(f"[ERR] {e}")

    tool, template = open_template(args)

    failed: List[str] = []
    for i, row in enumerate(df.to_dict(orient="records")):
        output = Path(cell_text(row["output"]))
        if not output.parts:
            print(f"[WARN] row {i}: empty output, skipped")
            failed.append(f"row {i}")
            continue
        if args.out_dir is not None and not output.is_absolute():
            output = args.out_dir / output
        try:
            build_one(template, options_from_row(row), output, tool)
        except (PatchError, RuntimeError) as e:
            if not args.keep_going:
                raise SystemExit(f"[ERR] row {i} ({output}): {e}")
            print(f"[WARN] row {i} ({output}): {e}")
            failed.append(f"row {i}")

    print(f"[OK] Presets: {len(df) - len(failed)}/{len(df)}")
    if failed:
        raise SystemExit(f"[ERR] Failed: {', '.join(failed)}")


def cmd_show(args: argparse.Namespace) -> None:
    try:
        tool = UAssetGUI.locate(args.uassetgui)
        asset = load_asset(args.preset, tool, args.engine_version)
        options = read_preset(asset)
    except (FileNotFoundError, RuntimeError, PatchError) as e:
        raise SystemExit(f"[ERR] {e}")
    print(f"Title    : {options.title}")
    print(f"Author   : {options.author}")
    print(f"Level    : {options.level}")
    print(f"StartTag : {options.start_tag}")
    for o in UPGRADE_OPTIONS:
        print(f"  [{'x' if options.flag(o) else ' '}] {o} ({UPGRADE_HELP[o]})")


def add_tool_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--uassetgui", type=Path, default=None, help="Path to UAssetGUI (default: $UASSETGUI, then PATH)")
    p.add_argument("--engine-version", default=DEFAULT_ENGINE_VERSION, help=f"Engine version tag (default: {DEFAULT_ENGINE_VERSION})")


def add_template_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--template", type=Path, default=DEFAULT_TEMPLATE,
                   help="Template uasset (uexp must sit next to it; default: Preset_th1.uasset next to this script)")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate game presets for Pseudoregalia custom maps")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_build = sub.add_parser("build", help="Write one preset")
    ap_build.add_argument("-o", "--output", type=Path, required=True,
                          help="Filename stem for output preset uasset file (without extension)")
    ap_build.add_argument("--title", required=True, help="Title of game preset")
    ap_build.add_argument("--author", required=True, help="Author of game preset")
    ap_build.add_argument("--level", required=True, help="Name of level asset")
    ap_build.add_argument("--tag", default=DEFAULT_START_TAG,
                          help=f"PlayerStartTag of spawn point (default: {DEFAULT_START_TAG})")
    for o in UPGRADE_OPTIONS:
        ap_build.add_argument(f"--{o.replace('_', '-')}", dest=o, action="store_true",
                              help=f"Enable upgrade ({UPGRADE_HELP[o]})")
    add_template_arg(ap_build)
    add_tool_args(ap_build)

    ap_batch = sub.add_parser("batch", help="Write one preset per CSV row")
    ap_batch.add_argument("csv", type=Path)
    ap_batch.add_argument("--out-dir", type=Path, default=None, help="Base directory for relative output stems")
    ap_batch.add_argument("--keep-going", action="store_true", help="Report failed rows and continue")
    add_template_arg(ap_batch)
    add_tool_args(ap_batch)

    ap_show = sub.add_parser("show", help="Print the fields of a preset")
    ap_show.add_argument("preset", type=Path)
    add_tool_args(ap_show)

    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    if args.cmd == "build":
        cmd_build(args)
    elif args.cmd == "batch":
        cmd_batch(args)
    elif args.cmd == "show":
        cmd_show(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
