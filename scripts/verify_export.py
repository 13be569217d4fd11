#!/usr/bin/env python3
"""
Verify a canonical plan corpus export directory.

Checks performed:
- manifest.json exists and is parseable
- Files listed in manifest exist and match manifest.checksums
- CSV row count and per-length counts match the manifest
- schema_hash matches the CSV header (sorted column names)
- schema/plans.schema.json exists and is an object schema
- every exported plan is its own canonical form under the manifest's settings

Exit codes:
 0 on success, non-zero on any validation failure.
"""
from __future__ import annotations

import argparse
import csv
import hashlib
import json
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List

from cyclegrid.basics import parse_plan
from cyclegrid.symmetry import CanonicalizerConfig, is_canonical


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def read_rows(path: Path) -> List[Dict[str, str]]:
    with path.open('r', newline='') as f:
        return list(csv.DictReader(f))


def schema_hash_from_csv_header(path: Path) -> str:
    with path.open('r', newline='') as f:
        header = next(csv.reader(f))
    return hashlib.sha256("\n".join(sorted(header)).encode('utf-8')).hexdigest()


def error(msg: str) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Verify canonical plan corpus export")
    ap.add_argument("out", type=Path, help="Export directory (contains manifest.json)")
    ns = ap.parse_args(argv)
    manifest_path = ns.out / "manifest.json"
    if not manifest_path.exists():
        error(f"manifest not found: {manifest_path}")
        return 2
    try:
        manifest: Dict[str, Any] = json.loads(manifest_path.read_text())
    except json.JSONDecodeError as e:
        error(f"failed to parse manifest: {e}")
        return 2

    ok = True
    files: Dict[str, Any] = manifest.get("files", {}) or {}
    checksums: Dict[str, Any] = manifest.get("checksums", {}) or {}
    for label, p in files.items():
        if p is None:
            continue
        fp = Path(p)
        if not fp.exists():
            error(f"missing file listed in manifest: {label} -> {fp}")
            ok = False
            continue
        want, have = checksums.get(label), sha256_file(fp)
        if want and want != have:
            error(f"checksum mismatch for {label}: manifest={want} computed={have}")
            ok = False

    plans_csv = files.get("plans_csv")
    if plans_csv and Path(plans_csv).exists():
        rows = read_rows(Path(plans_csv))
        want_rows = (manifest.get("row_counts") or {}).get("plans")
        if want_rows != len(rows):
            error(f"plans row count mismatch: manifest={want_rows} actual={len(rows)}")
            ok = False
        per_length = {str(k): v for k, v in sorted(Counter(int(r['length']) for r in rows).items())}
        if per_length != manifest.get("plans_per_length"):
            error(f"per-length counts mismatch: manifest={manifest.get('plans_per_length')} actual={per_length}")
            ok = False
        want_hash = (manifest.get("schema_hash") or {}).get("plans")
        have_hash = schema_hash_from_csv_header(Path(plans_csv))
        if want_hash and want_hash != have_hash:
            error(f"schema_hash(plans) mismatch: manifest={want_hash} computed={have_hash}")
            ok = False

        args = manifest.get("args") or {}
        cfg = CanonicalizerConfig(
            phase_shift=bool(args.get("phase_shift", True)),
            reduce_cycles=bool(args.get("reduce_cycles", True)),
        )
        bad = [r['plan'] for r in rows if not is_canonical(parse_plan(r['plan']), cfg)]
        if bad:
            error(f"{len(bad)} exported plans are not canonical, e.g. {bad[:5]}")
            ok = False

    schema_path = ns.out / "schema" / "plans.schema.json"
    if not schema_path.exists():
        error("schema file not found under export/schema/")
        ok = False
    else:
        sch = json.loads(schema_path.read_text())
        if not isinstance(sch, dict) or sch.get("type") != "object" or not sch.get("properties"):
            error("plans schema must be an object schema with properties")
            ok = False

    if not ok:
        return 1
    print("OK: export verified", file=sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
