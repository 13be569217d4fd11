"""
Export the canonical plan corpus, optionally evaluated against a board.

One row per canonical plan for every length in the requested range. When a
board is supplied each plan is also simulated and its verdict recorded, which
is the corpus a level author filters for candidate solutions.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .basics import serialize_plan
from .board import Board
from .errors import InvalidArgument
from .orbits import orbit_sizes
from .paths import git_provenance
from .simulator import DEFAULT_MAX_ROTATIONS, SimulatorConfig, run_simulation
from .symmetry import CanonicalizerConfig, symmetry_info
from .tracking import log_artifacts, log_metrics, log_params

DATASET_VERSION = "1.0.0"
PLANS_CSV = "plans.csv"
PLANS_PARQUET = "plans.parquet"


@dataclass
class ExportArgs:
    out: Path
    min_length: int = 1
    max_length: int = 6
    board: Optional[Board] = None
    max_steps: int = 64
    max_rotations: int = DEFAULT_MAX_ROTATIONS
    phase_shift: bool = True
    reduce_cycles: bool = True
    cli_argv: Optional[List[str]] = None
    format: str = "csv"  # one of: "csv", "parquet", "both"


def _schema_hash(rows: List[Dict[str, Any]]) -> str:
    keys = sorted({k for r in rows for k in r.keys()})
    return hashlib.sha256("\n".join(keys).encode("utf-8")).hexdigest()


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _have_parquet_deps() -> bool:
    return (importlib.util.find_spec('pandas') is not None
            and importlib.util.find_spec('pyarrow') is not None)


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        ver = getattr(__import__(pkg), "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def build_plan_rows(args: ExportArgs) -> List[Dict[str, Any]]:
    cfg = CanonicalizerConfig(phase_shift=args.phase_shift, reduce_cycles=args.reduce_cycles)
    sim_cfg = SimulatorConfig(max_rotations=args.max_rotations)
    rows: List[Dict[str, Any]] = []
    for length in range(args.min_length, args.max_length + 1):
        sizes = orbit_sizes(length, cfg)
        logging.info("length=%d canonical_plans=%d", length, len(sizes))
        for plan, size in sizes.items():
            info = symmetry_info(plan, cfg)
            row: Dict[str, Any] = {
                'plan': serialize_plan(plan),
                'length': length,
                'orbit_size': size,
                'primitive_period': info['primitive_period'],
                'mirror_symmetric': info['mirror_symmetric'],
                'rotation_symmetric': info['rotation_symmetric'],
            }
            if args.board is not None:
                res = run_simulation(args.board, plan, args.max_steps, sim_cfg)
                row['verdict'] = res.verdict.value
                row['steps'] = res.steps
                row['solved_at'] = res.solved_at
            rows.append(row)
    return rows


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    fnames = sorted({k for r in rows for k in r.keys()})
    rows_sorted = sorted(rows, key=lambda r: (r['length'], r['plan']))
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=fnames)
        w.writeheader()
        for r in rows_sorted:
            w.writerow(r)


def _infer_schema(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    props: Dict[str, Any] = {}
    for k in sorted({kk for r in rows for kk in r.keys()}):
        t = "string"
        for r in rows:
            v = r.get(k)
            if v is None:
                continue
            if isinstance(v, bool):
                t = "boolean"
            elif isinstance(v, int):
                t = "integer"
            elif isinstance(v, float):
                t = "number"
            break
        props[k] = {"type": [t, "null"]}
    return {"$schema": "https://json-schema.org/draft/2020-12/schema",
            "type": "object",
            "properties": props,
            "additionalProperties": False}


def run_export(args: ExportArgs) -> Path:
    if args.min_length <= 0 or args.max_length < args.min_length:
        raise InvalidArgument(
            f"Invalid length range {args.min_length}..{args.max_length}"
        )
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise InvalidArgument(f"Unknown export format: {args.format}")
    if fmt == "parquet" and not _have_parquet_deps():
        # fail before touching the output directory
        raise RuntimeError(
            "Parquet dependencies not available (install pandas and pyarrow). "
            "Use pip install .[parquet] to enable parquet support."
        )
    if args.board is not None:
        args.board.validate()

    logging.info("Enumerating canonical plans of length %d..%d", args.min_length, args.max_length)
    rows = build_plan_rows(args)
    args.out.mkdir(parents=True, exist_ok=True)
    plans_csv = args.out / PLANS_CSV
    plans_parquet = args.out / PLANS_PARQUET

    wrote_csv = False
    wrote_parquet = False
    if fmt in {"csv", "both"}:
        _write_csv(plans_csv, rows)
        wrote_csv = True
        logging.info("Wrote %s (%d rows)", plans_csv, len(rows))
    if fmt in {"parquet", "both"}:
        if _have_parquet_deps():
            import pandas as pd  # type: ignore

            df = pd.DataFrame(sorted(rows, key=lambda r: (r['length'], r['plan'])))
            df.to_parquet(plans_parquet, index=False)
            wrote_parquet = True
            logging.info("Wrote %s", plans_parquet)
        else:
            logging.warning(
                "Parquet dependencies not available; proceeding with CSV only, "
                "manifest will record parquet_written=false."
            )

    files: Dict[str, Any] = {
        "plans_csv": str(plans_csv) if wrote_csv else None,
        "plans_parquet": str(plans_parquet) if wrote_parquet else None,
    }
    checksums = {label: _sha256_file(Path(p)) for label, p in files.items() if p is not None}
    verdicts = Counter(r['verdict'] for r in rows if 'verdict' in r)
    per_length = Counter(r['length'] for r in rows)

    manifest = {
        "dataset_version": DATASET_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "min_length": args.min_length,
            "max_length": args.max_length,
            "max_steps": args.max_steps,
            "max_rotations": args.max_rotations,
            "phase_shift": args.phase_shift,
            "reduce_cycles": args.reduce_cycles,
            "format": fmt,
        },
        "board": args.board.render() if args.board is not None else None,
        **git_provenance(),
        "python": {"python_version": sys.version.split(" ")[0], "packages": _package_versions()},
        "cli_argv": args.cli_argv,
        "row_counts": {"plans": len(rows)},
        "plans_per_length": {str(k): v for k, v in sorted(per_length.items())},
        "verdict_split": dict(sorted(verdicts.items())),
        "schema_hash": {"plans": _schema_hash(rows) if rows else None},
        "files": files,
        "checksums": checksums,
        "parquet_written": wrote_parquet,
    }
    manifest_path = args.out / "manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json with metadata and schema hash")

    schema_dir = args.out / "schema"
    schema_dir.mkdir(parents=True, exist_ok=True)
    (schema_dir / "plans.schema.json").write_text(json.dumps(_infer_schema(rows), indent=2))

    log_params({**manifest["args"], "rows": len(rows)})
    log_metrics({f"verdict_{k}": float(v) for k, v in verdicts.items()})
    log_artifacts([manifest_path] + [Path(p) for p in files.values() if p is not None])
    return args.out
