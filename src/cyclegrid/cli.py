from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .basics import parse_plan, serialize_plan
from .board import Board, Coord, parse_board
from .datasets import ExportArgs, run_export
from .errors import CycleGridError, InvalidArgument
from .orbits import enumerate_canonical
from .paths import corpus_dir
from .simulator import DEFAULT_MAX_ROTATIONS, SimulatorConfig, run_simulation
from .symmetry import CanonicalizerConfig, symmetry_info
from .tracking import tracked_run
from .validation import validate_solution


def _coord(text: str) -> Coord:
    try:
        r, c = (int(x) for x in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected ROW,COL, got {text!r}") from None
    return (r, c)


def _add_canon_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--no-phase-shift",
        dest="phase_shift",
        action="store_false",
        help="Do not treat cyclic shifts of the start position as equivalent",
    )
    p.add_argument(
        "--no-reduce",
        dest="reduce_cycles",
        action="store_false",
        help="Do not collapse repeated inner cycles to their primitive period",
    )


def _add_board_flags(p: argparse.ArgumentParser, required: bool = True) -> None:
    p.add_argument("--board", type=Path, required=required, help="Text board file (one char per tile)")
    p.add_argument(
        "--agent",
        type=_coord,
        action="append",
        default=[],
        help="Extra agent start cell as ROW,COL (repeatable)",
    )
    p.add_argument("--max-steps", type=int, default=64, help="Simulation step bound (default: 64)")
    p.add_argument(
        "--max-rotations",
        type=int,
        default=DEFAULT_MAX_ROTATIONS,
        help=f"Consecutive rotator spins before a run is STUCK (default: {DEFAULT_MAX_ROTATIONS})",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="cyclegrid", description="Cyclic plan canonicalizer and grid simulator")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--info", action="store_true", help="Print environment and dependency info and exit")

    p_can = sub.add_parser("canonicalize", help="Canonical form of a plan, e.g. NNE")
    p_can.add_argument("--plan", help="Plan string over NESW (omit with --stdin)")
    p_can.add_argument("--stdin", action="store_true", help="Read many plans from stdin and stream CSV output")
    _add_canon_flags(p_can)

    p_enum = sub.add_parser("enumerate", help="List every canonical plan of a given length")
    p_enum.add_argument("--length", type=int, required=True)
    p_enum.add_argument("--count", action="store_true", help="Only print the number of canonical plans")
    _add_canon_flags(p_enum)

    p_sim = sub.add_parser("simulate", help="Run a plan against a board")
    _add_board_flags(p_sim)
    p_sim.add_argument("--plan", required=True)
    p_sim.add_argument("--trace", action="store_true", help="Print every snapshot of the run")

    p_val = sub.add_parser("validate", help="Check that a plan is a valid, minimal solution")
    _add_board_flags(p_val)
    p_val.add_argument("--plan", required=True)
    p_val.add_argument("--max-shorter", type=int, default=None, help="Longest shorter length to search")

    p_exp = sub.add_parser(
        "export",
        help="Export the canonical plan corpus (CSV by default; parquet requires pandas+pyarrow)",
    )
    p_exp.add_argument("--out", type=Path, default=None, help="Output directory (default: data/corpus)")
    p_exp.add_argument("--min-length", type=int, default=1)
    p_exp.add_argument("--max-length", type=int, default=6)
    _add_board_flags(p_exp, required=False)
    _add_canon_flags(p_exp)
    p_exp.add_argument("--format", choices=["csv", "parquet", "both"], default="csv")
    p_exp.add_argument("--tracking", choices=["none", "mlflow"], default="none", help="Experiment tracking backend")
    p_exp.add_argument("--log-dir", type=Path, default=Path("runs"), help="Directory for mlflow local backend")

    return p


def _load_board(path: Path, extra_agents: List[Coord]) -> Board:
    try:
        text = path.read_text()
    except OSError as e:
        raise InvalidArgument(f"Cannot read board file {path}: {e}") from None
    return parse_board(text, extra_agents)


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        if importlib.util.find_spec(pkg) is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            print(f"{pkg}={getattr(mod, '__version__', '?')}")


def _canon_config(ns: argparse.Namespace) -> CanonicalizerConfig:
    return CanonicalizerConfig(phase_shift=ns.phase_shift, reduce_cycles=ns.reduce_cycles)


def _cmd_canonicalize(ns: argparse.Namespace) -> int:
    cfg = _canon_config(ns)
    if ns.stdin:
        w = csv.writer(sys.stdout)
        w.writerow(["plan", "canonical_form", "orbit_size", "canonical_op"])
        for line in sys.stdin:
            raw = line.strip()
            if not raw:
                continue
            try:
                info = symmetry_info(parse_plan(raw), cfg)
            except InvalidArgument:
                continue
            w.writerow([info['plan'], info['canonical_form'], info['orbit_size'], info['canonical_op']])
        return 0
    info = symmetry_info(parse_plan(ns.plan or ""), cfg)
    logging.info(
        "canonical_form=%s orbit_size=%d op=%s period=%d",
        info['canonical_form'],
        info['orbit_size'],
        info['canonical_op'],
        info['primitive_period'],
    )
    return 0


def _cmd_enumerate(ns: argparse.Namespace) -> int:
    plans = enumerate_canonical(ns.length, _canon_config(ns))
    if ns.count:
        print(len(plans))
        return 0
    for plan in sorted(plans):
        print(serialize_plan(plan))
    return 0


def _cmd_simulate(ns: argparse.Namespace) -> int:
    board = _load_board(ns.board, ns.agent)
    res = run_simulation(board, parse_plan(ns.plan), ns.max_steps, SimulatorConfig(ns.max_rotations))
    if ns.trace:
        for i, snap in enumerate(res.trace):
            print(i, " ".join(f"{r},{c}" for r, c in snap))
    logging.info("verdict=%s steps=%d solved_at=%s", res.verdict.value, res.steps, res.solved_at)
    return 0


def _cmd_validate(ns: argparse.Namespace) -> int:
    board = _load_board(ns.board, ns.agent)
    report = validate_solution(
        board,
        parse_plan(ns.plan),
        ns.max_steps,
        SimulatorConfig(ns.max_rotations),
        max_shorter=ns.max_shorter,
    )
    logging.info(
        "solves=%s minimal=%s verdict=%s shorter=%s canonical=%s",
        report['solves'],
        report['is_minimal'],
        report['verdict'],
        report['shorter_solution'],
        report['canonical_form'],
    )
    return 0


def _cmd_export(ns: argparse.Namespace, argv: Optional[List[str]]) -> int:
    board = _load_board(ns.board, ns.agent) if ns.board is not None else None
    out = ns.out if ns.out is not None else corpus_dir()
    with tracked_run(ns.tracking == "mlflow", run_name="corpus_export", log_dir=ns.log_dir):
        out = run_export(ExportArgs(
            out=out,
            min_length=ns.min_length,
            max_length=ns.max_length,
            board=board,
            max_steps=ns.max_steps,
            max_rotations=ns.max_rotations,
            phase_shift=ns.phase_shift,
            reduce_cycles=ns.reduce_cycles,
            cli_argv=list(argv) if argv is not None else None,
            format=ns.format,
        ))
    logging.info("Exported corpus to: %s", out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if ns.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.version:
        try:
            from importlib.metadata import version as _ver

            print(_ver("cyclegrid"))
        except Exception:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    try:
        if ns.cmd == "canonicalize":
            return _cmd_canonicalize(ns)
        if ns.cmd == "enumerate":
            return _cmd_enumerate(ns)
        if ns.cmd == "simulate":
            return _cmd_simulate(ns)
        if ns.cmd == "validate":
            return _cmd_validate(ns)
        if ns.cmd == "export":
            return _cmd_export(ns, argv)
    except CycleGridError as e:
        logging.error("%s: %s", type(e).__name__, e)
        return 2
    except RuntimeError as e:
        logging.error("%s", e)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
