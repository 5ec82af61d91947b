"""
Command-line interface for ngspicex batch operations.

Parse netlists, generate control decks, run simulations and drive the
command console without a UI.

Usage::

    python -m cli parse circuit.cir
    python -m cli deck circuit.cir --analysis ac
    python -m cli simulate circuit.cir --format csv --output results.csv
    python -m cli simulate circuit.cir --offline
    python -m cli batch netlists/ --output-dir results/
    python -m cli console circuit.cir < commands.txt
    python -m cli settings --write
"""

import argparse
import glob
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import anyio

from controllers.console_controller import ConsoleController
from controllers.simulation_controller import SimulationController, SimulationError
from models.analysis import AnalysisKind
from simulation.analysis_detector import detect_analysis
from simulation.control_deck import generate_control_deck
from simulation.csv_exporter import export_result
from simulation.netlist_parser import parse_netlist
from simulation.ngspice_runner import EngineError
from simulation.settings import ENGINE_OFFLINE, default_settings_path, load_settings, save_settings

NETLIST_PATTERNS = ("*.cir", "*.sp", "*.spice", "*.net")


def try_read_netlist(filepath: str) -> tuple[str | None, str]:
    """Read a netlist file without exiting.

    Returns:
        (text, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"
    try:
        return path.read_text(), ""
    except (OSError, UnicodeDecodeError) as e:
        return None, f"could not read {filepath}: {e}"


def read_netlist(filepath: str) -> str:
    """Read a netlist file.

    Raises:
        SystemExit: On file read errors.
    """
    text, error = try_read_netlist(filepath)
    if text is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return text


def _settings_from_args(args: argparse.Namespace):
    settings = load_settings(getattr(args, "settings", None))
    if getattr(args, "offline", False):
        settings = replace(settings, engine=ENGINE_OFFLINE)
    return settings


def _write_output(text: str, output: str | None, what: str) -> None:
    if output:
        Path(output).write_text(text)
        print(f"{what} written to {output}", file=sys.stderr)
    else:
        print(text)


def _print_parse_errors(circuit) -> None:
    for err in circuit.errors:
        print(f"  line {err.line}: {err.message}: {err.text}", file=sys.stderr)


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a netlist and print its structure as JSON."""
    circuit = parse_netlist(read_netlist(args.netlist))
    data = circuit.to_dict()
    data["analysis"] = detect_analysis(circuit.directives).value
    _write_output(json.dumps(data, indent=2), args.output, "Circuit")

    if circuit.has_errors:
        print(f"Netlist has {len(circuit.errors)} error(s):", file=sys.stderr)
        _print_parse_errors(circuit)
        return 1
    return 0


def cmd_deck(args: argparse.Namespace) -> int:
    """Print the ngspice control deck for a netlist."""
    text = read_netlist(args.netlist)
    if args.analysis:
        kind = AnalysisKind.from_name(args.analysis)
    else:
        kind = detect_analysis(parse_netlist(text).directives)
    _write_output(generate_control_deck(text, kind), args.output, "Control deck")
    return 0


def _format_result(result, fmt: str, circuit_name: str = "") -> str:
    """Format simulation result as text."""
    if fmt == "csv":
        return export_result(result, circuit_name)
    return json.dumps(result.to_dict(), indent=2)


def _run_one(controller: SimulationController, text: str):
    """Run one simulation; returns (result, error_message)."""
    try:
        return anyio.run(controller.run_simulation, text), ""
    except SimulationError as e:
        return None, str(e)
    except EngineError as e:
        return None, f"Simulation failed: {e}"


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run simulation and output results."""
    text = read_netlist(args.netlist)
    controller = SimulationController(settings=_settings_from_args(args))

    result, error = _run_one(controller, text)
    if result is None:
        print(error, file=sys.stderr)
        _print_parse_errors(controller.circuit)
        return 1

    print(result.message, file=sys.stderr)
    output_text = _format_result(result, args.format, controller.circuit.title)
    _write_output(output_text, args.output, "Results")
    return 0


def _collect_netlists(pattern: str):
    path = Path(pattern)
    if path.is_dir():
        files = set()
        for suffix in NETLIST_PATTERNS:
            files.update(path.glob(suffix))
        return sorted(files)
    if "*" in pattern or "?" in pattern:
        return sorted(Path(p) for p in glob.glob(pattern))
    return None


def cmd_batch(args: argparse.Namespace) -> int:
    """Run simulations on multiple netlist files."""
    files = _collect_netlists(args.path)
    if files is None:
        print(f"Error: {args.path} is not a directory or glob pattern", file=sys.stderr)
        return 1
    if not files:
        print(f"No netlist files found matching: {args.path}", file=sys.stderr)
        return 1

    output_dir = None
    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    settings = _settings_from_args(args)
    results_summary = []
    any_failed = False

    for filepath in files:
        text, error = try_read_netlist(str(filepath))
        if text is None:
            results_summary.append({"file": filepath.name, "status": "LOAD_ERROR", "error": error})
            any_failed = True
            if args.fail_fast:
                break
            continue

        controller = SimulationController(settings=settings)
        result, error = _run_one(controller, text)
        if result is None:
            results_summary.append({"file": filepath.name, "status": "FAIL", "error": error})
            any_failed = True
            if args.fail_fast:
                break
            continue

        results_summary.append({"file": filepath.name, "status": "OK", "analysis": result.analysis_kind.label})

        if output_dir:
            ext = "csv" if args.format == "csv" else "json"
            out_path = output_dir / f"{filepath.stem}.{ext}"
            out_path.write_text(_format_result(result, args.format, controller.circuit.title))

    print(f"\n{'File':<40} {'Status':<12} {'Details'}")
    print("-" * 70)
    for entry in results_summary:
        details = entry.get("analysis", entry.get("error", ""))
        print(f"{entry['file']:<40} {entry['status']:<12} {details}")

    total = len(results_summary)
    passed = sum(1 for e in results_summary if e["status"] == "OK")
    print(f"\n{passed}/{total} succeeded, {total - passed} failed")

    return 1 if any_failed else 0


async def _console_session(console: ConsoleController, stream) -> None:
    # Lines are read in a worker thread so the event loop stays free.
    async for line in anyio.wrap_file(stream):
        await console.send_command(line.rstrip("\n"))
        if not console.active:
            break


def _print_output(event, data) -> None:
    if event == "output":
        print(data)


def cmd_console(args: argparse.Namespace) -> int:
    """Read console commands from stdin, one per line."""
    controller = SimulationController(settings=_settings_from_args(args))
    controller.add_observer(_print_output)

    if args.netlist:
        result, error = _run_one(controller, read_netlist(args.netlist))
        if result is None:
            print(error, file=sys.stderr)
            return 1

    console = ConsoleController(controller)
    anyio.run(_console_session, console, sys.stdin)
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    """Show the effective engine settings, optionally writing them out."""
    path = Path(args.settings) if args.settings else default_settings_path()
    settings = load_settings(path)
    print(json.dumps(settings.to_dict(), indent=2))
    if args.write:
        save_settings(settings, path)
        print(f"Settings written to {path}", file=sys.stderr)
    return 0


def _add_engine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--offline", action="store_true", help="Do not start ngspice; use synthetic results")
    parser.add_argument("--settings", help="Path to a settings JSON file")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ngspicex",
        description="ngspicex batch operations: parse netlists, generate control decks and run simulations.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # parse
    parse_parser = subparsers.add_parser("parse", help="Parse a netlist and print it as JSON")
    parse_parser.add_argument("netlist", help="Path to SPICE netlist file (.cir, .spice, .sp)")
    parse_parser.add_argument("--output", "-o", help="Write JSON to file instead of stdout")

    # deck
    deck_parser = subparsers.add_parser("deck", help="Print the ngspice control deck for a netlist")
    deck_parser.add_argument("netlist", help="Path to SPICE netlist file")
    deck_parser.add_argument(
        "--analysis",
        choices=[kind.keyword for kind in AnalysisKind],
        help="Override the analysis detected from the netlist",
    )
    deck_parser.add_argument("--output", "-o", help="Write the deck to file instead of stdout")

    # simulate
    sim_parser = subparsers.add_parser("simulate", help="Run simulation and output results")
    sim_parser.add_argument("netlist", help="Path to SPICE netlist file")
    sim_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format (default: json)")
    sim_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")
    _add_engine_options(sim_parser)

    # batch
    batch_parser = subparsers.add_parser("batch", help="Run simulations on multiple netlist files")
    batch_parser.add_argument("path", help="Directory or glob pattern matching netlist files")
    batch_parser.add_argument(
        "--format", choices=["json", "csv"], default="json", help="Output format for per-file results (default: json)"
    )
    batch_parser.add_argument("--output-dir", help="Write per-file results to this directory")
    batch_parser.add_argument("--fail-fast", action="store_true", help="Stop on first error")
    _add_engine_options(batch_parser)

    # console
    console_parser = subparsers.add_parser("console", help="Run console commands read from stdin")
    console_parser.add_argument("netlist", nargs="?", help="Simulate this netlist before reading commands")
    _add_engine_options(console_parser)

    # settings
    settings_parser = subparsers.add_parser("settings", help="Show engine settings")
    settings_parser.add_argument("--settings", help="Path to a settings JSON file")
    settings_parser.add_argument("--write", action="store_true", help="Write the effective settings to the file")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "parse": cmd_parse,
        "deck": cmd_deck,
        "simulate": cmd_simulate,
        "batch": cmd_batch,
        "console": cmd_console,
        "settings": cmd_settings,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
