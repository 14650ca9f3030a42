#!/usr/bin/env python3
"""
Value Stream Analyzer CLI

Computes process-improvement metrics for a value stream map:
- Cycle time per process (process time + incoming wait time)
- Lead time and value-added ratio
- Probability-weighted rework time per process
- Worst-case (exception) lead time

Usage:
    # Analyze a map stored as JSON or YAML
    python analyze_vsm.py stream.json

    # Analyze the bundled sample stream
    python analyze_vsm.py --sample

    # Print or save the map with computed metrics
    python analyze_vsm.py stream.yaml --json
    python analyze_vsm.py --sample --output results/sample.json

Environment:
    VSM_INFER_REWORK_FROM_POSITION  classify unlabelled right-to-left connections as rework (default: true)
    VSM_LOG_LEVEL                   log level when --verbose is not given (default: WARNING)
    VSM_DISPLAY_PRECISION           decimals shown in the report (default: 2)
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from valuestream.adapters import load_vsm, dump_vsm
from valuestream.application import create_sample_vsm
from valuestream.config import Settings
from valuestream.domain.services import MetricsCalculator, MetricsAnalysis


# =============================================================================
# Terminal Colors
# =============================================================================

class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    END = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    @classmethod
    def disable(cls):
        for attr in ['HEADER', 'BLUE', 'CYAN', 'GREEN', 'YELLOW', 'RED', 'END', 'BOLD', 'DIM']:
            setattr(cls, attr, '')


def use_colors() -> bool:
    """Check if terminal supports colors"""
    import os
    return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty() and not os.getenv('NO_COLOR')


# =============================================================================
# Output Helpers
# =============================================================================

def print_header(text: str) -> None:
    print(f"\n{Colors.HEADER}{Colors.BOLD}{'='*70}{Colors.END}")
    print(f"{Colors.HEADER}{Colors.BOLD}{text:^70}{Colors.END}")
    print(f"{Colors.HEADER}{Colors.BOLD}{'='*70}{Colors.END}")


def print_section(title: str) -> None:
    print(f"\n{Colors.CYAN}{Colors.BOLD}{title}{Colors.END}")
    print(f"{Colors.DIM}{'-'*50}{Colors.END}")


def print_kv(key: str, value, indent: int = 2) -> None:
    print(f"{' '*indent}{Colors.BLUE}{key}:{Colors.END} {value}")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓{Colors.END} {text}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}⚠{Colors.END} {text}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗{Colors.END} {text}", file=sys.stderr)


def ratio_color(ratio: float) -> str:
    """Get color for a value-added ratio"""
    if ratio >= 0.5:
        return Colors.GREEN
    if ratio >= 0.25:
        return Colors.YELLOW
    return Colors.RED


# =============================================================================
# Report
# =============================================================================

def print_report(title: str, analysis: MetricsAnalysis, precision: int = 2) -> None:
    """Print stream totals, the per-process table and the priced rework loops"""
    metrics = analysis.metrics
    flow = analysis.flow
    fmt = f"{{:.{precision}f}}"

    print_header(f"Value Stream: {title}")

    print_section("Stream Totals")
    print_kv("Lead Time", fmt.format(metrics.total_lead_time))
    print_kv("Value-Added Time", fmt.format(metrics.total_value_added_time))
    print_kv("Wait Time", fmt.format(metrics.total_wait_time))
    ratio = metrics.value_added_ratio
    print_kv("Value-Added Ratio", f"{ratio_color(ratio)}{ratio * 100:.1f}%{Colors.END}")
    print_kv("Average C/A", f"{metrics.average_complete_accurate:.1f}%")
    print_kv("Rework Time", fmt.format(metrics.total_rework_time))
    print_kv("Worst-Case Lead Time", fmt.format(metrics.worst_case_lead_time))

    print_section("Processes")
    print(f"  {Colors.BOLD}{'Process':<24} {'PT':>8} {'CT':>8} {'C/A':>6} {'Rework':>8}  Flow{Colors.END}")
    for process_id in flow.flow_order():
        process = flow.processes[process_id]
        status = analysis.statuses[process_id]
        complete_accurate = "-" if status.is_last else f"{process.metrics.effective_complete_accurate:.0f}%"
        print(
            f"  {process.name[:24]:<24} "
            f"{fmt.format(process.metrics.process_time):>8} "
            f"{fmt.format(metrics.cycle_time_by_process[process_id]):>8} "
            f"{complete_accurate:>6} "
            f"{fmt.format(metrics.rework_cycle_time_by_process[process_id]):>8}  "
            f"{Colors.DIM}{status.indicator or ''}{Colors.END}"
        )

    if analysis.rework.paths:
        print_section("Rework Loops")
        for path in analysis.rework.paths:
            names = " -> ".join(flow.processes[pid].name for pid in path.process_ids)
            line = (
                f"{path.kind.value:<9} {flow.processes[path.source_id].name} -> "
                f"{flow.processes[path.target_id].name}: "
                f"{fmt.format(path.elapsed)} x {path.probability:.2f} = {fmt.format(path.weighted)}"
            )
            print(f"  {line}")
            print(f"  {Colors.DIM}{'':<9} via {names}{Colors.END}")
            if not path.reached:
                print_warning(f"no normal path back to {path.source_id}; partial loop used")

    cycle = flow.find_normal_cycle()
    if cycle:
        print_warning("Normal flow contains a cycle: " + " -> ".join(u for u, _ in cycle))
    if flow.dangling:
        print_warning(f"{len(flow.dangling)} connection(s) reference unknown processes and were ignored")

    print()


# =============================================================================
# Main
# =============================================================================

def parse_args():
    parser = argparse.ArgumentParser(
        description="Compute lead time, rework and value-added metrics for a value stream map",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python analyze_vsm.py stream.json
    python analyze_vsm.py --sample
    python analyze_vsm.py stream.yaml --json
    python analyze_vsm.py --sample --output results/sample.json
        """,
    )

    # Input options
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        help="VSM document (.json, .yaml, .yml)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Analyze the bundled sample value stream",
    )
    parser.add_argument(
        "--no-infer-rework",
        action="store_true",
        help="Do not classify unlabelled right-to-left connections as rework",
    )

    # Output options
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the VSM with computed metrics as JSON instead of the report",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the VSM with computed metrics to a JSON file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = Settings.from_env()
    if args.no_infer_rework:
        settings.infer_rework_from_position = False

    log_level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    # Handle colors
    if args.no_color or not use_colors():
        Colors.disable()

    if not args.sample and args.input is None:
        print_error("Either an input file or --sample is required")
        return 1

    try:
        calculator = MetricsCalculator.from_settings(settings)
        if args.sample:
            vsm = create_sample_vsm(calculator=calculator)
        else:
            vsm = load_vsm(args.input, calculator=calculator)

        analysis = calculator.analyze(vsm.processes, vsm.connections)

        if args.json:
            print(dump_vsm(vsm))
        else:
            print_report(vsm.title, analysis, precision=settings.display_precision)

        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            with open(args.output, "w") as f:
                f.write(dump_vsm(vsm))
            if not args.json:
                print_success(f"Results saved to {args.output}")

        return 0

    except Exception as e:
        print_error(f"Analysis failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
