from __future__ import annotations
import argparse
import json
import os
import sys
from ..ir.dmlplan_importer import load_dmlplan
from ..config import ViewerConfig
from ..errors import PlanLoadError
from ..utils.logging import get_logger
from ..utils.reporting import generate_report


def cmd_inspect(args):
    """Handles the 'inspect' command."""
    config = ViewerConfig.from_args(args)
    get_logger("dmlplan", config.log_level)

    if not config.plan:
        print("Error: no plan given on the command line or in the config file.", file=sys.stderr)
        return 2

    plan = load_dmlplan(config.plan, config)
    generate_report(plan, config, html=not args.no_html, ascii_chart=args.ascii)

    print(f"[OK] Inspected {config.plan}. Reports are in {config.report_dir}")
    return 0


def cmd_dump(args):
    """Handles the 'dump' command."""
    config = ViewerConfig.from_args(args)
    get_logger("dmlplan", config.log_level)

    if not config.plan:
        print("Error: no plan given on the command line or in the config file.", file=sys.stderr)
        return 2

    plan = load_dmlplan(config.plan, config)
    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.output, "w") as f:
        json.dump({"format": plan.format, "graphs": [g.to_dict() for g in plan.graphs]}, f, indent=2)

    print(f"[OK] Wrote graph to {args.output}")
    return 0


def build_parser():
    p = argparse.ArgumentParser(
        prog="dmlplan",
        description="DirectML execution plan reader",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Inspect Command ---
    pi = sub.add_parser("inspect", help="Load a plan and write a segment report",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pi.add_argument("-c", "--config", type=str, default=None,
                    help="Path to YAML config file to override defaults")
    pi.add_argument("plan", nargs='?', default=None,
                    help="Path to *.dmlplan.json (optional if specified in config)")
    pi.add_argument("--report", type=str, default=None, dest="report_dir",
                    help="Directory to save reports")
    pi.add_argument("--no-html", action="store_true",
                    help="Skip the HTML segment chart")
    pi.add_argument("--ascii", action="store_true",
                    help="Print an ASCII segment chart to the console")
    pi.add_argument("--log-level", type=str, default=None, dest="log_level",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="Logging level")
    pi.set_defaults(func=cmd_inspect)

    # --- Dump Command ---
    pd_ = sub.add_parser("dump", help="Write the built graph as JSON",
                         formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pd_.add_argument("-c", "--config", type=str, default=None,
                     help="Path to YAML config file to override defaults")
    pd_.add_argument("plan", nargs='?', default=None,
                     help="Path to *.dmlplan.json (optional if specified in config)")
    pd_.add_argument("-o", "--output", default="out/graph.json",
                     help="Output path for the graph JSON")
    pd_.add_argument("--log-level", type=str, default=None, dest="log_level",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                     help="Logging level")
    pd_.set_defaults(func=cmd_dump)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except PlanLoadError as e:
        print(f"{PlanLoadError.name} {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
