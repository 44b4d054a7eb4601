"""
Command line entry point: simulate a building description and write results.
"""
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from .config import load_building, load_config_file
from .diagnostics import EMPDInputError
from .logging_config import setup_logging
from .report import report
from .simulation import run_simulation, steps_from_dict

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="EMPD surface moisture simulation")
    parser.add_argument("building", help="YAML or JSON building description with 'steps'")
    parser.add_argument("-o", "--output", help="Write results as JSON to this file")
    parser.add_argument("--html", help="Write an HTML report to this file")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--display-extra-warnings", action="store_true",
                        help="Report every surface without an EMPD inside layer")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    data = load_config_file(args.building)
    building, settings, config = load_building(data)
    if args.display_extra_warnings:
        config.display_extra_warnings = True
    setup_logging(args.log_level or config.log_level, args.log_file)

    try:
        results = run_simulation(building, settings, steps_from_dict(data.get("steps", [])), config)
    except EMPDInputError as exc:
        logger.error("%s", exc)
        return 1

    if args.output:
        Path(args.output).write_text(json.dumps(results, indent=2), encoding="utf-8")
        logger.info("Results written to %s", args.output)
    if args.html:
        Path(args.html).write_text(report(results), encoding="utf-8")
        logger.info("Report written to %s", args.html)
    if not args.output and not args.html:
        for name, series in results["surfaces"].items():
            print(f"{name}: RH {series['rh'][-1]:.1f} %, latent {series['heat_flux_latent'][-1]:.3f} W/m2")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
