"""Command line entry point running the demo world for a few turns."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from rich.console import Console
from rich.logging import RichHandler

from .config import PlannerConfig, load_config
from .world.scenario import build_demo


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strategist",
        description="Plan turns for the AI faction of the demo world",
    )
    parser.add_argument("--turns", type=int, default=5, help="Number of turns to run")
    parser.add_argument("--seed", type=int, default=None, help="Override the configured seed")
    parser.add_argument("--config", default=None, help="Planner TOML configuration file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the demo and print one report per turn."""

    args = _parser().parse_args(argv)
    console = Console()
    logging.basicConfig(
        level=args.log_level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    config: PlannerConfig = load_config(args.config)
    if args.seed is not None:
        config = config.model_copy(update={"seed": args.seed})
    demo = build_demo(config.seed, config)
    for _ in range(max(0, args.turns)):
        report = demo.run_turn()
        console.print(report.render_table())
    counts = demo.orchestrator.reports.as_frame()
    if not counts.is_empty():
        console.print(f"{counts.height} planning decisions over {args.turns} turn(s)")
    return 0


if __name__ == "__main__":  # pragma: no cover - module entry point
    raise SystemExit(main())
