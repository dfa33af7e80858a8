"""Command-line interface: simulated install run exercising the reporter."""

import argparse
import asyncio
import logging
import random
import sys

import tracerite

from streamreport.config import Configuration
from streamreport.errors import ReportError
from streamreport.messages import MessageName
from streamreport.report import StreamReport
from streamreport.sources import ProgressCounter

tracerite.load()

__all__ = ["main"]

PACKAGE_NAMES = [
    "left-pad",
    "lodash",
    "chalk",
    "debug",
    "ms",
    "semver",
    "minimist",
    "commander",
    "tslib",
    "react",
    "typescript",
    "esbuild",
]


def package_names(count: int) -> list[str]:
    """Distinct fake package names, suffixed once the base list runs out."""
    names = []
    for i in range(count):
        base = PACKAGE_NAMES[i % len(PACKAGE_NAMES)]
        round_ = i // len(PACKAGE_NAMES)
        names.append(f"{base}@{round_ + 1}.0.0")
    return names


async def resolve(report: StreamReport, names: list[str], rng: random.Random, delay: float):
    counter = ProgressCounter(len(names))
    report.report_progress(counter)
    for name in names:
        await asyncio.sleep(delay)
        if rng.random() < 0.1:
            report.report_warning(
                MessageName.MISSING_PEER_DEPENDENCY,
                f"{name} doesn't provide a peer dependency requested by its dependents",
            )
        counter.tick()


async def fetch(report: StreamReport, names: list[str], rng: random.Random, delay: float):
    counter = ProgressCounter(len(names))
    report.report_progress(counter)
    for name in names:
        await asyncio.sleep(delay)
        if rng.random() < 0.5:
            report.report_cache_hit(name)
        else:
            report.report_cache_miss(name)
            report.report_info(
                MessageName.FETCH_NOT_CACHED,
                f"{name} can't be found in the cache and will be fetched from the remote registry",
            )
        counter.tick()


async def build(report: StreamReport, name: str, steps: int, delay: float, fail: bool):
    counter = ProgressCounter(steps)
    handle = report.report_progress(counter)
    for step in range(steps):
        await asyncio.sleep(delay)
        if fail and step == steps // 2:
            handle.stop()
            raise ReportError(MessageName.BUILD_FAILED, f"{name} couldn't be built successfully")
        counter.tick()


async def link(report: StreamReport, names: list[str], delay: float, fail: bool):
    builds = names[:3]
    await asyncio.gather(
        *(
            build(report, name, steps=10 + 5 * i, delay=delay, fail=fail and i == 0)
            for i, name in enumerate(builds)
        )
    )


async def simulate(report: StreamReport, args):
    rng = random.Random(args.seed)
    names = package_names(args.packages)
    await report.start_timer("Resolution step", lambda: resolve(report, names, rng, args.delay))
    report.report_separator()
    await report.start_timer("Fetch step", lambda: fetch(report, names, rng, args.delay))
    report.report_separator()
    await report.start_timer("Link step", lambda: link(report, names, args.delay, args.fail))


def _main() -> int:
    """Internal main function that may raise exceptions."""
    parser = argparse.ArgumentParser(description="Simulate an install run with live progress")
    parser.add_argument("command", nargs="?", default="simulate", choices=["simulate"])
    parser.add_argument(
        "-n",
        "--packages",
        help="Number of packages to simulate (default: 20)",
        type=int,
        default=20,
    )
    parser.add_argument("--seed", help="Random seed for repeatable runs", type=int, default=None)
    parser.add_argument(
        "--delay",
        help="Seconds per simulated step (default: 0.02)",
        type=float,
        default=0.02,
    )
    parser.add_argument("--json", action="store_true", help="Emit one JSON record per line")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    parser.add_argument("--no-timers", action="store_true", help="Omit timings from the output")
    parser.add_argument("--no-footer", action="store_true", help="Skip the summary line")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode: only report errors and the summary",
    )
    parser.add_argument("--fail", action="store_true", help="Make one build step fail")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if args.packages < 0:
        raise ValueError("Number of packages cannot be negative")
    if args.delay < 0:
        raise ValueError("Delay cannot be negative")

    overrides = {"enable_timers": not args.no_timers}
    if args.no_progress:
        overrides["enable_progress_bars"] = False
    configuration = Configuration.from_environment(sys.stdout, **overrides)

    report = asyncio.run(
        StreamReport.start(
            lambda report: simulate(report, args),
            configuration=configuration,
            stdout=sys.stdout,
            json=args.json,
            include_footer=not args.no_footer,
            include_logs=not args.quiet,
        )
    )
    return report.exit_code()


def main():
    """Main entry point for the CLI with exception handling."""
    try:
        sys.exit(_main())
    except (KeyboardInterrupt, BrokenPipeError):
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
