"""Command-line entry point for mapmatch.

Without arguments the CLI prints the installed version, location, and
interpreter/runtime details to stderr. The ``locate`` command runs the zone
localization pipeline on image files and prints the decision as JSON.

Usage:
  mapmatch
  mapmatch locate minimap.png zone_a.png zone_b.png --scale 2 --step 2
  mapmatch locate frame.png zone_a.png --roi 1650 40 220 220 --settings '{"gamma": 3}'
"""

from __future__ import annotations

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from . import _about  # pyright: ignore[reportPrivateUsage]
from .core import load_image
from .localization import locate
from .models import LocatorSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ("main",)

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(module)s - %(funcName)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _print_info() -> None:
    """Print package info to stderr."""
    about_file = _about.__file__
    path = Path(about_file).resolve().parent if about_file else Path.cwd()
    version = _about.__version__
    python_summary = f"{platform.python_implementation()} {platform.python_version()} {platform.python_compiler()}"
    uname_summary = " ".join(part.strip() for part in platform.uname() if part and part.strip())

    sys.stderr.write(f"mapmatch ({version})\n")
    sys.stderr.write(f"located at {path}\n")
    sys.stderr.write(f"{python_summary}\n")
    sys.stderr.write(f"{uname_summary}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mapmatch", description="Minimap localization on zone maps.")
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    commands = parser.add_subparsers(dest="command")

    locate_cmd = commands.add_parser("locate", help="find the zone and offset shown by a minimap")
    locate_cmd.add_argument("minimap", type=Path, help="minimap crop, or full frame with --roi")
    locate_cmd.add_argument("maps", type=Path, nargs="+", help="zone maps; the file stem names the zone")
    locate_cmd.add_argument("--roi", type=int, nargs=4, metavar=("X", "Y", "W", "H"), help="minimap region")
    locate_cmd.add_argument("--settings", default="", help="locator settings as a JSON object")
    locate_cmd.add_argument("--scale", type=int, help="integer downscale factor")
    locate_cmd.add_argument("--step", type=int, help="search lattice spacing")
    locate_cmd.add_argument("--probe-step", type=int, help="probe sampling stride")
    locate_cmd.add_argument("--gamma", type=float, help="edge-weight exponent")
    locate_cmd.add_argument("--luma-threshold", type=int, help="darkest luma treated as map content")
    locate_cmd.add_argument("--concurrent", action="store_true", help="scan row bands on a thread pool")
    return parser


def _settings_from_args(args: argparse.Namespace) -> LocatorSettings:
    params = json.loads(args.settings) if args.settings.strip() else {}
    if not isinstance(params, dict):
        msg = "--settings must be a JSON object."
        raise ValueError(msg)  # noqa: TRY004
    overrides = {
        "scale": args.scale,
        "step": args.step,
        "probe_step": args.probe_step,
        "gamma": args.gamma,
        "luma_threshold": args.luma_threshold,
        "concurrent": True if args.concurrent else None,
    }
    params.update({key: value for key, value in overrides.items() if value is not None})
    return LocatorSettings.from_mapping(params)


def _run_locate(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    minimap = load_image(args.minimap)
    maps = {path.stem: load_image(path) for path in args.maps}
    roi = tuple(args.roi) if args.roi else None

    result = locate(minimap, maps, settings, roi=roi)
    sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
    return 0 if result.located else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the requested command.

    Returns:
        Process exit code; ``locate`` returns 1 when nothing was located and 2 on invalid input.
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level="DEBUG" if args.verbose else "WARNING",
        format=_LOG_FORMAT,
        datefmt=_LOG_DATE_FORMAT,
    )

    if args.command != "locate":
        _print_info()
        return 0

    try:
        return _run_locate(args)
    except (FileNotFoundError, ValueError) as exc:
        sys.stderr.write(f"mapmatch: {exc}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
