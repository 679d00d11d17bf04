from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import workflow
from .config import (
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    NEUTRAL_TEMPERATURE,
    REGISTRATION_TIMEOUT_S,
    AppConfig,
    parse_gamma,
    validate_temperature,
)
from .model import GammaSpec, Mode


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def _gamma_arg(value: str) -> GammaSpec:
    try:
        return parse_gamma(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _temperature_arg(value: str) -> int:
    try:
        return validate_temperature(int(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _device_index_arg(value: str) -> int:
    try:
        idx = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid device index: {value!r}") from None
    if idx < 0:
        raise argparse.ArgumentTypeError(f"Device index must be >= 0, got {idx}")
    return idx


def _timeout_arg(value: str) -> float:
    try:
        t = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid timeout: {value!r}") from None
    if t < 0:
        raise argparse.ArgumentTypeError(f"Timeout must be >= 0, got {t}")
    return t


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the display gamma tool."""
    parser = argparse.ArgumentParser(
        prog="gamma-tool",
        description="Apply gamma and color temperature to displays through a colord ICC profile.",
    )
    parser.add_argument("-d", "--device", type=_device_index_arg, default=None, metavar="INDEX",
                        help="Target a specific display index (default: all displays).")
    parser.add_argument("-g", "--gamma", type=_gamma_arg, default=GammaSpec.uniform(1.0), metavar="R:G:B|G",
                        help="Target gamma (e.g. 0.8 or 0.8:1.0:1.2), 1.0 is neutral.")
    parser.add_argument("-t", "--temperature", type=_temperature_arg, default=NEUTRAL_TEMPERATURE, metavar="TEMPERATURE",
                        help=f"Target color temperature in Kelvin ({MIN_TEMPERATURE}-{MAX_TEMPERATURE}), {NEUTRAL_TEMPERATURE} is neutral.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-r", "--remove", action="store_true", help="Remove the current profile if this tool created it.")
    mode.add_argument("-i", "--info", action="store_true", help="Display info about the current profile.")
    parser.add_argument("--timeout", type=_timeout_arg, default=REGISTRATION_TIMEOUT_S, metavar="SECONDS",
                        help="How long to wait for colord to detect a new profile.")
    parser.add_argument("--strict", action="store_true", help="Exit non-zero if any device fails.")
    parser.add_argument("--summary", type=_abs_path, default=None, metavar="PATH",
                        help="Write a JSON summary of per-device outcomes.")
    return parser


def config_from_args(ns: argparse.Namespace) -> AppConfig:
    mode: Mode = "info" if ns.info else "remove" if ns.remove else "apply"
    return AppConfig(
        gamma=ns.gamma,
        temperature=ns.temperature,
        mode=mode,
        device_index=ns.device,
        timeout_s=ns.timeout,
        strict=ns.strict,
        summary_path=ns.summary,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        return 1
    ns = parser.parse_args(argv)
    try:
        config = config_from_args(ns)
    except ValueError as e:
        parser.error(str(e))
    return workflow.run(config)


if __name__ == "__main__":
    raise SystemExit(main())
