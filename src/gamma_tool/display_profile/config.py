from __future__ import annotations

import math
from pathlib import Path

import attrs

from .model import GammaSpec, Mode

N_SAMPLES = 256

PROFILE_PREFIX = "gamma-tool-"
PROFILE_SUFFIX = ".icc"

# colord notices new files through a filesystem watch, not through the save call.
REGISTRATION_TIMEOUT_S = 4.0
POLL_INTERVAL_S = 0.01

REFERENCE_PROFILE = "sRGB.icc"

MIN_TEMPERATURE = 1000
# Upper end of libcolord's Planckian table; beyond it the white point lookup fails.
MAX_TEMPERATURE = 10000
NEUTRAL_TEMPERATURE = 6500
NEUTRAL_GAMMA = 1.0
MAX_GAMMA_PERCENT = 999

MODES: tuple[Mode, ...] = ("apply", "info", "remove")


def parse_gamma(value: str) -> GammaSpec:
    """Parse `G` or `R:G:B` into a GammaSpec."""
    parts = [p.strip() for p in value.split(":")]
    if len(parts) not in (1, 3):
        raise ValueError(f"Invalid gamma {value!r}: expected G or R:G:B")
    try:
        floats = [float(p) for p in parts]
    except ValueError:
        raise ValueError(f"Invalid gamma {value!r}: not a number") from None
    if len(floats) == 1:
        return GammaSpec.uniform(floats[0])
    return GammaSpec(*floats)


def validate_temperature(value: int) -> int:
    if not MIN_TEMPERATURE <= value <= MAX_TEMPERATURE:
        raise ValueError(f"Temperature must be within {MIN_TEMPERATURE}..{MAX_TEMPERATURE}K, got {value}")
    return value


def _gamma_validator(instance: "AppConfig", attribute: attrs.Attribute, value: GammaSpec) -> None:
    # Profile names carry gamma as 3-digit percentages.
    if any(round(g * 100.0) > MAX_GAMMA_PERCENT for g in value.as_tuple()):
        raise ValueError(f"Gamma {value.to_axis_value()} is too large (max {MAX_GAMMA_PERCENT / 100.0:.2f})")


def _temperature_validator(instance: "AppConfig", attribute: attrs.Attribute, value: int) -> None:
    validate_temperature(value)


def _device_index_validator(instance: "AppConfig", attribute: attrs.Attribute, value: int | None) -> None:
    if value is not None and value < 0:
        raise ValueError(f"Device index must be >= 0, got {value}")


def _timeout_validator(instance: "AppConfig", attribute: attrs.Attribute, value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Timeout must be a non-negative number of seconds, got {value}")


@attrs.define(frozen=True, slots=True)
class AppConfig:
    """Immutable parsed invocation settings. `device_index=None` means every display."""

    gamma: GammaSpec = attrs.field(factory=lambda: GammaSpec.uniform(NEUTRAL_GAMMA), validator=_gamma_validator)
    temperature: int = attrs.field(default=NEUTRAL_TEMPERATURE, validator=_temperature_validator)
    mode: Mode = attrs.field(default="apply", validator=attrs.validators.in_(MODES))
    device_index: int | None = attrs.field(default=None, validator=_device_index_validator)
    timeout_s: float = attrs.field(default=REGISTRATION_TIMEOUT_S, validator=_timeout_validator)
    strict: bool = False
    summary_path: Path | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "gamma": list(self.gamma.as_tuple()),
            "temperature": self.temperature,
            "mode": self.mode,
            "device_index": self.device_index,
            "timeout_s": self.timeout_s,
            "strict": self.strict,
        }
