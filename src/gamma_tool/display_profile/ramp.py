from __future__ import annotations

from collections.abc import Callable

from .config import N_SAMPLES
from .model import GammaRamp, GammaSpec, RampSample

Whitepoint = Callable[[int], tuple[float, float, float]]


def _clamp(v: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return min(max(v, lo), hi)


def default_whitepoint() -> Whitepoint:
    # Imported lazily so the numeric code does not require PyGObject.
    from .colord_service import blackbody_rgb

    return blackbody_rgb


def synthesize(
    gamma: GammaSpec,
    temperature: int,
    *,
    whitepoint: Whitepoint | None = None,
    n_samples: int = N_SAMPLES,
) -> GammaRamp:
    """Build the per-channel gamma ramp (VCGT) for a gamma spec and color temperature.

    Sample `i` of channel `c` is `whitepoint[c] * (i / (n - 1)) ** (1 / gamma[c])`,
    clamped to [0, 1]. The reciprocal exponent makes gamma > 1 darken the midtones.
    If the white point lookup raises, no ramp is produced.
    """
    if n_samples < 2:
        raise ValueError(f"n_samples must be >= 2, got {n_samples}")
    lookup = default_whitepoint() if whitepoint is None else whitepoint
    white = lookup(temperature)
    factors = tuple(1.0 / g for g in gamma.as_tuple())

    samples: list[RampSample] = []
    for i in range(n_samples):
        step = i / (n_samples - 1)
        r, g, b = (_clamp(w * step**f) for w, f in zip(white, factors))
        samples.append(RampSample(r=r, g=g, b=b))
    return tuple(samples)
