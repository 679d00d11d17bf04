from __future__ import annotations

import os
import re
import uuid

from .config import PROFILE_PREFIX, PROFILE_SUFFIX
from .model import DecodedName, GammaSpec

# Fields after the prefix: g + three 3-digit percentages, t + temperature, - token, suffix.
_FIELDS_RE = re.compile(
    r"g([0-9]{3})([0-9]{3})([0-9]{3})t([0-9]+)-([0-9A-Za-z][0-9A-Za-z-]*)" + re.escape(PROFILE_SUFFIX)
)
_TOKEN_RE = re.compile(r"[0-9A-Za-z][0-9A-Za-z-]*")


def new_token() -> str:
    return str(uuid.uuid4())


def gamma_percentages(gamma: GammaSpec) -> tuple[int, int, int]:
    """Scale gamma to integer percentages. Values outside 0..999 are a caller error."""
    out = tuple(int(round(g * 100.0)) for g in gamma.as_tuple())
    for p in out:
        if not 0 <= p <= 999:
            raise ValueError(f"gamma {gamma.to_axis_value()} does not fit the 3-digit name field")
    return out  # type: ignore[return-value]


def encode(gamma: GammaSpec, temperature: int, token: str) -> str:
    """Return the canonical file name for a tool-generated profile."""
    if temperature < 0:
        raise ValueError(f"temperature must be non-negative, got {temperature}")
    if not _TOKEN_RE.fullmatch(token):
        raise ValueError(f"Invalid profile token: {token!r}")
    r, g, b = gamma_percentages(gamma)
    return f"{PROFILE_PREFIX}g{r:03d}{g:03d}{b:03d}t{int(temperature)}-{token}{PROFILE_SUFFIX}"


def decode(name: str | os.PathLike[str]) -> DecodedName:
    """Decode a profile file name (or path) created by `encode`.

    The percentages round-trip with two decimals of gamma precision only.
    """
    basename = os.path.basename(os.fspath(name))
    if not basename.startswith(PROFILE_PREFIX):
        return DecodedName(status="not_owned", basename=basename)
    m = _FIELDS_RE.fullmatch(basename[len(PROFILE_PREFIX) :])
    if m is None:
        return DecodedName(status="unparseable", basename=basename)
    r, g, b, t = (int(x) for x in m.group(1, 2, 3, 4))
    return DecodedName(status="owned", basename=basename, gamma_percent=(r, g, b), temperature=t)
