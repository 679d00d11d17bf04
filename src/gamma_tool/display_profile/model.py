from __future__ import annotations

import math
from typing import Any, Literal

import attrs

Mode = Literal["apply", "info", "remove"]
OutcomeStatus = Literal["ok", "skipped", "fail"]
NameStatus = Literal["owned", "not_owned", "unparseable"]
ApplyState = Literal[
    "start",
    "base_resolved",
    "data_loaded",
    "stamped",
    "persisted",
    "registered",
    "activated",
    "old_cleaned_up",
    "old_kept",
    "timed_out",
]


def _positive_finite(instance: Any, attribute: attrs.Attribute, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"gamma {attribute.name} must be a positive number, got {value!r}")


@attrs.define(frozen=True, slots=True)
class GammaSpec:
    r: float = attrs.field(converter=float, validator=_positive_finite)
    g: float = attrs.field(converter=float, validator=_positive_finite)
    b: float = attrs.field(converter=float, validator=_positive_finite)

    @staticmethod
    def uniform(value: float) -> "GammaSpec":
        return GammaSpec(value, value, value)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_axis_value(self) -> str:
        return f"{self.r:.2f}:{self.g:.2f}:{self.b:.2f}"


@attrs.define(frozen=True, slots=True)
class RampSample:
    r: float
    g: float
    b: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


GammaRamp = tuple[RampSample, ...]


@attrs.define(frozen=True, slots=True)
class DecodedName:
    """Result of decoding a profile file name.

    `gamma_percent` and `temperature` are only set when `status == "owned"`.
    """

    status: NameStatus
    basename: str
    gamma_percent: tuple[int, int, int] | None = None
    temperature: int | None = None

    @property
    def tool_owned(self) -> bool:
        # Prefixed names count as ours even when the fields do not parse.
        return self.status != "not_owned"

    @property
    def gamma(self) -> tuple[float, float, float] | None:
        if self.gamma_percent is None:
            return None
        r, g, b = self.gamma_percent
        return (r / 100.0, g / 100.0, b / 100.0)


@attrs.define(frozen=True, slots=True)
class DeviceRef:
    id: str
    native: Any = attrs.field(default=None, eq=False, repr=False)


@attrs.define(frozen=True, slots=True)
class ProfileRef:
    id: str
    filename: str | None = None
    native: Any = attrs.field(default=None, eq=False, repr=False)

    @property
    def label(self) -> str:
        return self.filename or self.id


@attrs.define(frozen=True, slots=True)
class DeviceOutcome:
    device_id: str
    mode: Mode
    status: OutcomeStatus
    state: str
    detail: str | None = None
    base_profile: str | None = None
    new_profile: str | None = None
    removed_profile: str | None = None
    gamma: tuple[float, float, float] | None = None
    temperature: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_id": self.device_id,
            "mode": self.mode,
            "status": self.status,
            "state": self.state,
            "detail": self.detail,
            "base_profile": self.base_profile,
            "new_profile": self.new_profile,
            "removed_profile": self.removed_profile,
            "gamma": list(self.gamma) if self.gamma is not None else None,
            "temperature": self.temperature,
        }
