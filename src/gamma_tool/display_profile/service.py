"""Capabilities the profile workflow needs from the color management service.

Implementations raise `ServiceCallError` for failed calls. Handles are opaque:
the workflow only reads `id`/`filename` and passes them back.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .model import DeviceRef, GammaRamp, ProfileRef


class ProfileData(Protocol):
    def set_description(self, text: str) -> None: ...

    def add_metadata(self, key: str, value: str) -> None: ...

    def set_vcgt(self, ramp: GammaRamp) -> None: ...


class ProfileStore(Protocol):
    def load(self, profile: ProfileRef) -> ProfileData: ...

    def save(self, data: ProfileData, path: Path) -> None: ...


class DeviceService(Protocol):
    def connect(self) -> None:
        """Raise `ConnectionFailure` if the service is unreachable."""
        ...

    def display_devices(self) -> list[DeviceRef]:
        """Connected display devices in service order. Raise `DeviceEnumerationFailure`."""
        ...

    def active_profile(self, device: DeviceRef) -> ProfileRef | None: ...

    def find_profile_by_filename(self, filename: str) -> ProfileRef | None:
        """Return None while the service has not (yet) indexed `filename`."""
        ...

    def connect_profile(self, profile: ProfileRef) -> ProfileRef: ...

    def add_profile(self, device: DeviceRef, profile: ProfileRef) -> None: ...

    def remove_profile(self, device: DeviceRef, profile: ProfileRef) -> None: ...

    def make_profile_default(self, device: DeviceRef, profile: ProfileRef) -> None: ...

    def pump_events(self) -> None: ...
