"""colord-backed implementations of `DeviceService` and `ProfileStore`.

Uses the libcolord GObject bindings (PyGObject). GLib errors are translated into
the workflow's own exception types at this boundary.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import gi

gi.require_version("Colord", "1.0")
from gi.repository import Colord, Gio, GLib  # noqa: E402

from .errors import ConnectionFailure, DeviceEnumerationFailure, RampSynthesisError, ServiceCallError  # noqa: E402
from .model import DeviceRef, GammaRamp, ProfileRef  # noqa: E402

T = TypeVar("T")


def _call(what: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except GLib.Error as e:
        raise ServiceCallError(f"{what}: {e.message}") from e


def blackbody_rgb(temperature: int) -> tuple[float, float, float]:
    """White point RGB on the Planckian locus for `temperature` Kelvin."""
    rgb = Colord.ColorRGB()
    ok = Colord.color_get_blackbody_rgb_full(
        float(temperature), rgb, Colord.ColorBlackbodyFlags.USE_PLANCKIAN
    )
    if not ok:
        raise RampSynthesisError(f"No black-body white point for {temperature}K")
    return (rgb.R, rgb.G, rgb.B)


class ColordProfileData:
    """Wraps a `Colord.Icc` loaded from an existing profile."""

    def __init__(self, icc: Any) -> None:
        self.icc = icc

    def set_description(self, text: str) -> None:
        self.icc.set_description("", text)

    def add_metadata(self, key: str, value: str) -> None:
        self.icc.add_metadata(key, value)

    def set_vcgt(self, ramp: GammaRamp) -> None:
        colors = []
        for sample in ramp:
            c = Colord.ColorRGB()
            c.set(sample.r, sample.g, sample.b)
            colors.append(c)
        _call("Failed to set VCGT", self.icc.set_vcgt, colors)


class ColordProfileStore:
    def load(self, profile: ProfileRef) -> ColordProfileData:
        icc = _call(
            "Could not get ICC data from base profile",
            profile.native.load_icc,
            Colord.IccLoadFlags.NONE,
            None,
        )
        return ColordProfileData(icc)

    def save(self, data: ColordProfileData, path: Path) -> None:
        _call(
            f"Could not save new profile to {path}",
            data.icc.save_file,
            Gio.File.new_for_path(str(path)),
            Colord.IccSaveFlags.NONE,
            None,
        )


class ColordDeviceService:
    def __init__(self, client: Any | None = None) -> None:
        self._client = Colord.Client.new() if client is None else client

    def connect(self) -> None:
        try:
            self._client.connect_sync(None)
        except GLib.Error as e:
            raise ConnectionFailure(f"Failed to connect to colord: {e.message}") from e

    def display_devices(self) -> list[DeviceRef]:
        try:
            devices = self._client.get_devices_sync(None)
        except GLib.Error as e:
            raise DeviceEnumerationFailure(f"Failed to get devices: {e.message}") from e

        out: list[DeviceRef] = []
        for device in devices:
            try:
                device.connect_sync(None)
            except GLib.Error as e:
                print(f"Warning: Could not connect to device {device.get_object_path()}: {e.message}", file=sys.stderr)
                continue
            if device.get_kind() == Colord.DeviceKind.DISPLAY:
                out.append(DeviceRef(id=device.get_id(), native=device))
        return out

    def active_profile(self, device: DeviceRef) -> ProfileRef | None:
        profiles = device.native.get_profiles()
        if not profiles:
            return None
        first = profiles[0]
        return ProfileRef(id=first.get_object_path(), native=first)

    def find_profile_by_filename(self, filename: str) -> ProfileRef | None:
        try:
            profile = self._client.find_profile_by_filename_sync(filename, None)
        except GLib.Error:
            # Not indexed yet.
            return None
        if profile is None:
            return None
        return ProfileRef(id=profile.get_object_path(), native=profile)

    def connect_profile(self, profile: ProfileRef) -> ProfileRef:
        native = profile.native
        _call("Could not connect to profile", native.connect_sync, None)
        return ProfileRef(id=native.get_id() or profile.id, filename=native.get_filename(), native=native)

    def add_profile(self, device: DeviceRef, profile: ProfileRef) -> None:
        _call(
            "Failed to add profile to device",
            device.native.add_profile_sync,
            Colord.DeviceRelation.HARD,
            profile.native,
            None,
        )

    def remove_profile(self, device: DeviceRef, profile: ProfileRef) -> None:
        _call("Could not remove profile from device", device.native.remove_profile_sync, profile.native, None)

    def make_profile_default(self, device: DeviceRef, profile: ProfileRef) -> None:
        _call("Failed to make profile default", device.native.make_profile_default_sync, profile.native, None)

    def pump_events(self) -> None:
        GLib.MainContext.default().iteration(False)
