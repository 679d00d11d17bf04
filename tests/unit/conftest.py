from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from gamma_tool.display_profile.errors import ConnectionFailure, DeviceEnumerationFailure, ServiceCallError
from gamma_tool.display_profile.model import DeviceRef, GammaRamp, ProfileRef
from gamma_tool.display_profile.workflow import ProfileController

WHITE_6500 = (1.0, 0.97, 0.94)
SRGB_PATH = "/usr/share/color/icc/colord/sRGB.icc"


def fake_whitepoint(temperature: int) -> tuple[float, float, float]:
    return WHITE_6500


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProfileData:
    def __init__(self, source: ProfileRef) -> None:
        self.source = source
        self.description: str | None = None
        self.metadata: dict[str, str] = {}
        self.vcgt: GammaRamp | None = None

    def set_description(self, text: str) -> None:
        self.description = text

    def add_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value

    def set_vcgt(self, ramp: GammaRamp) -> None:
        self.vcgt = ramp


class FakeService:
    """In-memory colord stand-in.

    `profiles` maps device id -> profile list (first = default). Saved files become
    visible to `find_profile_by_filename` after `detect_after` polls, or never.
    """

    def __init__(
        self,
        profiles: dict[str, list[ProfileRef]] | None = None,
        *,
        detect_after: int | None = 0,
        fail_connect: bool = False,
        fail_enumerate: bool = False,
        fail_add: bool = False,
        fail_default: bool = False,
        fail_remove: bool = False,
        broken_profiles: tuple[str, ...] = (),
        reference: ProfileRef | None = ProfileRef(id="srgb", filename=SRGB_PATH),
    ) -> None:
        self.profiles = profiles if profiles is not None else {}
        self.detect_after = detect_after
        self.fail_connect = fail_connect
        self.fail_enumerate = fail_enumerate
        self.fail_add = fail_add
        self.fail_default = fail_default
        self.fail_remove = fail_remove
        self.broken_profiles = broken_profiles
        self.reference = reference
        self.pending: dict[str, int] = {}
        self.polls = 0
        self.pumps = 0
        self.mutations: list[tuple[str, str, str]] = []
        self.events: list[str] = []

    def announce(self, path: Path) -> None:
        if self.detect_after is not None:
            self.pending[str(path)] = self.detect_after

    def connect(self) -> None:
        if self.fail_connect:
            raise ConnectionFailure("Failed to connect to colord: no daemon")

    def display_devices(self) -> list[DeviceRef]:
        if self.fail_enumerate:
            raise DeviceEnumerationFailure("Failed to get devices: denied")
        return [DeviceRef(id=device_id) for device_id in self.profiles]

    def active_profile(self, device: DeviceRef) -> ProfileRef | None:
        profiles = self.profiles[device.id]
        return profiles[0] if profiles else None

    def find_profile_by_filename(self, filename: str) -> ProfileRef | None:
        if self.reference is not None and filename == Path(self.reference.filename or "").name:
            return self.reference
        self.polls += 1
        remaining = self.pending.get(filename)
        if remaining is None:
            return None
        if remaining > 0:
            self.pending[filename] = remaining - 1
            return None
        return ProfileRef(id=f"icc-{Path(filename).stem}", filename=filename)

    def connect_profile(self, profile: ProfileRef) -> ProfileRef:
        if profile.id in self.broken_profiles:
            raise ServiceCallError("Could not connect to profile: gone")
        return profile

    def add_profile(self, device: DeviceRef, profile: ProfileRef) -> None:
        if self.fail_add:
            raise ServiceCallError("Failed to add profile to device: denied")
        self.mutations.append(("add", device.id, profile.id))
        self.events.append(f"add:{profile.id}")
        if profile not in self.profiles[device.id]:
            self.profiles[device.id].append(profile)

    def remove_profile(self, device: DeviceRef, profile: ProfileRef) -> None:
        if self.fail_remove:
            raise ServiceCallError("Could not remove profile from device: denied")
        self.mutations.append(("remove", device.id, profile.id))
        self.events.append(f"remove:{profile.id}")
        self.profiles[device.id].remove(profile)

    def make_profile_default(self, device: DeviceRef, profile: ProfileRef) -> None:
        if self.fail_default:
            raise ServiceCallError("Failed to make profile default: denied")
        self.mutations.append(("default", device.id, profile.id))
        self.events.append(f"default:{profile.id}")
        profiles = self.profiles[device.id]
        profiles.remove(profile)
        profiles.insert(0, profile)

    def pump_events(self) -> None:
        self.pumps += 1


class FakeStore:
    def __init__(self, service: FakeService, *, fail_load: bool = False, fail_save: bool = False) -> None:
        self.service = service
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.loaded: list[FakeProfileData] = []
        self.saved: list[Path] = []

    def load(self, profile: ProfileRef) -> FakeProfileData:
        if self.fail_load:
            raise ServiceCallError("Could not get ICC data from base profile: truncated")
        data = FakeProfileData(profile)
        self.loaded.append(data)
        return data

    def save(self, data: FakeProfileData, path: Path) -> None:
        if self.fail_save:
            raise ServiceCallError(f"Could not save new profile to {path}: read-only")
        payload: dict[str, Any] = {
            "description": data.description,
            "metadata": data.metadata,
            "vcgt_len": len(data.vcgt or ()),
        }
        path.write_text(json.dumps(payload))
        self.saved.append(path)
        self.service.events.append(f"save:{path.name}")
        self.service.announce(path)


@pytest.fixture
def icc_dir(tmp_path: Path) -> Path:
    return tmp_path / "data" / "icc"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_controller(icc_dir: Path, clock: FakeClock):
    def _make(service: FakeService, store: FakeStore | None = None, *, token: str = "0b5c2a1e-tok") -> ProfileController:
        return ProfileController(
            service,
            store if store is not None else FakeStore(service),
            icc_dir=icc_dir,
            whitepoint=fake_whitepoint,
            new_token=lambda: token,
            sleep=clock.sleep,
            clock=clock,
        )

    return _make
