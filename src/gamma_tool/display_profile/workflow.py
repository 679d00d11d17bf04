from __future__ import annotations

import sys
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

import attrs

from . import naming, paths, ramp, registration, summary
from .config import REFERENCE_PROFILE, AppConfig
from .errors import (
    ConnectionFailure,
    DeviceEnumerationFailure,
    DeviceStepError,
    RegistrationTimeout,
    ServiceCallError,
)
from .model import ApplyState, DeviceOutcome, DeviceRef, GammaSpec, ProfileRef
from .service import DeviceService, ProfileData, ProfileStore


def _now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _warn(msg: str) -> None:
    print(f"Warning: {msg}", file=sys.stderr)


@contextmanager
def _step(name: str) -> Iterator[None]:
    """Turn service and filesystem errors into a per-device failure for `name`."""
    try:
        yield
    except (ServiceCallError, OSError) as e:
        raise DeviceStepError(name, str(e)) from e


def profile_title(gamma: GammaSpec, temperature: int) -> str:
    return f"gamma-tool: g={gamma.to_axis_value()} t={temperature}"


def stamp_profile_data(
    data: ProfileData,
    *,
    gamma: GammaSpec,
    temperature: int,
    token: str,
    whitepoint: ramp.Whitepoint | None = None,
) -> None:
    """Describe, tag and embed a freshly synthesized VCGT into loaded profile data."""
    data.set_description(profile_title(gamma, temperature))
    data.add_metadata("uuid", token)
    vcgt = ramp.synthesize(gamma, temperature, whitepoint=whitepoint)
    with _step("stamp"):
        data.set_vcgt(vcgt)


class ProfileController:
    """Runs info / remove / apply against one device at a time."""

    def __init__(
        self,
        service: DeviceService,
        store: ProfileStore,
        *,
        icc_dir: Path | None = None,
        whitepoint: ramp.Whitepoint | None = None,
        new_token: Callable[[], str] = naming.new_token,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.service = service
        self.store = store
        self.icc_dir = paths.user_icc_dir() if icc_dir is None else icc_dir
        self.whitepoint = whitepoint
        self.new_token = new_token
        self.sleep = sleep
        self.clock = clock

    def process_device(self, device: DeviceRef, config: AppConfig) -> DeviceOutcome:
        """Handle one device. Per-device failures are reported and returned, never raised."""
        print(f"\ndevice: {device.id}")
        active = self.service.active_profile(device)
        if active is not None:
            try:
                with _step("connect_profile"):
                    active = self.service.connect_profile(active)
            except DeviceStepError as e:
                _warn(f"Could not connect to base profile: {e}")
                return DeviceOutcome(device_id=device.id, mode=config.mode, status="fail", state="start", detail=str(e))

        if config.mode == "apply":
            return self.apply(device, active, config)
        if active is None:
            print("Device has no active profile.")
            return DeviceOutcome(device_id=device.id, mode=config.mode, status="skipped", state="start", detail="no_profile")
        if config.mode == "info":
            return self.info(device, active)
        return self.remove(device, active)

    def info(self, device: DeviceRef, profile: ProfileRef) -> DeviceOutcome:
        outcome = DeviceOutcome(device_id=device.id, mode="info", status="ok", state="start", base_profile=profile.filename)
        if profile.filename is None:
            print("Current profile has no filename.")
            return attrs.evolve(outcome, status="skipped", detail="no_filename")

        decoded = naming.decode(profile.filename)
        if decoded.status == "owned":
            r, g, b = decoded.gamma or (0.0, 0.0, 0.0)
            print(f"gamma: {r:.2f}:{g:.2f}:{b:.2f}")
            print(f"temperature: {decoded.temperature}")
            return attrs.evolve(outcome, gamma=decoded.gamma, temperature=decoded.temperature)
        if decoded.status == "unparseable":
            print(f"Could not parse parameters from profile name: {decoded.basename}")
            return attrs.evolve(outcome, status="skipped", detail="unparseable")
        print(f"Current profile is not a gamma-tool profile: {profile.filename}")
        return attrs.evolve(outcome, status="skipped", detail="not_owned")

    def remove(self, device: DeviceRef, profile: ProfileRef) -> DeviceOutcome:
        print(f"Current profile is {profile.label}")
        outcome = DeviceOutcome(device_id=device.id, mode="remove", status="ok", state="start", base_profile=profile.filename)
        if profile.filename is None or not naming.decode(profile.filename).tool_owned:
            print("Current profile was not created by this tool. Not removing.")
            return attrs.evolve(outcome, status="skipped", detail="not_owned")

        print("Removing profile from device...")
        problem = self._detach_and_delete(device, profile)
        if problem is not None:
            return attrs.evolve(outcome, status="fail", detail=problem)
        return attrs.evolve(outcome, removed_profile=profile.filename)

    def apply(self, device: DeviceRef, base: ProfileRef | None, config: AppConfig) -> DeviceOutcome:
        """Create, register and activate a new profile, then retire the old one if it was ours.

        The old profile is only touched after the replacement is active on the device.
        On registration timeout the new file stays on disk and nothing else changes.
        """
        outcome = DeviceOutcome(device_id=device.id, mode="apply", status="fail", state="start")
        state: ApplyState = "start"
        try:
            if base is None:
                print("No default profile, using sRGB")
                base = self.activate_reference_profile(device)
            state = "base_resolved"
            outcome = attrs.evolve(outcome, base_profile=base.filename)
            print(f"Current profile is {base.label}")

            with _step("load_icc"):
                data = self.store.load(base)
            state = "data_loaded"
            old_is_ours = base.filename is not None and naming.decode(base.filename).tool_owned

            token = self.new_token()
            stamp_profile_data(
                data, gamma=config.gamma, temperature=config.temperature, token=token, whitepoint=self.whitepoint
            )
            state = "stamped"

            with _step("save"):
                new_path = paths.ensure_icc_dir(self.icc_dir) / naming.encode(config.gamma, config.temperature, token)
                self.store.save(data, new_path)
            state = "persisted"
            outcome = attrs.evolve(outcome, new_profile=str(new_path))

            found = registration.wait_for(
                lambda: self.service.find_profile_by_filename(str(new_path)),
                timeout_s=config.timeout_s,
                pump=self.service.pump_events,
                sleep=self.sleep,
                clock=self.clock,
            )
            if found is None:
                state = "timed_out"
                raise RegistrationTimeout(f"Timed out waiting for colord to detect new profile: {new_path}")
            with _step("connect_profile"):
                new_profile = self.service.connect_profile(found)
            state = "registered"
            print(f"New profile is {new_profile.filename or new_path}")

            self._activate(device, new_profile)
            state = "activated"
        except DeviceStepError as e:
            _warn(str(e))
            return attrs.evolve(outcome, state=state, detail=f"{e.step}: {e}")

        outcome = attrs.evolve(outcome, status="ok", gamma=config.gamma.as_tuple(), temperature=config.temperature)
        if not old_is_ours:
            return attrs.evolve(outcome, state="old_kept")

        print("Removing old profile...")
        problem = self._detach_and_delete(device, base)
        if problem is not None:
            return attrs.evolve(outcome, state="old_kept", detail=problem)
        return attrs.evolve(outcome, state="old_cleaned_up", removed_profile=base.filename)

    def activate_reference_profile(self, device: DeviceRef) -> ProfileRef:
        """Attach the stock sRGB profile and make it the device default."""
        found = self.service.find_profile_by_filename(REFERENCE_PROFILE)
        if found is None:
            raise DeviceStepError("base_profile", f"Failed to find {REFERENCE_PROFILE} profile")
        with _step("base_profile"):
            profile = self.service.connect_profile(found)
            self.service.add_profile(device, profile)
            self.service.make_profile_default(device, profile)
        return profile

    def _activate(self, device: DeviceRef, profile: ProfileRef) -> None:
        # Both calls are attempted; the saved file is kept either way.
        problems: list[str] = []
        try:
            self.service.add_profile(device, profile)
        except ServiceCallError as e:
            problems.append(f"Failed to add new profile to device: {e}")
        try:
            self.service.make_profile_default(device, profile)
        except ServiceCallError as e:
            problems.append(f"Failed to make new profile default: {e}")
        if problems:
            raise DeviceStepError("activate", "; ".join(problems))

    def _detach_and_delete(self, device: DeviceRef, profile: ProfileRef) -> str | None:
        """Return a problem description, or None if the profile was detached and its file deleted."""
        if profile.filename is None:
            msg = f"Profile {profile.id} has no backing file"
            _warn(msg)
            return msg
        try:
            self.service.remove_profile(device, profile)
        except ServiceCallError as e:
            msg = f"Could not remove profile from device: {e}"
            _warn(msg)
            return msg
        print(f"Deleting file {profile.filename}")
        try:
            Path(profile.filename).unlink()
        except OSError as e:
            msg = f"Could not delete profile file {profile.filename}: {e}"
            _warn(msg)
            return msg
        return None


def select_devices(devices: list[DeviceRef], device_index: int | None) -> list[DeviceRef]:
    if device_index is None:
        return list(devices)
    if device_index >= len(devices):
        last = max(len(devices) - 1, 0)
        raise IndexError(
            f"Invalid device index {device_index}. Only {len(devices)} devices found (0 to {last})."
        )
    return [devices[device_index]]


def run(
    config: AppConfig,
    *,
    service: DeviceService | None = None,
    store: ProfileStore | None = None,
    controller: ProfileController | None = None,
) -> int:
    """Run the configured mode over the selected display devices. Returns process exit code."""
    if service is None or store is None:
        from .colord_service import ColordDeviceService, ColordProfileStore

        service = ColordDeviceService() if service is None else service
        store = ColordProfileStore() if store is None else store
    if controller is None:
        controller = ProfileController(service, store)

    started_at = _now_rfc3339()
    try:
        service.connect()
        devices = service.display_devices()
    except (ConnectionFailure, DeviceEnumerationFailure) as e:
        print(str(e), file=sys.stderr)
        return 1

    if not devices:
        print("No display devices found.")
        return 0
    try:
        selected = select_devices(devices, config.device_index)
    except IndexError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    outcomes = [controller.process_device(device, config) for device in selected]
    failed = [o for o in outcomes if o.status == "fail"]
    if failed:
        print(f"\n{len(failed)} of {len(outcomes)} device(s) failed.", file=sys.stderr)

    if config.summary_path is not None:
        payload = summary.build_summary(
            config=config, outcomes=outcomes, started_at=started_at, finished_at=_now_rfc3339()
        )
        try:
            summary.write_summary(config.summary_path, payload)
        except Exception as e:
            print(f"Failed to write summary: {e}", file=sys.stderr)
            return 2

    return 1 if config.strict and failed else 0
