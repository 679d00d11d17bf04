from __future__ import annotations


class GammaToolError(RuntimeError):
    """Base class for errors raised by the display profile workflow."""


class ConnectionFailure(GammaToolError):
    """The color management service could not be reached. Fatal for the run."""


class DeviceEnumerationFailure(GammaToolError):
    """Display devices could not be listed. Fatal for the run."""


class ServiceCallError(GammaToolError):
    """A single call into the color management service or profile container failed."""


class DeviceStepError(GammaToolError):
    """A per-device failure. Reported, then processing moves on to the next device."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


class RegistrationTimeout(DeviceStepError):
    def __init__(self, message: str) -> None:
        super().__init__("registration", message)


class RampSynthesisError(DeviceStepError):
    def __init__(self, message: str) -> None:
        super().__init__("stamp", message)
