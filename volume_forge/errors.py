"""Error types raised by the volume_forge pipeline.

Per-file and per-URL failures are reported as values (FileOutcome, FetchResult);
only conditions that make a run meaningless are raised.
"""

from __future__ import annotations


class VolumeForgeError(RuntimeError):
    """Base class for volume_forge errors."""


class InvalidSpecError(VolumeForgeError, ValueError):
    """A file spec entry could not be interpreted (missing path, bad shape)."""


class EmptyInputError(VolumeForgeError):
    """No valid file specs remain after filtering."""


class DestinationUnresolvableError(VolumeForgeError):
    """The destination root cannot be created or is not a directory."""

    def __init__(self, destination: str, reason: str) -> None:
        super().__init__(f"destination {destination!r} is unusable: {reason}")
        self.destination = destination
        self.reason = reason
