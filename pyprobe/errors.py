from __future__ import annotations


class ProbeError(Exception):
    """Base class for errors raised while probing a file."""


class PeFormatError(ProbeError, ValueError):
    """The buffer is too short or not shaped like a PE image."""


class BuildDateError(ProbeError, ValueError):
    """A build-date string was found but could not be parsed."""
