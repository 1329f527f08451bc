"""Exception types raised by the atlas."""

from __future__ import annotations


class AtlasError(Exception):
    """Base class for atlas failures."""


class DatasetLoadError(AtlasError):
    """The input table could not be read; fatal to initialisation."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to load {path}: {reason}")


class HierarchyError(AtlasError):
    """A node set violates the single-parent containment hierarchy."""
