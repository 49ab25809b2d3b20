from __future__ import annotations


class LayoutError(ValueError):
    """Base class for errors raised while planning a diagram."""


class MalformedInput(LayoutError):
    """The account tree of an operation cannot be flattened (cycle or unknown item)."""


class InvalidConfiguration(LayoutError):
    """Grid settings are rejected before any layout computation starts."""
