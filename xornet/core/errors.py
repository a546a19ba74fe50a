"""Error taxonomy shared by the xornet core."""

from __future__ import annotations


class XornetError(Exception):
    """Base class for errors raised by xornet."""


class ShapeError(XornetError, ValueError):
    """An input, target or state does not match the network topology."""


class HistoryError(XornetError, IndexError):
    """Invalid navigation or mutation of the snapshot history."""


__all__ = ["XornetError", "ShapeError", "HistoryError"]
