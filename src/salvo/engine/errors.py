"""Exception hierarchy for salvo.

Board and targeting operations report ordinary failures (illegal placement,
illegal shot) through return values. Exceptions are reserved for bad
configuration and for callers that break the turn protocol.
"""

from __future__ import annotations


class SalvoError(Exception):
    """Base class for all salvo errors."""


class GridSizeError(SalvoError, ValueError):
    """Board dimensions fall outside the supported range."""


class InvalidFleetError(SalvoError, ValueError):
    """A fleet configuration could not be turned into a catalog."""


class UnknownPlayerError(SalvoError, ValueError):
    """No player strategy is registered under the requested name."""


class TargetingProtocolError(SalvoError, RuntimeError):
    """Attack results were reported in an order the targeting engine cannot explain."""


class FleetDestroyedError(SalvoError, RuntimeError):
    """An attack was requested after every opposing ship was confirmed sunk."""


class GameStalledError(SalvoError, RuntimeError):
    """A game exceeded its shot budget without a winner."""
