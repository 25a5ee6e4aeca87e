"""Exception types raised by the planning engine."""

from __future__ import annotations


class StrategistError(RuntimeError):
    """Base class for planning engine failures."""


class IntegrityError(StrategistError):
    """Raised when the registered controller does not match the live faction.

    This indicates bookkeeping corruption outside the engine and aborts the
    turn.
    """


class InfeasibleCargoError(StrategistError):
    """Raised when a carrier cannot build a cargo proposal for a transportable."""

    def __init__(self, transportable: object, reason: str) -> None:
        super().__init__(f"{transportable}: {reason}")
        self.transportable = transportable
        self.reason = reason


class RemoteQueryError(StrategistError):
    """Raised by collaborators when a remote query for a faction fails."""


class InvalidMissionError(ValueError):
    """Raised when a mission is constructed with an inconsistent payload."""


__all__ = [
    "IntegrityError",
    "InfeasibleCargoError",
    "InvalidMissionError",
    "RemoteQueryError",
    "StrategistError",
]
