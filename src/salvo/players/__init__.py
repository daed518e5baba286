"""Player strategies: targeting engine, placement searches and computer opponents."""

from .base import Player
from .strategies import (
    PLAYER_TYPES,
    AwfulPlayer,
    MediocrePlayer,
    ProbabilityPlayer,
    create_player,
)
from .targeting import AttackMode, TargetingEngine

__all__ = [
    "AttackMode",
    "AwfulPlayer",
    "MediocrePlayer",
    "PLAYER_TYPES",
    "Player",
    "ProbabilityPlayer",
    "TargetingEngine",
    "create_player",
]
