"""Rat-a-Tat Cat game engine."""

from .engine import Match, RatCatEngine
from .errors import ErrorCode, GameError
from .models import Card, MatchState, Player
from .rules import RuleConfig, create_rules, default_rules
from .validate import ActionResult

__all__ = [
    "ActionResult",
    "Card",
    "ErrorCode",
    "GameError",
    "Match",
    "MatchState",
    "Player",
    "RatCatEngine",
    "RuleConfig",
    "create_rules",
    "default_rules",
]
