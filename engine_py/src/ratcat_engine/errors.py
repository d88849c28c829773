# engine_py/src/ratcat_engine/errors.py

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error kinds reported by every match action."""
    ALREADY_DRAWN = "ALREADY_DRAWN"
    NO_CARD_DRAWN = "NO_CARD_DRAWN"
    WRONG_CARD_KIND = "WRONG_CARD_KIND"
    INVALID_INDEX = "INVALID_INDEX"
    INVALID_OPPONENT = "INVALID_OPPONENT"
    SELF_TARGET = "SELF_TARGET"
    DECK_EMPTY = "DECK_EMPTY"
    DISCARD_EMPTY = "DISCARD_EMPTY"
    POWER_CARD_FROM_DISCARD = "POWER_CARD_FROM_DISCARD"
    CANNOT_DISCARD_FROM_DISCARD = "CANNOT_DISCARD_FROM_DISCARD"
    INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"
    ALREADY_KNOCKED = "ALREADY_KNOCKED"
    GAME_FULL = "GAME_FULL"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    # Registry and transport level
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ROUND_NOT_ACTIVE = "ROUND_NOT_ACTIVE"
    INVALID_ACTION = "INVALID_ACTION"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    PLAYER_EXISTS = "PLAYER_EXISTS"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"


class GameError(Exception):
    """Raised by registry lookups; never by match actions."""
    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code.value}] {message}")


def raise_error(code: ErrorCode, message: str):
    raise GameError(code, message)
