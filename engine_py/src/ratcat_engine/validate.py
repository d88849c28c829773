"""
Action results and precondition checks.

Every check returns None when the action may proceed, or a failed
ActionResult describing why it may not. Callers run all checks before
touching the match state.
"""

from typing import Any, Dict, Optional

from .errors import ErrorCode
from .models import MatchState, Player


class ActionResult:
    """Outcome of a match action."""

    def __init__(
        self,
        success: bool,
        error_code: Optional[ErrorCode] = None,
        error_message: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None
    ):
        self.success = success
        self.error_code = error_code
        self.error_message = error_message
        self.payload = payload or {}

    @classmethod
    def ok(cls, **payload) -> 'ActionResult':
        """Create a successful result carrying action-specific fields."""
        return cls(success=True, payload=payload)

    @classmethod
    def error(cls, error_code: ErrorCode, error_message: str) -> 'ActionResult':
        """Create a failed result."""
        return cls(success=False, error_code=error_code, error_message=error_message)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def __repr__(self) -> str:
        if self.success:
            return f"ActionResult(success=True, payload={self.payload!r})"
        return f"ActionResult(success=False, error_code={self.error_code.value})"


def validate_round_active(state: MatchState) -> Optional[ActionResult]:
    if not state.round_active:
        return ActionResult.error(ErrorCode.ROUND_NOT_ACTIVE, "No round in progress")
    return None


def validate_can_draw(state: MatchState) -> Optional[ActionResult]:
    failure = validate_round_active(state)
    if failure:
        return failure
    if state.pending is not None or state.draw2.active:
        return ActionResult.error(ErrorCode.ALREADY_DRAWN, "Already drawn a card this turn")
    return None


def validate_pending(state: MatchState) -> Optional[ActionResult]:
    failure = validate_round_active(state)
    if failure:
        return failure
    if state.pending is None:
        return ActionResult.error(ErrorCode.NO_CARD_DRAWN, "No card drawn")
    return None


def validate_power_card(state: MatchState, kind: str) -> Optional[ActionResult]:
    """The pending card must be a power card of the given kind, outside a Draw 2 chain."""
    failure = validate_pending(state)
    if failure:
        return failure
    if state.pending.card.kind != kind:
        return ActionResult.error(ErrorCode.WRONG_CARD_KIND, f"No {kind} card drawn")
    if state.draw2.active:
        return ActionResult.error(
            ErrorCode.INVALID_ACTION,
            "Cards drawn during Draw 2 can only be kept or discarded"
        )
    return None


def validate_hand_index(player: Player, index: Any, label: str = "card") -> Optional[ActionResult]:
    if isinstance(index, bool) or not isinstance(index, int):
        return ActionResult.error(ErrorCode.INVALID_INDEX, f"Invalid {label} index")
    if index < 0 or index >= len(player.hand):
        return ActionResult.error(ErrorCode.INVALID_INDEX, f"Invalid {label} index")
    return None


def validate_swap_target(
    state: MatchState,
    player: Player,
    my_index: Any,
    opponent_id: str,
    opponent_index: Any
) -> Optional[ActionResult]:
    opponent = state.get_player(opponent_id)
    if opponent is None:
        return ActionResult.error(ErrorCode.INVALID_OPPONENT, "Invalid opponent")
    if opponent.id == player.id:
        return ActionResult.error(ErrorCode.SELF_TARGET, "Cannot swap with yourself")
    return (
        validate_hand_index(player, my_index, "your card")
        or validate_hand_index(opponent, opponent_index, "opponent card")
    )


def validate_knock(state: MatchState) -> Optional[ActionResult]:
    failure = validate_round_active(state)
    if failure:
        return failure
    if state.knocker_id is not None:
        return ActionResult.error(ErrorCode.ALREADY_KNOCKED, "Someone already knocked")
    if state.draw2.active:
        return ActionResult.error(ErrorCode.INVALID_ACTION, "Finish the Draw 2 chain before knocking")
    return None
