"""
Turn sequencing, knocking and the final round.
"""

import logging
import random

from .models import MatchState
from .scoring import end_round
from .validate import ActionResult, validate_knock

logger = logging.getLogger(__name__)


def _skips(state: MatchState, index: int) -> bool:
    return state.final_round_active and state.players[index].id == state.knocker_id


def advance_turn(state: MatchState):
    """Move to the next player in seat order, skipping the knocker in the final round."""
    n = len(state.players)
    if n == 0:
        state.current_player_index = 0
        return
    idx = state.current_player_index
    for _ in range(n):
        idx = (idx + 1) % n
        if not _skips(state, idx):
            break
    state.current_player_index = idx


def final_turns_needed(state: MatchState) -> int:
    """Number of final-round turns: one per seated player other than the knocker."""
    return sum(1 for p in state.players if p.id != state.knocker_id)


def end_turn(state: MatchState, rng: random.Random) -> bool:
    """
    Close the current player's turn.

    Returns:
        True if this turn completed the final round and the round ended
    """
    player = state.current_player()
    state.pending = None
    state.draw2.stop()

    if state.final_round_active:
        state.final_turn_taken.append(player.id)
        if state.final_turns_completed >= final_turns_needed(state):
            end_round(state, rng)
            return True

    advance_turn(state)
    return False


def knock(state: MatchState) -> ActionResult:
    """Current player knocks: every other player gets one final turn."""
    failure = validate_knock(state)
    if failure:
        return failure

    player = state.current_player()
    if state.pending is not None:
        state.discard.append(state.pending.card)
        state.pending = None

    state.knocker_id = player.id
    state.final_round_active = True
    state.final_turn_taken = []
    advance_turn(state)

    state.add_log(f"{player.name} knocked! Final round")
    state.increment_version()
    logger.info("Match %s: %s knocked", state.id, player.id)
    return ActionResult.ok(knocker_id=player.id, next_player_id=state.current_player().id)
