"""
Power card effects: Peek, Swap, Draw 2 and Add Card.

Each function validates first and mutates only once every check passed.
"""

import logging
import random
from typing import Optional, Tuple

from .constants import (
    DRAW2_ACTIONS, DRAW2_USE, KIND_ADD_CARD, KIND_DRAW_TWO, KIND_PEEK,
    KIND_SWAP, SOURCE_DECK
)
from .errors import ErrorCode
from .models import Card, MatchState, PendingCard
from .shuffle import draw_card
from .turns import end_turn
from .validate import (
    ActionResult, validate_hand_index, validate_power_card,
    validate_round_active, validate_swap_target
)

logger = logging.getLogger(__name__)


def place_pending_card(state: MatchState, index: int) -> Card:
    """Move the pending card into the current player's slot; the old card goes on the discard pile."""
    player = state.current_player()
    displaced = player.replace_card(index, state.pending.card)
    state.discard.append(displaced)
    state.pending = None
    return displaced


def _discard_pending(state: MatchState):
    state.discard.append(state.pending.card)
    state.pending = None


def apply_peek(state: MatchState, rng: random.Random, index: int) -> ActionResult:
    """
    Look at one of your own cards.

    The card is returned to the caller for a one-off reveal; the slot is
    not marked as known.
    """
    failure = validate_power_card(state, KIND_PEEK)
    if failure:
        return failure
    player = state.current_player()
    failure = validate_hand_index(player, index)
    if failure:
        return failure

    revealed = player.hand[index]
    _discard_pending(state)
    state.add_log(f"{player.name} peeked at a card")
    round_ended = end_turn(state, rng)
    state.increment_version()
    return ActionResult.ok(revealed_card=revealed, index=index, round_ended=round_ended)


def apply_swap(
    state: MatchState,
    rng: random.Random,
    my_index: int,
    opponent_id: str,
    opponent_index: int
) -> ActionResult:
    """
    Blind swap one of your cards with an opponent's card.

    Both slots become unknown to their owners whatever they knew before.
    """
    failure = validate_power_card(state, KIND_SWAP)
    if failure:
        return failure
    player = state.current_player()
    failure = validate_swap_target(state, player, my_index, opponent_id, opponent_index)
    if failure:
        return failure

    opponent = state.get_player(opponent_id)
    my_card = player.hand[my_index]
    player.hand[my_index] = opponent.hand[opponent_index]
    opponent.hand[opponent_index] = my_card
    player.known[my_index] = False
    opponent.known[opponent_index] = False

    _discard_pending(state)
    state.add_log(f"{player.name} swapped a card with {opponent.name}")
    round_ended = end_turn(state, rng)
    state.increment_version()
    return ActionResult.ok(
        swapped_with=opponent.name,
        opponent_id=opponent.id,
        round_ended=round_ended
    )


def decline_swap(state: MatchState, rng: random.Random) -> ActionResult:
    """Discard a drawn Swap card without swapping."""
    failure = validate_power_card(state, KIND_SWAP)
    if failure:
        return failure

    player = state.current_player()
    _discard_pending(state)
    state.add_log(f"{player.name} declined to swap")
    round_ended = end_turn(state, rng)
    state.increment_version()
    return ActionResult.ok(round_ended=round_ended)


def apply_add_card(state: MatchState, rng: random.Random) -> ActionResult:
    """
    Add one face-down card to the current player's hand.

    If no card can be drawn the Add Card is still spent and the turn ends.
    """
    failure = validate_power_card(state, KIND_ADD_CARD)
    if failure:
        return failure

    player = state.current_player()
    new_card = draw_card(state, rng)
    if new_card is not None:
        player.add_card(new_card, known=False)
        state.add_log(f"{player.name} added a card to their hand")
    else:
        logger.info("Match %s: no card left for Add Card", state.id)
        state.add_log(f"{player.name} played Add Card but the deck is empty")

    _discard_pending(state)
    hand_size = len(player.hand)
    round_ended = end_turn(state, rng)
    state.increment_version()
    return ActionResult.ok(
        added_card=new_card,
        card_added=new_card is not None,
        hand_size=hand_size,
        round_ended=round_ended
    )


# Draw 2 chain

def _draw_chain_card(state: MatchState, rng: random.Random, budget: int) -> Tuple[Optional[Card], bool]:
    """
    Draw the next card offered by the chain.

    A drawn Draw 2 is discarded at once and resets the remaining count
    to the full budget.

    Returns:
        (card or None if nothing could be drawn, whether a Draw 2 was chained)
    """
    chained = False
    # Bounded: a pile holding nothing but Draw 2 cards would reshuffle forever
    for _ in range(2 * (len(state.deck) + len(state.discard))):
        card = draw_card(state, rng)
        if card is None or card.kind != KIND_DRAW_TWO:
            return card, chained
        state.discard.append(card)
        state.draw2.remaining = budget
        chained = True
    return None, chained


def _offer_next_card(state: MatchState, rng: random.Random, budget: int) -> ActionResult:
    player = state.current_player()
    card, chained = _draw_chain_card(state, rng, budget)
    if card is None:
        state.add_log(f"{player.name}'s Draw 2 ended early: no cards left")
        logger.info("Match %s: Draw 2 chain abandoned, deck exhausted", state.id)
        round_ended = end_turn(state, rng)
        state.increment_version()
        return ActionResult.ok(chain_abandoned=True, draw2_complete=True, round_ended=round_ended)

    state.pending = PendingCard(card, SOURCE_DECK)
    if chained:
        state.add_log(f"{player.name} chained another Draw 2")
    state.increment_version()
    return ActionResult.ok(
        card=card,
        chaining=chained,
        cards_remaining=state.draw2.remaining,
        draw2_complete=False
    )


def start_draw_two(state: MatchState, rng: random.Random, budget: int) -> ActionResult:
    """Spend a drawn Draw 2 card and offer the first chain card."""
    failure = validate_power_card(state, KIND_DRAW_TWO)
    if failure:
        return failure

    player = state.current_player()
    _discard_pending(state)
    state.draw2.start(budget)
    state.add_log(f"{player.name} played Draw 2")
    return _offer_next_card(state, rng, budget)


def resolve_draw_two(
    state: MatchState,
    rng: random.Random,
    budget: int,
    action: str,
    index: Optional[int] = None
) -> ActionResult:
    """
    Resolve the card currently offered by a Draw 2 chain.

    'use' puts it into the hand at index and ends the turn, forfeiting any
    remaining draws. 'discard' throws it away and offers the next card, or
    ends the turn when the chain is spent.
    """
    failure = validate_round_active(state)
    if failure:
        return failure
    if not state.draw2.active or state.pending is None:
        return ActionResult.error(ErrorCode.INVALID_ACTION, "No Draw 2 active")
    if action not in DRAW2_ACTIONS:
        return ActionResult.error(ErrorCode.INVALID_ACTION, f"Invalid Draw 2 action: {action}")

    player = state.current_player()
    if action == DRAW2_USE:
        failure = validate_hand_index(player, index)
        if failure:
            return failure
        place_pending_card(state, index)
        state.add_log(f"{player.name} kept a Draw 2 card")
        round_ended = end_turn(state, rng)
        state.increment_version()
        return ActionResult.ok(replaced_index=index, draw2_complete=True, round_ended=round_ended)

    _discard_pending(state)
    state.draw2.remaining -= 1
    if state.draw2.remaining > 0:
        return _offer_next_card(state, rng, budget)

    state.add_log(f"{player.name} finished their Draw 2")
    round_ended = end_turn(state, rng)
    state.increment_version()
    return ActionResult.ok(draw2_complete=True, round_ended=round_ended)
