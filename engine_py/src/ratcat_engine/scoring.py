"""
Round end: power-card replacement sweep and scoring.
"""

import logging
import random
from typing import Dict, List, Optional

from .models import Card, MatchState, Player
from .shuffle import draw_card

logger = logging.getLogger(__name__)


def _draw_number_card(state: MatchState, rng: random.Random) -> Optional[Card]:
    """Draw until a number card comes up, discarding power cards on the way."""
    # Bounded: the deck and discard pile may hold nothing but power cards
    for _ in range(2 * (len(state.deck) + len(state.discard))):
        card = draw_card(state, rng)
        if card is None:
            return None
        if not card.is_power:
            return card
        state.discard.append(card)
    return None


def replace_power_cards(state: MatchState, player: Player, rng: random.Random) -> List[int]:
    """
    Replace every power card left in a hand with number cards from the deck.

    Drawn power cards are discarded and drawing continues until a number
    card comes up. A slot whose replacement cannot be drawn keeps its
    power card. Replaced slots become known to their owner.

    Returns:
        Indexes of the slots that were replaced
    """
    replaced = []
    for index, card in enumerate(player.hand):
        if not card.is_power:
            continue
        replacement = _draw_number_card(state, rng)
        if replacement is None:
            logger.info("Match %s: deck exhausted, %s keeps a %s card",
                        state.id, player.name, card.kind)
            continue
        state.discard.append(player.replace_card(index, replacement))
        player.known[index] = True
        replaced.append(index)
    return replaced


def end_round(state: MatchState, rng: random.Random) -> Dict[str, int]:
    """
    Finish the round: sweep power cards out of every hand, score hands and
    add the round score to each cumulative score.

    Returns:
        Mapping of player id to round score
    """
    if state.pending is not None:
        state.discard.append(state.pending.card)
        state.pending = None
    state.draw2.stop()

    scores = {}
    for player in state.players:
        replace_power_cards(state, player, rng)
        scores[player.id] = player.calculate_score()
        player.total_score += player.round_score

    state.round_active = False
    state.round_ended = True
    state.final_round_active = False

    summary = ", ".join(f"{p.name} {p.round_score}" for p in state.players)
    state.add_log(f"Round {state.round_number} over: {summary}")
    logger.info("Match %s round %d ended: %s", state.id, state.round_number, scores)
    return scores
