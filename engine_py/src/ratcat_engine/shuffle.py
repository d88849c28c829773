"""
Deck construction, shuffling and drawing.
"""

import logging
import random
from typing import List, Optional

from .constants import DECK_SIZE, deck_composition
from .models import Card, MatchState

logger = logging.getLogger(__name__)


def create_deck() -> List[Card]:
    """Create the 56-card deck, unshuffled."""
    return [Card(kind, value) for kind, value in deck_composition()]


def shuffle_cards(cards: List[Card], rng: random.Random) -> List[Card]:
    """
    Shuffle cards in place with Fisher-Yates.

    Args:
        cards: Cards to shuffle
        rng: Random source owned by the match

    Returns:
        The same list, for chaining
    """
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def reshuffle_discard(state: MatchState, rng: random.Random) -> bool:
    """
    Turn the discard pile (minus its top card) into a new draw pile.

    Returns:
        False when the discard pile holds one card or fewer
    """
    if len(state.discard) <= 1:
        return False

    top_card = state.discard.pop()
    state.deck = shuffle_cards(state.discard, rng)
    state.discard = [top_card]
    logger.debug("Match %s: reshuffled %d discards into the deck", state.id, len(state.deck))
    return True


def draw_card(state: MatchState, rng: random.Random) -> Optional[Card]:
    """
    Pop the top of the draw pile, reshuffling the discard pile when empty.

    Returns:
        The drawn card, or None if no card is available anywhere
    """
    if not state.deck:
        reshuffle_discard(state, rng)
    return state.deck.pop() if state.deck else None


def deal_hands(state: MatchState, rng: random.Random, hand_size: int):
    """Deal hand_size face-down cards to every player in turn order."""
    for player in state.players:
        player.reset_hand()
        for _ in range(hand_size):
            player.add_card(draw_card(state, rng), known=False)


def draw_opening_discard(state: MatchState, rng: random.Random) -> Card:
    """
    Turn up the first discard. Power cards go back into the deck until a
    number card comes up.
    """
    card = draw_card(state, rng)
    while card.is_power:
        state.deck.insert(0, card)
        shuffle_cards(state.deck, rng)
        card = draw_card(state, rng)
    state.discard.append(card)
    return card


def count_cards(state: MatchState) -> int:
    """Total cards held by the deck, the discard pile, hands and the pending slot."""
    total = len(state.deck) + len(state.discard)
    total += sum(len(player.hand) for player in state.players)
    if state.pending is not None:
        total += 1
    return total


def validate_deck_integrity(state: MatchState) -> bool:
    """
    Validate that every card is accounted for exactly once.

    Args:
        state: Match state to validate

    Returns:
        True if the match holds the full deck with no duplicates
    """
    all_cards = list(state.deck) + list(state.discard)
    for player in state.players:
        all_cards.extend(player.hand)
    if state.pending is not None:
        all_cards.append(state.pending.card)

    unique = {id(card) for card in all_cards}
    if len(all_cards) != DECK_SIZE or len(unique) != DECK_SIZE:
        return False

    expected = sorted((kind, -1 if value is None else value) for kind, value in deck_composition())
    actual = sorted((card.kind, -1 if card.value is None else card.value) for card in all_cards)
    return expected == actual
