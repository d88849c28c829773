"""
Helpers for building matches in a known position.

Cards are always moved, never created, so every helper keeps the
56-card deck intact.
"""

from typing import Optional, Sequence, Tuple

from ratcat_engine.constants import SOURCE_DECK
from ratcat_engine.engine import Match
from ratcat_engine.models import Card, MatchState, PendingCard
from ratcat_engine.rules import create_rules


def make_match(player_count: int = 2, seed: int = 7, start: bool = True, **rules) -> Match:
    """Match with players p1..pN (named Alice, Bob, ...), optionally started."""
    names = ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank"]
    match = Match("TEST", rules=create_rules(**rules) if rules else None, seed=seed)
    for i in range(player_count):
        match.add_player(f"p{i + 1}", names[i])
    if start:
        result = match.start_round()
        assert result.success
    return match


def _matches(card: Card, kind: str, value: Optional[int]) -> bool:
    return card.kind == kind and (value is None or card.value == value)


def pull_card(state: MatchState, kind: str, value: Optional[int] = None) -> Card:
    """
    Take a card of the given kind out of wherever it is.

    Deck first, then hands (the hole is refilled from the deck), then the
    discard pile below its top card.
    """
    for i in range(len(state.deck) - 1, -1, -1):
        if _matches(state.deck[i], kind, value):
            return state.deck.pop(i)
    for player in state.players:
        for i, card in enumerate(player.hand):
            if _matches(card, kind, value):
                player.hand[i] = state.deck.pop(0)
                return card
    for i in range(len(state.discard) - 1):
        if _matches(state.discard[i], kind, value):
            return state.discard.pop(i)
    raise LookupError(f"No {kind} {value} card available")


def force_pending(match: Match, kind: str, value: Optional[int] = None, source: str = SOURCE_DECK) -> Card:
    """Make the current player hold a drawn card of the given kind."""
    card = pull_card(match.state, kind, value)
    match.state.pending = PendingCard(card, source)
    return card


def stack_deck(state: MatchState, cards: Sequence[Tuple[str, Optional[int]]]) -> list:
    """Arrange the deck so the given (kind, value) cards are drawn next, in order."""
    pulled = [pull_card(state, kind, value) for kind, value in cards]
    state.deck.extend(reversed(pulled))
    return pulled


def set_hand(state: MatchState, player_index: int, cards: Sequence[Tuple[str, Optional[int]]]) -> list:
    """Replace a player's hand with the given cards; the old hand goes to the deck bottom."""
    player = state.players[player_index]
    old_hand = player.hand
    player.hand = []
    player.known = []
    state.deck[0:0] = old_hand
    new_hand = [pull_card(state, kind, value) for kind, value in cards]
    for card in new_hand:
        player.add_card(card)
    return new_hand


def number(value: int) -> Tuple[str, int]:
    return ("number", value)
