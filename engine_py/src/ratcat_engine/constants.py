"""Game constants and deck composition"""

from typing import Dict, List, Tuple

# Card kinds
KIND_NUMBER = 'number'
KIND_PEEK = 'peek'
KIND_SWAP = 'swap'
KIND_DRAW_TWO = 'draw2'
KIND_ADD_CARD = 'addcard'

POWER_KINDS = [KIND_PEEK, KIND_SWAP, KIND_DRAW_TWO, KIND_ADD_CARD]

# Number cards: 0-8 four times each, 9 nine times
NUMBER_COPIES: Dict[int, int] = {value: 4 for value in range(9)}
NUMBER_COPIES[9] = 9

POWER_COPIES: Dict[str, int] = {
    KIND_PEEK: 3,
    KIND_SWAP: 3,
    KIND_DRAW_TWO: 3,
    KIND_ADD_CARD: 2,
}

DECK_SIZE = sum(NUMBER_COPIES.values()) + sum(POWER_COPIES.values())  # 56

HAND_SIZE = 4
MIN_PLAYERS = 2
MAX_PLAYERS = 6
DRAW_TWO_BUDGET = 2

# Where the pending card came from
SOURCE_DECK = 'deck'
SOURCE_DISCARD = 'discard'

# handle_draw2_card actions
DRAW2_USE = 'use'
DRAW2_DISCARD = 'discard'
DRAW2_ACTIONS: Tuple[str, str] = (DRAW2_USE, DRAW2_DISCARD)

HIDDEN_CARD = {'type': 'hidden'}

MATCH_ID_LENGTH = 6


def deck_composition() -> List[Tuple[str, object]]:
    """(kind, value) pairs for the full deck, in a stable order."""
    cards = []
    for value, copies in NUMBER_COPIES.items():
        cards.extend([(KIND_NUMBER, value)] * copies)
    for kind, copies in POWER_COPIES.items():
        cards.extend([(kind, None)] * copies)
    return cards
