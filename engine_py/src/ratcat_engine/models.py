"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import KIND_NUMBER, POWER_KINDS, SOURCE_DECK


@dataclass(frozen=True, eq=False)
class Card:
    """A single physical card. Two Number-4 cards are still distinct cards."""
    kind: str  # number|peek|swap|draw2|addcard
    value: Optional[int] = None  # 0-9 for number cards only

    @property
    def points(self) -> int:
        return self.value if self.kind == KIND_NUMBER else 0

    @property
    def is_power(self) -> bool:
        return self.kind in POWER_KINDS

    def __repr__(self) -> str:
        if self.kind == KIND_NUMBER:
            return f"Card({self.value})"
        return f"Card({self.kind})"


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    known: List[bool] = field(default_factory=list)  # parallel to hand
    round_score: int = 0
    total_score: int = 0  # cumulative across rounds

    def reset_hand(self):
        self.hand = []
        self.known = []
        self.round_score = 0

    def add_card(self, card: Card, known: bool = False):
        self.hand.append(card)
        self.known.append(known)

    def replace_card(self, index: int, card: Card) -> Card:
        """Put card into slot index and return the card it displaced.

        The slot's known flag is left untouched.
        """
        old_card = self.hand[index]
        self.hand[index] = card
        return old_card

    def calculate_score(self) -> int:
        self.round_score = sum(card.points for card in self.hand)
        return self.round_score

    def is_outer(self, index: int) -> bool:
        return index == 0 or index == len(self.hand) - 1


@dataclass
class PendingCard:
    """The single drawn card awaiting its owner's decision."""
    card: Card
    source: str = SOURCE_DECK  # deck|discard


@dataclass
class Draw2Chain:
    active: bool = False
    remaining: int = 0

    def start(self, budget: int):
        self.active = True
        self.remaining = budget

    def stop(self):
        self.active = False
        self.remaining = 0


@dataclass
class MatchState:
    id: str
    version: int = 0
    players: List[Player] = field(default_factory=list)  # turn order
    deck: List[Card] = field(default_factory=list)  # draws from the end
    discard: List[Card] = field(default_factory=list)  # top is the last item
    current_player_index: int = 0
    pending: Optional[PendingCard] = None
    draw2: Draw2Chain = field(default_factory=Draw2Chain)
    game_started: bool = False
    round_active: bool = False
    round_ended: bool = False
    round_number: int = 0
    knocker_id: Optional[str] = None
    final_round_active: bool = False
    final_turn_taken: List[str] = field(default_factory=list)  # player ids, final round only
    game_log: List[str] = field(default_factory=list)

    @property
    def final_turns_completed(self) -> int:
        return len(self.final_turn_taken)

    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_index(self, player_id: str) -> Optional[int]:
        return next((i for i, p in enumerate(self.players) if p.id == player_id), None)

    @property
    def top_discard(self) -> Optional[Card]:
        return self.discard[-1] if self.discard else None

    @property
    def drawn_from_discard(self) -> bool:
        return self.pending is not None and self.pending.source != SOURCE_DECK

    def increment_version(self):
        self.version += 1

    def add_log(self, message: str):
        self.game_log.append(message)
