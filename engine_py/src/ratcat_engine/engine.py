"""Match engine: round setup, turn actions and the match registry"""

import logging
import random
import threading
import uuid
from collections import defaultdict
from typing import Any, Dict, Optional

from . import effects, scoring, turns
from .constants import MATCH_ID_LENGTH, SOURCE_DECK, SOURCE_DISCARD, DRAW2_DISCARD, DRAW2_USE
from .errors import ErrorCode, GameError, raise_error
from .models import MatchState, PendingCard, Player
from .rules import RuleConfig, default_rules
from .serialization import view_for
from .shuffle import create_deck, deal_hands, draw_card, draw_opening_discard, shuffle_cards
from .validate import (
    ActionResult, validate_can_draw, validate_hand_index, validate_pending,
    validate_round_active
)

logger = logging.getLogger(__name__)


class Match:
    """One game room: its players, the current round and every action on it.

    Actions act on behalf of the current player and return an ActionResult.
    A failed action never changes the state.
    """

    def __init__(self, match_id: str, rules: Optional[RuleConfig] = None, seed: Optional[int] = None):
        self.rules = rules or default_rules
        self.state = MatchState(id=match_id)
        self.rng = random.Random(seed if seed is not None else self.rules.seed)

    @property
    def id(self) -> str:
        return self.state.id

    @property
    def players(self):
        return self.state.players

    def get_current_player(self) -> Optional[Player]:
        return self.state.current_player()

    # Lifecycle

    def add_player(self, player_id: str, name: str) -> ActionResult:
        state = self.state
        if len(state.players) >= self.rules.max_players:
            return ActionResult.error(ErrorCode.GAME_FULL, f"Game is full (max {self.rules.max_players} players)")
        if state.game_started:
            return ActionResult.error(ErrorCode.GAME_ALREADY_STARTED, "Game already started")
        if state.get_player(player_id) is not None:
            return ActionResult.error(ErrorCode.PLAYER_EXISTS, "Player already joined")

        state.players.append(Player(id=player_id, name=name))
        state.add_log(f"{name} joined")
        state.increment_version()
        return ActionResult.ok(player_id=player_id, seat=len(state.players) - 1)

    def remove_player(self, player_id: str) -> bool:
        """
        Remove a player from the match.

        Mid-round their cards go under the discard pile and play continues
        with the next player.

        Returns:
            True if the match is now empty
        """
        state = self.state
        idx = state.player_index(player_id)
        if idx is None:
            return not state.players

        player = state.players[idx]
        was_current = idx == state.current_player_index

        if state.round_active:
            if was_current and state.pending is not None:
                state.discard.insert(0, state.pending.card)
                state.pending = None
                state.draw2.stop()
            state.discard[0:0] = player.hand
            player.reset_hand()
            if player.id in state.final_turn_taken:
                state.final_turn_taken.remove(player.id)

        del state.players[idx]
        if idx < state.current_player_index:
            state.current_player_index -= 1
        if state.current_player_index >= len(state.players):
            state.current_player_index = 0

        state.add_log(f"{player.name} left")
        logger.info("Match %s: player %s left", state.id, player_id)

        if state.round_active:
            if len(state.players) < self.rules.min_players:
                scoring.end_round(state, self.rng)
            elif state.final_round_active and state.final_turns_completed >= turns.final_turns_needed(state):
                scoring.end_round(state, self.rng)
            elif was_current and state.final_round_active and state.current_player().id == state.knocker_id:
                turns.advance_turn(state)

        state.increment_version()
        return not state.players

    def start_round(self) -> ActionResult:
        """Shuffle a fresh deck, deal every hand face down and turn up the first discard."""
        state = self.state
        if state.round_active:
            return ActionResult.error(ErrorCode.GAME_ALREADY_STARTED, "A round is already in progress")
        if len(state.players) < self.rules.min_players:
            return ActionResult.error(
                ErrorCode.INSUFFICIENT_PLAYERS,
                f"Need at least {self.rules.min_players} players to start"
            )

        state.deck = shuffle_cards(create_deck(), self.rng)
        state.discard = []
        state.pending = None
        state.draw2.stop()
        state.round_ended = False
        state.knocker_id = None
        state.final_round_active = False
        state.final_turn_taken = []

        deal_hands(state, self.rng, self.rules.hand_size)
        first_discard = draw_opening_discard(state, self.rng)

        state.current_player_index = 0
        state.game_started = True
        state.round_active = True
        state.round_number += 1
        state.add_log(f"Round {state.round_number} started! {state.current_player().name} goes first")
        state.increment_version()
        logger.info("Match %s: round %d started with %d players",
                    state.id, state.round_number, len(state.players))
        return ActionResult.ok(
            round_number=state.round_number,
            current_player_id=state.current_player().id,
            discard_top=first_discard
        )

    # Turn actions

    def draw_from_deck(self) -> ActionResult:
        """Draw from the deck: the card may be kept, used as a power or discarded."""
        state = self.state
        failure = validate_can_draw(state)
        if failure:
            return failure

        card = draw_card(state, self.rng)
        if card is None:
            return ActionResult.error(ErrorCode.DECK_EMPTY, "Deck is empty")

        state.pending = PendingCard(card, SOURCE_DECK)
        state.add_log(f"{state.current_player().name} drew from the deck")
        state.increment_version()
        logger.debug("Match %s: %s drew from deck", state.id, state.current_player().id)
        return ActionResult.ok(card=card, must_use=False)

    def draw_from_discard_pile(self) -> ActionResult:
        """Take the top discard. It must go into the hand."""
        state = self.state
        failure = validate_can_draw(state)
        if failure:
            return failure
        if not state.discard:
            return ActionResult.error(ErrorCode.DISCARD_EMPTY, "Discard pile empty")
        if state.top_discard.is_power:
            return ActionResult.error(
                ErrorCode.POWER_CARD_FROM_DISCARD,
                "Cannot draw power cards from discard pile"
            )

        card = state.discard.pop()
        state.pending = PendingCard(card, SOURCE_DISCARD)
        state.add_log(f"{state.current_player().name} took the discard")
        state.increment_version()
        logger.debug("Match %s: %s drew from discard", state.id, state.current_player().id)
        return ActionResult.ok(card=card, must_use=True)

    def replace_card_in_hand(self, index: int) -> ActionResult:
        """Swap the drawn card into a hand slot; the slot stays as (un)known as it was."""
        state = self.state
        if state.draw2.active:
            return self.handle_draw2_card(DRAW2_USE, index)
        failure = validate_pending(state)
        if failure:
            return failure
        player = state.current_player()
        failure = validate_hand_index(player, index)
        if failure:
            return failure

        displaced = effects.place_pending_card(state, index)
        state.add_log(f"{player.name} replaced a card")
        round_ended = turns.end_turn(state, self.rng)
        state.increment_version()
        return ActionResult.ok(replaced_index=index, discarded_card=displaced, round_ended=round_ended)

    def discard_drawn_card(self) -> ActionResult:
        """Throw away a card drawn from the deck."""
        state = self.state
        if state.draw2.active:
            return self.handle_draw2_card(DRAW2_DISCARD)
        failure = validate_pending(state)
        if failure:
            return failure
        if state.pending.source == SOURCE_DISCARD:
            return ActionResult.error(
                ErrorCode.CANNOT_DISCARD_FROM_DISCARD,
                "Cannot discard card from discard pile"
            )

        player = state.current_player()
        discarded = state.pending.card
        state.discard.append(discarded)
        state.pending = None
        state.add_log(f"{player.name} discarded the drawn card")
        round_ended = turns.end_turn(state, self.rng)
        state.increment_version()
        return ActionResult.ok(discarded_card=discarded, round_ended=round_ended)

    # Power cards

    def use_peek(self, index: int) -> ActionResult:
        return effects.apply_peek(self.state, self.rng, index)

    def use_swap(self, my_index: int, opponent_id: str, opponent_index: int) -> ActionResult:
        return effects.apply_swap(self.state, self.rng, my_index, opponent_id, opponent_index)

    def decline_swap(self) -> ActionResult:
        return effects.decline_swap(self.state, self.rng)

    def use_draw2(self) -> ActionResult:
        return effects.start_draw_two(self.state, self.rng, self.rules.draw_two_budget)

    def handle_draw2_card(self, action: str, index: Optional[int] = None) -> ActionResult:
        return effects.resolve_draw_two(self.state, self.rng, self.rules.draw_two_budget, action, index)

    def use_add_card(self) -> ActionResult:
        return effects.apply_add_card(self.state, self.rng)

    # Round end

    def knock(self) -> ActionResult:
        return turns.knock(self.state)

    def end_round(self) -> ActionResult:
        """Sweep power cards out of every hand and score the round."""
        failure = validate_round_active(self.state)
        if failure:
            return failure
        scores = scoring.end_round(self.state, self.rng)
        self.state.increment_version()
        return ActionResult.ok(scores=scores)

    # Projection

    def view_for(self, player_id: Optional[str]) -> Dict[str, Any]:
        return view_for(self.state, player_id, self.rules)


# Actions only the current player may take
TURN_ACTIONS = frozenset([
    'draw_from_deck',
    'draw_from_discard_pile',
    'replace_card_in_hand',
    'discard_drawn_card',
    'use_peek',
    'use_swap',
    'decline_swap',
    'use_draw2',
    'handle_draw2_card',
    'use_add_card',
    'knock',
])


class RatCatEngine:
    """Flat match id -> Match registry with one lock per match."""

    def __init__(self, rules: Optional[RuleConfig] = None):
        self.rules = rules or default_rules
        self.matches: Dict[str, Match] = {}
        self.match_locks = defaultdict(threading.Lock)

    def _new_match_id(self) -> str:
        match_id = uuid.uuid4().hex[:MATCH_ID_LENGTH].upper()
        while match_id in self.matches:
            match_id = uuid.uuid4().hex[:MATCH_ID_LENGTH].upper()
        return match_id

    def create_match(
        self,
        match_id: Optional[str] = None,
        rules: Optional[RuleConfig] = None,
        seed: Optional[int] = None
    ) -> Match:
        match_id = match_id or self._new_match_id()
        with self.match_locks[match_id]:
            if match_id not in self.matches:
                self.matches[match_id] = Match(match_id, rules or self.rules, seed)
                logger.info("Match %s created", match_id)
            return self.matches[match_id]

    def get_match(self, match_id: str) -> Optional[Match]:
        return self.matches.get(match_id)

    def require_match(self, match_id: str) -> Match:
        match = self.get_match(match_id)
        if match is None:
            raise_error(ErrorCode.MATCH_NOT_FOUND, f"Match {match_id} not found")
        return match

    def join(self, match_id: str, player_id: str, name: str) -> ActionResult:
        try:
            match = self.require_match(match_id)
        except GameError as e:
            return ActionResult.error(e.code, e.message)
        with self.match_locks[match_id]:
            return match.add_player(player_id, name)

    def leave(self, match_id: str, player_id: str) -> bool:
        """Remove a player; tears the match down once nobody is left.

        Returns:
            True if the match was torn down
        """
        match = self.get_match(match_id)
        if match is None:
            return False
        with self.match_locks[match_id]:
            empty = match.remove_player(player_id)
            if empty:
                del self.matches[match_id]
                self.match_locks.pop(match_id, None)
                logger.info("Match %s deleted (no players left)", match_id)
            return empty

    def perform(self, match_id: str, player_id: str, action_name: str, **params) -> ActionResult:
        """Run one client action against a match on behalf of player_id."""
        try:
            match = self.require_match(match_id)
        except GameError as e:
            return ActionResult.error(e.code, e.message)

        with self.match_locks[match_id]:
            state = match.state
            if state.get_player(player_id) is None:
                return ActionResult.error(ErrorCode.PLAYER_NOT_FOUND, "Player not in this match")
            if action_name == 'start_round':
                return match.start_round()
            if action_name not in TURN_ACTIONS:
                return ActionResult.error(ErrorCode.INVALID_ACTION, f"Unknown action: {action_name}")
            failure = validate_round_active(state)
            if failure:
                return failure
            if state.current_player().id != player_id:
                return ActionResult.error(ErrorCode.NOT_YOUR_TURN, "Not your turn")

            result = getattr(match, action_name)(**params)
            if not result.success:
                logger.debug("Match %s: %s %s rejected: %s",
                             match_id, player_id, action_name, result.error_code.value)
            return result

    def view(self, match_id: str, player_id: Optional[str]) -> Dict[str, Any]:
        match = self.require_match(match_id)
        with self.match_locks[match_id]:
            return match.view_for(player_id)
