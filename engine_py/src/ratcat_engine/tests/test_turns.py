"""
Tests for round setup, the basic turn actions and seating.
"""

from factories import force_pending, make_match, pull_card

from ratcat_engine.constants import DECK_SIZE, KIND_NUMBER, SOURCE_DECK, SOURCE_DISCARD
from ratcat_engine.errors import ErrorCode
from ratcat_engine.shuffle import count_cards, validate_deck_integrity


def test_start_round():
    """Test dealing four hidden cards each and turning up a number card."""
    match = make_match(3)
    state = match.state

    assert state.game_started
    assert state.round_active
    assert state.round_number == 1
    assert state.current_player_index == 0
    for player in state.players:
        assert len(player.hand) == 4
        assert player.known == [False] * 4

    assert len(state.discard) == 1
    assert state.top_discard.kind == KIND_NUMBER
    assert len(state.deck) == DECK_SIZE - 3 * 4 - 1
    assert validate_deck_integrity(state)


def test_start_round_needs_two_players():
    match = make_match(1, start=False)
    result = match.start_round()

    assert not result.success
    assert result.error_code == ErrorCode.INSUFFICIENT_PLAYERS
    assert not match.state.game_started
    assert match.state.deck == []


def test_start_round_twice():
    """Test that a round in progress cannot be restarted."""
    match = make_match(2)
    hands = [list(p.hand) for p in match.players]

    result = match.start_round()

    assert not result.success
    assert result.error_code == ErrorCode.GAME_ALREADY_STARTED
    assert [p.hand for p in match.players] == hands


def test_next_round_keeps_total_scores():
    match = make_match(2)
    scores = match.end_round()["scores"]

    result = match.start_round()

    assert result.success
    assert result["round_number"] == 2
    assert not match.state.round_ended
    for player in match.players:
        assert player.total_score == scores[player.id]
        assert len(player.hand) == 4
    assert validate_deck_integrity(match.state)


def test_seeded_rounds_are_reproducible():
    a = make_match(2, seed=99)
    b = make_match(2, seed=99)
    assert [(c.kind, c.value) for c in a.state.deck] == [(c.kind, c.value) for c in b.state.deck]
    assert [(c.kind, c.value) for c in a.players[0].hand] == [(c.kind, c.value) for c in b.players[0].hand]


def test_draw_replace_scenario():
    """Test draw, replace slot 0, the old card on the discard pile and the turn passing on."""
    match = make_match(2, seed=1234)
    state = match.state
    original_slot_card = state.players[0].hand[0]

    draw = match.draw_from_deck()
    assert draw.success
    assert draw["must_use"] is False
    drawn = draw["card"]
    assert state.pending.card is drawn
    assert state.pending.source == SOURCE_DECK

    result = match.replace_card_in_hand(0)

    assert result.success
    assert state.top_discard is original_slot_card
    assert state.players[0].hand[0] is drawn
    assert state.players[0].known[0] is False
    assert state.pending is None
    assert state.current_player().id == "p2"
    assert count_cards(state) == DECK_SIZE


def test_replace_keeps_known_flag():
    match = make_match(2)
    player = match.players[0]
    player.known[2] = True

    match.draw_from_deck()
    match.replace_card_in_hand(2)

    assert player.known == [False, False, True, False]


def test_draw_twice():
    match = make_match(2)
    assert match.draw_from_deck().success
    version = match.state.version

    result = match.draw_from_deck()
    assert not result.success
    assert result.error_code == ErrorCode.ALREADY_DRAWN

    result = match.draw_from_discard_pile()
    assert result.error_code == ErrorCode.ALREADY_DRAWN
    assert match.state.version == version


def test_no_card_drawn():
    match = make_match(2)

    assert match.replace_card_in_hand(0).error_code == ErrorCode.NO_CARD_DRAWN
    assert match.discard_drawn_card().error_code == ErrorCode.NO_CARD_DRAWN
    assert match.state.current_player_index == 0


def test_invalid_index():
    """Test out-of-range and non-integer hand indexes."""
    match = make_match(2)
    match.draw_from_deck()
    pending = match.state.pending

    for index in (4, -1, "0", None, True):
        result = match.replace_card_in_hand(index)
        assert not result.success
        assert result.error_code == ErrorCode.INVALID_INDEX

    assert match.state.pending is pending
    assert match.state.current_player_index == 0


def test_discard_drawn_card():
    match = make_match(2)
    state = match.state
    drawn = match.draw_from_deck()["card"]
    hand = list(state.players[0].hand)

    result = match.discard_drawn_card()

    assert result.success
    assert state.top_discard is drawn
    assert state.players[0].hand == hand
    assert state.current_player().id == "p2"


def test_draw_from_discard_pile():
    match = make_match(2)
    state = match.state
    top = state.top_discard

    result = match.draw_from_discard_pile()

    assert result.success
    assert result["card"] is top
    assert result["must_use"] is True
    assert state.discard == []
    assert state.pending.source == SOURCE_DISCARD
    assert state.drawn_from_discard


def test_cannot_discard_card_taken_from_discard():
    """Test that a card taken from the discard pile must go into the hand."""
    match = make_match(2)
    state = match.state
    match.draw_from_discard_pile()
    pending = state.pending

    result = match.discard_drawn_card()

    assert not result.success
    assert result.error_code == ErrorCode.CANNOT_DISCARD_FROM_DISCARD
    assert state.pending is pending
    assert state.current_player_index == 0

    assert match.replace_card_in_hand(1).success
    assert state.players[0].hand[1] is pending.card


def test_power_card_cannot_come_from_discard():
    match = make_match(2)
    state = match.state
    peek = pull_card(state, "peek")
    state.discard.append(peek)
    discard = list(state.discard)

    result = match.draw_from_discard_pile()

    assert not result.success
    assert result.error_code == ErrorCode.POWER_CARD_FROM_DISCARD
    assert state.discard == discard
    assert state.pending is None


def test_discard_pile_empty():
    match = make_match(2)
    state = match.state
    state.deck[0:0] = state.discard
    state.discard = []

    result = match.draw_from_discard_pile()
    assert result.error_code == ErrorCode.DISCARD_EMPTY


def test_deck_empty():
    """Test drawing with no deck and a single discard card."""
    match = make_match(2)
    state = match.state
    spare = state.players[1]
    while state.deck:
        spare.add_card(state.deck.pop())

    result = match.draw_from_deck()

    assert not result.success
    assert result.error_code == ErrorCode.DECK_EMPTY
    assert state.pending is None
    assert count_cards(state) == DECK_SIZE


def test_draw_reshuffles_when_deck_runs_out():
    match = make_match(2)
    state = match.state
    # Move the deck onto the discard pile below the current top
    top = state.discard.pop()
    state.discard.extend(state.deck)
    state.discard.append(top)
    state.deck = []

    result = match.draw_from_deck()

    assert result.success
    assert state.discard == [top]
    assert count_cards(state) == DECK_SIZE


def test_actions_before_start():
    match = make_match(2, start=False)

    assert match.draw_from_deck().error_code == ErrorCode.ROUND_NOT_ACTIVE
    assert match.knock().error_code == ErrorCode.ROUND_NOT_ACTIVE


def test_add_player():
    match = make_match(2, start=False)

    result = match.add_player("p3", "Carol")

    assert result.success
    assert result["seat"] == 2
    assert [p.id for p in match.players] == ["p1", "p2", "p3"]


def test_add_player_duplicate():
    match = make_match(2, start=False)
    result = match.add_player("p1", "Again")
    assert result.error_code == ErrorCode.PLAYER_EXISTS
    assert len(match.players) == 2


def test_game_full():
    match = make_match(6, start=False)
    result = match.add_player("p7", "Grace")
    assert not result.success
    assert result.error_code == ErrorCode.GAME_FULL


def test_join_after_start():
    match = make_match(2)
    result = match.add_player("p3", "Carol")
    assert result.error_code == ErrorCode.GAME_ALREADY_STARTED


def test_remove_player_before_start():
    match = make_match(2, start=False)
    assert match.remove_player("p1") is False
    assert match.remove_player("nobody") is False
    assert match.remove_player("p2") is True


def test_remove_waiting_player_mid_round():
    """Test that a departing hand goes under the discard pile and play continues."""
    match = make_match(3)
    state = match.state
    top = state.top_discard
    hand = list(state.players[1].hand)

    assert match.remove_player("p2") is False

    assert state.round_active
    assert [p.id for p in state.players] == ["p1", "p3"]
    assert state.current_player().id == "p1"
    assert state.top_discard is top
    assert state.discard[:4] == hand
    assert validate_deck_integrity(state)


def test_remove_current_player_with_drawn_card():
    match = make_match(3)
    state = match.state
    drawn = match.draw_from_deck()["card"]

    match.remove_player("p1")

    assert state.pending is None
    assert drawn in state.discard
    assert state.current_player().id == "p2"
    assert validate_deck_integrity(state)


def test_remove_player_ends_short_round():
    """Test that the round is scored once fewer than two players remain."""
    match = make_match(2)
    state = match.state

    match.remove_player("p2")

    assert not state.round_active
    assert state.round_ended
    assert state.players[0].total_score == state.players[0].round_score


def test_remove_last_seat_wraps_turn():
    match = make_match(3)
    state = match.state
    match.draw_from_deck()
    match.discard_drawn_card()
    match.draw_from_deck()
    match.discard_drawn_card()
    assert state.current_player().id == "p3"

    match.remove_player("p3")

    assert state.current_player().id == "p1"


def test_failed_action_changes_nothing():
    match = make_match(2)
    state = match.state
    force_pending(match, KIND_NUMBER, 5, SOURCE_DISCARD)
    version = state.version
    index = state.current_player_index

    for result in (
        match.discard_drawn_card(),
        match.use_peek(0),
        match.draw_from_deck(),
        match.replace_card_in_hand(9),
    ):
        assert not result.success

    assert state.version == version
    assert state.current_player_index == index
