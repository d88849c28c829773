"""
Tests for the per-player view of a match.
"""

from factories import force_pending, make_match, number, set_hand

from ratcat_engine.constants import HIDDEN_CARD
from ratcat_engine.errors import ErrorCode
from ratcat_engine.serialization import get_public_match_info, serialize_card, serialize_result
from ratcat_engine.validate import ActionResult


def _hand(view, player_id):
    player = next(p for p in view["players"] if p["id"] == player_id)
    return player["hand"]


def test_own_hand_shows_outer_and_known_cards():
    match = make_match(2)
    state = match.state
    set_hand(state, 0, [number(1), number(2), number(3), number(4)])
    state.players[0].known[1] = True

    hand = _hand(match.view_for("p1"), "p1")

    assert [slot["card"] for slot in hand] == [
        {"type": "number", "value": 1},
        {"type": "number", "value": 2},
        HIDDEN_CARD,
        {"type": "number", "value": 4},
    ]
    assert [slot["is_known"] for slot in hand] == [False, True, False, False]
    assert [slot["is_outer"] for slot in hand] == [True, False, False, True]


def test_outer_cards_hidden_when_disabled():
    match = make_match(2, reveal_outer_cards=False)
    hand = _hand(match.view_for("p1"), "p1")
    assert all(slot["card"] == HIDDEN_CARD for slot in hand)


def test_other_hands_are_masked():
    """Test that opponents' cards never show, even ones they know."""
    match = make_match(3)
    match.state.players[1].known = [True] * 4

    view = match.view_for("p1")

    for player_id in ("p2", "p3"):
        hand = _hand(view, player_id)
        assert len(hand) == 4
        assert all(slot["card"] == HIDDEN_CARD for slot in hand)
        assert all(slot["is_outer"] is False for slot in hand)


def test_drawn_card_only_for_current_player():
    match = make_match(2)
    card = force_pending(match, "number", 6)

    mine = match.view_for("p1")
    theirs = match.view_for("p2")

    assert mine["drawn_card"] == serialize_card(card)
    assert mine["is_my_turn"] is True
    assert theirs["drawn_card"] is None
    assert theirs["is_my_turn"] is False
    assert theirs["has_drawn_card"] is True


def test_public_fields():
    match = make_match(2)
    state = match.state
    view = match.view_for("p2")

    assert view["match_id"] == "TEST"
    assert view["current_player_id"] == "p1"
    assert view["discard_top"] == serialize_card(state.top_discard)
    assert view["deck_size"] == len(state.deck)
    assert view["discard_size"] == 1
    assert view["knocker_id"] is None
    assert view["final_round_active"] is False
    assert view["draw2_active"] is False
    assert view["round_number"] == 1
    assert view["version"] == state.version


def test_scores_hidden_until_round_end():
    match = make_match(2)

    view = match.view_for("p1")
    assert all(p["score"] is None for p in view["players"])
    assert all(p["total_score"] == 0 for p in view["players"])

    match.end_round()

    view = match.view_for("p1")
    for player, shown in zip(match.players, view["players"]):
        assert shown["score"] == player.round_score
        assert shown["total_score"] == player.total_score


def test_round_end_reveals_every_hand():
    match = make_match(3)
    match.end_round()

    view = match.view_for("p2")

    for player, shown in zip(match.players, view["players"]):
        assert [slot["card"] for slot in shown["hand"]] == [serialize_card(c) for c in player.hand]
        assert all(slot["is_known"] for slot in shown["hand"])


def test_unseated_viewer_sees_no_cards():
    match = make_match(2)
    force_pending(match, "peek")

    view = match.view_for("spectator")

    assert view["drawn_card"] is None
    assert view["is_my_turn"] is False
    for shown in view["players"]:
        assert all(slot["card"] == HIDDEN_CARD for slot in shown["hand"])


def test_view_does_not_change_state():
    match = make_match(2)
    state = match.state
    version = state.version
    hand = list(state.players[0].hand)

    match.view_for("p1")["players"][0]["hand"][0]["card"]["type"] = "tampered"

    assert state.version == version
    assert state.players[0].hand == hand
    assert match.view_for("p1")["players"][0]["hand"][0]["card"]["type"] != "tampered"


def test_recent_log_length():
    match = make_match(2, log_history=3)
    for _ in range(4):
        match.draw_from_deck()
        match.discard_drawn_card()

    view = match.view_for("p1")

    assert len(view["recent_log"]) == 3
    assert view["recent_log"] == match.state.game_log[-3:]


def test_serialize_result():
    match = make_match(2)
    card = match.draw_from_deck()["card"]

    ok = serialize_result(ActionResult.ok(card=card, must_use=False))
    failed = serialize_result(ActionResult.error(ErrorCode.DECK_EMPTY, "Deck is empty"))

    assert ok == {"success": True, "card": serialize_card(card), "must_use": False}
    assert failed == {"success": False, "error": "DECK_EMPTY", "message": "Deck is empty"}


def test_public_match_info():
    match = make_match(2, start=False)
    info = get_public_match_info(match.state, match.rules)

    assert info["match_id"] == "TEST"
    assert info["player_count"] == 2
    assert info["max_players"] == 6
    assert info["game_started"] is False
    assert [p["name"] for p in info["players"]] == ["Alice", "Bob"]
