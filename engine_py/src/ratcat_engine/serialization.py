"""
Per-player state projection and serialization utilities.

The match state always holds every card's true identity; hiding happens
here, at read time, for the player who will receive the snapshot.
"""

from typing import Any, Dict, List, Optional

from .constants import HIDDEN_CARD
from .models import Card, MatchState, Player
from .rules import RuleConfig, default_rules


def serialize_card(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    if card is None:
        return None
    return {"type": card.kind, "value": card.value}


def _own_hand(player: Player, round_ended: bool, rules: RuleConfig) -> List[Dict[str, Any]]:
    slots = []
    for idx, card in enumerate(player.hand):
        is_outer = player.is_outer(idx)
        is_known = round_ended or player.known[idx]
        visible = is_known or (rules.reveal_outer_cards and is_outer)
        slots.append({
            "card": serialize_card(card) if visible else dict(HIDDEN_CARD),
            "is_known": is_known,
            "is_outer": is_outer,
        })
    return slots


def _other_hand(player: Player, round_ended: bool) -> List[Dict[str, Any]]:
    return [
        {
            "card": serialize_card(card) if round_ended else dict(HIDDEN_CARD),
            "is_known": round_ended,
            "is_outer": False,
        }
        for card in player.hand
    ]


def view_for(
    state: MatchState,
    viewer_id: Optional[str] = None,
    rules: Optional[RuleConfig] = None
) -> Dict[str, Any]:
    """
    Build the snapshot one player is allowed to see.

    Args:
        state: Match state to project
        viewer_id: ID of the player receiving the snapshot
        rules: Rule configuration (outer-card reveal, log length)

    Returns:
        Dictionary safe for JSON transmission to that player
    """
    rules = rules or default_rules
    current = state.current_player()
    current_id = current.id if current else None
    is_viewer_turn = current_id is not None and current_id == viewer_id

    players = []
    for player in state.players:
        if player.id == viewer_id:
            hand = _own_hand(player, state.round_ended, rules)
        else:
            hand = _other_hand(player, state.round_ended)
        players.append({
            "id": player.id,
            "name": player.name,
            "hand_size": len(player.hand),
            "hand": hand,
            "score": player.round_score if state.round_ended else None,
            "total_score": player.total_score,
        })

    drawn_card = None
    if is_viewer_turn and state.pending is not None:
        drawn_card = serialize_card(state.pending.card)

    recent_log = state.game_log[-rules.log_history:] if rules.log_history else []

    return {
        "match_id": state.id,
        "version": state.version,
        "players": players,
        "current_player_id": current_id,
        "is_my_turn": is_viewer_turn,
        "discard_top": serialize_card(state.top_discard),
        "discard_size": len(state.discard),
        "deck_size": len(state.deck),
        "drawn_card": drawn_card,
        "has_drawn_card": state.pending is not None,
        "drawn_from_discard": state.drawn_from_discard,
        "draw2_active": state.draw2.active,
        "draw2_remaining": state.draw2.remaining,
        "game_started": state.game_started,
        "round_number": state.round_number,
        "round_ended": state.round_ended,
        "knocker_id": state.knocker_id,
        "final_round_active": state.final_round_active,
        "recent_log": list(recent_log),
    }


def serialize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Convert Card values in an action payload to plain dictionaries."""
    return {
        key: serialize_card(value) if isinstance(value, Card) else value
        for key, value in payload.items()
    }


def serialize_result(result) -> Dict[str, Any]:
    """Serialize an ActionResult for the client that requested it."""
    if result.success:
        return {"success": True, **serialize_payload(result.payload)}
    return {
        "success": False,
        "error": result.error_code.value,
        "message": result.error_message,
    }


def get_public_match_info(state: MatchState, rules: Optional[RuleConfig] = None) -> Dict[str, Any]:
    """Get public information about a match for listings."""
    rules = rules or default_rules
    return {
        "match_id": state.id,
        "player_count": len(state.players),
        "max_players": rules.max_players,
        "game_started": state.game_started,
        "round_number": state.round_number,
        "players": [{"id": p.id, "name": p.name} for p in state.players],
    }
