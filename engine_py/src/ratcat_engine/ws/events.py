"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError


class EventType(str, Enum):
    """Inbound event types."""
    CREATE = "create"
    JOIN = "join"
    START = "start"
    DRAW_DECK = "draw_deck"
    DRAW_DISCARD = "draw_discard"
    REPLACE = "replace"
    DISCARD_DRAWN = "discard_drawn"
    USE_PEEK = "use_peek"
    USE_SWAP = "use_swap"
    DECLINE_SWAP = "decline_swap"
    USE_DRAW2 = "use_draw2"
    HANDLE_DRAW2 = "handle_draw2"
    USE_ADD_CARD = "use_add_card"
    KNOCK = "knock"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    JOIN_SUCCESS = "join_success"
    STATE_FULL = "state_full"
    ACTION_RESULT = "action_result"
    CARD_REVEALED = "card_revealed"
    ERROR = "error"


# Transport-level error codes; engine failures use ErrorCode values
INVALID_EVENT = "INVALID_EVENT"
NOT_IN_MATCH = "NOT_IN_MATCH"
ALREADY_IN_MATCH = "ALREADY_IN_MATCH"
INTERNAL = "INTERNAL"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateEvent(BaseEvent):
    """Create a match and take the first seat."""
    type: EventType = EventType.CREATE
    name: str = Field(..., min_length=1, max_length=30)
    seed: Optional[int] = None


class JoinEvent(BaseEvent):
    """Join an existing match."""
    type: EventType = EventType.JOIN
    match_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=30)


class StartEvent(BaseEvent):
    type: EventType = EventType.START


class DrawDeckEvent(BaseEvent):
    type: EventType = EventType.DRAW_DECK


class DrawDiscardEvent(BaseEvent):
    type: EventType = EventType.DRAW_DISCARD


class ReplaceEvent(BaseEvent):
    """Replace a hand card with the drawn card."""
    type: EventType = EventType.REPLACE
    index: int


class DiscardDrawnEvent(BaseEvent):
    type: EventType = EventType.DISCARD_DRAWN


class UsePeekEvent(BaseEvent):
    type: EventType = EventType.USE_PEEK
    index: int


class UseSwapEvent(BaseEvent):
    """Blind swap with an opponent."""
    type: EventType = EventType.USE_SWAP
    my_index: int
    opponent_id: str = Field(..., min_length=1)
    opponent_index: int


class DeclineSwapEvent(BaseEvent):
    type: EventType = EventType.DECLINE_SWAP


class UseDraw2Event(BaseEvent):
    type: EventType = EventType.USE_DRAW2


class HandleDraw2Event(BaseEvent):
    """Keep or discard the card offered by a Draw 2 chain."""
    type: EventType = EventType.HANDLE_DRAW2
    action: Literal["use", "discard"]
    index: Optional[int] = None


class UseAddCardEvent(BaseEvent):
    type: EventType = EventType.USE_ADD_CARD


class KnockEvent(BaseEvent):
    type: EventType = EventType.KNOCK


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateEvent,
    JoinEvent,
    StartEvent,
    DrawDeckEvent,
    DrawDiscardEvent,
    ReplaceEvent,
    DiscardDrawnEvent,
    UsePeekEvent,
    UseSwapEvent,
    DeclineSwapEvent,
    UseDraw2Event,
    HandleDraw2Event,
    UseAddCardEvent,
    KnockEvent,
    RequestStateEvent,
]

EVENT_MODELS = {
    EventType.CREATE: CreateEvent,
    EventType.JOIN: JoinEvent,
    EventType.START: StartEvent,
    EventType.DRAW_DECK: DrawDeckEvent,
    EventType.DRAW_DISCARD: DrawDiscardEvent,
    EventType.REPLACE: ReplaceEvent,
    EventType.DISCARD_DRAWN: DiscardDrawnEvent,
    EventType.USE_PEEK: UsePeekEvent,
    EventType.USE_SWAP: UseSwapEvent,
    EventType.DECLINE_SWAP: DeclineSwapEvent,
    EventType.USE_DRAW2: UseDraw2Event,
    EventType.HANDLE_DRAW2: HandleDraw2Event,
    EventType.USE_ADD_CARD: UseAddCardEvent,
    EventType.KNOCK: KnockEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
}

# Inbound events that map one-to-one onto a match action
EVENT_ACTIONS = {
    EventType.START: "start_round",
    EventType.DRAW_DECK: "draw_from_deck",
    EventType.DRAW_DISCARD: "draw_from_discard_pile",
    EventType.REPLACE: "replace_card_in_hand",
    EventType.DISCARD_DRAWN: "discard_drawn_card",
    EventType.USE_PEEK: "use_peek",
    EventType.USE_SWAP: "use_swap",
    EventType.DECLINE_SWAP: "decline_swap",
    EventType.USE_DRAW2: "use_draw2",
    EventType.HANDLE_DRAW2: "handle_draw2_card",
    EventType.USE_ADD_CARD: "use_add_card",
    EventType.KNOCK: "knock",
}


# Outbound event models
class JoinSuccessEvent(BaseModel):
    """Join success confirmation event."""
    type: OutboundEventType = OutboundEventType.JOIN_SUCCESS
    player_id: str
    match_id: str
    timestamp: float


class StateFullEvent(BaseModel):
    """Full per-player state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class ActionResultEvent(BaseModel):
    """Result of the receiving player's own action."""
    type: OutboundEventType = OutboundEventType.ACTION_RESULT
    action: str
    result: Dict[str, Any]
    timestamp: float


class CardRevealedEvent(BaseModel):
    """One-off Peek reveal, sent to the peeking player only."""
    type: OutboundEventType = OutboundEventType.CARD_REVEALED
    card: Dict[str, Any]
    index: int
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: str
    message: str
    timestamp: float


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MODELS[event_type]
    try:
        return event_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e.errors()[0]['msg']}")


def event_params(event: BaseEvent) -> Dict[str, Any]:
    """Keyword arguments for the match action behind an event."""
    return event.model_dump(exclude={"type"})


def create_error_event(code: str, message: str) -> ErrorEvent:
    return ErrorEvent(code=code, message=message, timestamp=time.time())


def create_join_success_event(player_id: str, match_id: str) -> JoinSuccessEvent:
    return JoinSuccessEvent(player_id=player_id, match_id=match_id, timestamp=time.time())


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    return StateFullEvent(state=state, timestamp=time.time())


def create_action_result_event(action: str, result: Dict[str, Any]) -> ActionResultEvent:
    return ActionResultEvent(action=action, result=result, timestamp=time.time())


def create_card_revealed_event(card: Dict[str, Any], index: int) -> CardRevealedEvent:
    return CardRevealedEvent(card=card, index=index, timestamp=time.time())
