"""WebSocket server for real-time multiplayer communication"""

import logging
import uuid
from typing import Any, Dict, Optional, Set

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from .engine import RatCatEngine
from .rules import RuleConfig
from .serialization import serialize_card, serialize_result
from .ws.events import (
    ALREADY_IN_MATCH, EVENT_ACTIONS, INTERNAL, INVALID_EVENT, NOT_IN_MATCH,
    CreateEvent, EventType, JoinEvent, create_action_result_event,
    create_card_revealed_event, create_error_event, create_join_success_event,
    create_state_full_event, event_params, parse_inbound_event
)

logger = logging.getLogger(__name__)

# Result fields the acting player must not learn (Add Card deals face down)
PRIVATE_RESULT_KEYS = frozenset(["added_card"])


def encode(message: Any) -> str:
    if isinstance(message, BaseModel):
        message = message.model_dump(mode="json")
    return orjson.dumps(message).decode()


class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.match_connections: Dict[str, Set[str]] = {}
        self.player_to_match: Dict[str, str] = {}

    async def connect(self, websocket: WebSocket, player_id: str):
        await websocket.accept()
        self.active_connections[player_id] = websocket
        logger.info(f"Player {player_id} connected")

    def disconnect(self, player_id: str) -> Optional[str]:
        """Forget a connection. Returns the match it was seated in, if any."""
        self.active_connections.pop(player_id, None)
        match_id = self.player_to_match.pop(player_id, None)
        if match_id and match_id in self.match_connections:
            self.match_connections[match_id].discard(player_id)
            if not self.match_connections[match_id]:
                del self.match_connections[match_id]
        logger.info(f"Player {player_id} disconnected")
        return match_id

    def add_to_match(self, player_id: str, match_id: str):
        self.match_connections.setdefault(match_id, set()).add(player_id)
        self.player_to_match[player_id] = match_id

    async def send_personal_message(self, message: Any, player_id: str):
        websocket = self.active_connections.get(player_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(encode(message))
        except Exception as e:
            logger.error(f"Error sending message to {player_id}: {e}")


class GameWebSocketManager:
    def __init__(self, engine: Optional[RatCatEngine] = None, rules: Optional[RuleConfig] = None):
        self.engine = engine or RatCatEngine(rules)
        self.connection_manager = ConnectionManager()

    async def handle_websocket(self, websocket: WebSocket, player_id: Optional[str] = None):
        if not player_id:
            player_id = str(uuid.uuid4())[:8]

        await self.connection_manager.connect(websocket, player_id)

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = orjson.loads(data)
                except orjson.JSONDecodeError:
                    await self.send_error(player_id, INVALID_EVENT, "Message is not valid JSON")
                    continue
                await self.handle_message(message, player_id)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for player {player_id}")
        finally:
            await self.handle_disconnect(player_id)

    async def handle_message(self, message: Dict[str, Any], player_id: str):
        try:
            event = parse_inbound_event(message)
        except ValueError as e:
            await self.send_error(player_id, INVALID_EVENT, str(e))
            return

        try:
            if event.type == EventType.CREATE:
                await self.create_match(event, player_id)
            elif event.type == EventType.JOIN:
                await self.join_match(event, player_id)
            elif event.type == EventType.REQUEST_STATE:
                await self.send_game_state(player_id)
            else:
                await self.perform_action(player_id, EVENT_ACTIONS[event.type], event_params(event))
        except Exception as e:
            logger.error(f"Error handling message {event.type.value}: {e}")
            await self.send_error(player_id, INTERNAL, str(e))

    async def send_error(self, player_id: str, code: str, message: str):
        await self.connection_manager.send_personal_message(create_error_event(code, message), player_id)

    async def create_match(self, event: CreateEvent, player_id: str):
        if player_id in self.connection_manager.player_to_match:
            await self.send_error(player_id, ALREADY_IN_MATCH, "Leave your current match first")
            return
        match = self.engine.create_match(seed=event.seed)
        logger.info(f"Match {match.id} created by {event.name}")
        await self._seat(match.id, player_id, event.name)

    async def join_match(self, event: JoinEvent, player_id: str):
        if player_id in self.connection_manager.player_to_match:
            await self.send_error(player_id, ALREADY_IN_MATCH, "Leave your current match first")
            return
        await self._seat(event.match_id, player_id, event.name)

    async def _seat(self, match_id: str, player_id: str, name: str):
        result = self.engine.join(match_id, player_id, name)
        if not result.success:
            await self.send_error(player_id, result.error_code.value, result.error_message)
            return
        self.connection_manager.add_to_match(player_id, match_id)
        await self.connection_manager.send_personal_message(
            create_join_success_event(player_id, match_id), player_id
        )
        await self.broadcast_game_state(match_id)

    async def perform_action(self, player_id: str, action: str, params: Dict[str, Any]):
        match_id = self.connection_manager.player_to_match.get(player_id)
        if not match_id:
            await self.send_error(player_id, NOT_IN_MATCH, "Join a match first")
            return

        result = self.engine.perform(match_id, player_id, action, **params)
        if not result.success:
            await self.send_error(player_id, result.error_code.value, result.error_message)
            return

        logger.debug(f"{player_id} performed {action} in match {match_id}")
        if action == "use_peek":
            await self.connection_manager.send_personal_message(
                create_card_revealed_event(serialize_card(result["revealed_card"]), result["index"]),
                player_id
            )
        public_result = serialize_result(result)
        for key in PRIVATE_RESULT_KEYS:
            public_result.pop(key, None)
        await self.connection_manager.send_personal_message(
            create_action_result_event(action, public_result), player_id
        )
        await self.broadcast_game_state(match_id)

    async def handle_disconnect(self, player_id: str):
        match_id = self.connection_manager.disconnect(player_id)
        if not match_id:
            return
        if not self.engine.leave(match_id, player_id):
            await self.broadcast_game_state(match_id)

    async def send_game_state(self, player_id: str):
        match_id = self.connection_manager.player_to_match.get(player_id)
        if not match_id:
            await self.send_error(player_id, NOT_IN_MATCH, "Join a match first")
            return
        await self.connection_manager.send_personal_message(
            create_state_full_event(self.engine.view(match_id, player_id)), player_id
        )

    async def broadcast_game_state(self, match_id: str):
        if self.engine.get_match(match_id) is None:
            return
        # Send personalized game state to each connected player
        for player_id in list(self.connection_manager.match_connections.get(match_id, ())):
            await self.connection_manager.send_personal_message(
                create_state_full_event(self.engine.view(match_id, player_id)), player_id
            )


# Global instance
game_manager = GameWebSocketManager()
