"""FastAPI main application for the Rat-a-Tat Cat backend"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .serialization import get_public_match_info
from .websocket_server import GameWebSocketManager, game_manager

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


def create_app(manager: Optional[GameWebSocketManager] = None) -> FastAPI:
    manager = manager or game_manager
    app = FastAPI(title="Rat-a-Tat Cat API", version="1.0.0")
    app.state.game_manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Rat-a-Tat Cat API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "matches": len(manager.engine.matches)}

    @app.get("/matches/{match_id}")
    async def match_info(match_id: str):
        match = manager.engine.get_match(match_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Match not found")
        return get_public_match_info(match.state, match.rules)

    @app.websocket("/ws/{player_id}")
    async def websocket_endpoint(websocket: WebSocket, player_id: str):
        await manager.handle_websocket(websocket, player_id)

    @app.websocket("/ws")
    async def websocket_endpoint_anonymous(websocket: WebSocket):
        await manager.handle_websocket(websocket)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
