"""
FastAPI application bootstrap with: \n
- Lifespan-managed schema creation \n
- CORS configured for the frontend \n
- JSON error envelope handlers \n
- HTTP routers (auth, profiles, interest, wallet, checkout, matches, jobs) \n
- Authenticated WebSocket endpoints for realtime events (cookie-based token) \n

Environment contract (from `settings`): \n
- INIT_MODE: if 'runtime', create missing tables during app startup. \n
- FRONTEND_URL: allowed CORS origin. \n
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Cookie, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from bartr.api.errors import BartrError, register_exception_handlers
from bartr.api.events import broker, match_topic, user_topic
from bartr.api.fast_api import router
from bartr.api.match_routes import router as match_router
from bartr.api.utils import user_id_from_token
from bartr.database.config.config import settings
from bartr.database.config.connection_engine import connection_engine, metadata
from bartr.database.core.chat import check_chat_access
import bartr.database.entities  # noqa: F401  (registers the tables on `metadata`)

logger = logging.getLogger("uvicorn")
"""Logger instance for capturing and emitting Uvicorn server logs."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup: if INIT_MODE == 'runtime', create any missing tables.
    - On shutdown: dispose of the connection pool.
    """
    if settings.INIT_MODE == "runtime":
        metadata.create_all(connection_engine)
        logger.info("Database schema ready.")
    else:
        logger.info("Skipping schema init (INIT_MODE=%s).", settings.INIT_MODE)

    try:
        yield
    finally:
        connection_engine.dispose()
        logger.info("App shutting down; connection pool released.")


# Instantiate the FastAPI app with lifespan handler
app = FastAPI(title="Bartr", lifespan=lifespan)
"""The Bartr API application."""

# -----------------------
# CORS configuration
# -----------------------
url = settings.FRONTEND_URL
"""The allowed frontend origin (URL) used for CORS configuration."""

app.add_middleware(
    CORSMiddleware,
    allow_origins=[url],      # Frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# -----------------------
# API routes
# -----------------------
app.include_router(router)
app.include_router(match_router)


async def stream_events(websocket: WebSocket, topic: str) -> None:
    """
    Forward broker events on `topic` to the socket until the client leaves.

    Incoming client frames are read and ignored; they only serve to detect
    the disconnect. Whichever side stops first (client gone or a failed send)
    ends the stream, and the other one is cancelled and awaited.
    """
    with broker.subscription(topic) as queue:
        async def pump():
            while True:
                await websocket.send_json(await queue.get())

        async def drain():
            try:
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                logger.info("Subscriber left %s", topic)

        await websocket.send_json({"type": "subscribed", "topic": topic})
        tasks = {asyncio.create_task(pump()), asyncio.create_task(drain())}
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.warning("Stream %s closed after error: %r", topic, task.exception())


@app.websocket("/ws/me")
async def websocket_me(websocket: WebSocket, token: str = Cookie(None)):
    """
    Personal event stream: matches, requests and credit changes of the caller.

    Close Codes
    -----------
    - 1008: Policy Violation (used when auth fails).
    """
    await websocket.accept()
    user_id = user_id_from_token(token)
    if user_id is None:
        await websocket.close(code=1008)
        return
    await stream_events(websocket, user_topic(user_id))


@app.websocket("/ws/matches/{match_id}")
async def websocket_match(websocket: WebSocket, match_id: UUID, token: str = Cookie(None)):
    """
    Event stream of one match (state changes and new chat messages).
    Only the two participants may subscribe.

    Close Codes
    -----------
    - 1008: Policy Violation (missing/invalid token or not a participant).
    """
    await websocket.accept()
    user_id = user_id_from_token(token)
    if user_id is None:
        await websocket.close(code=1008)
        return
    try:
        await run_in_threadpool(check_chat_access, actor_id=user_id, match_id=match_id)
    except BartrError as e:
        logger.info("Refused match stream %s for %s: %s", match_id, user_id, e.error)
        await websocket.close(code=1008)
        return
    await stream_events(websocket, match_topic(match_id))
