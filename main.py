"""
Good Samaritan FastAPI Application

Main entry point for the Good Samaritan map, serving the REST API for pins and
comments and the real-time update stream.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import StreamingResponse

from database import init_db
from logic.log import configure_logging
from server.broadcast import event_generator, subscribers
from server.pins import router as pins_router
from server.routes import router as routes_router

# Load environment variables
load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Good Samaritan", lifespan=lifespan)

# Include all routers
app.include_router(pins_router)
app.include_router(routes_router)

# ============================================================
# SSE Endpoint
# ============================================================


@app.get("/api/stream")
async def stream():
    """Server-Sent Events (SSE) endpoint for real-time updates.

    Clients connect to this endpoint to receive new pins and comments as they
    are created by other users.

    Returns:
        StreamingResponse with text/event-stream content type.
    """
    queue = asyncio.Queue()
    subscribers.add(queue)

    return StreamingResponse(event_generator(queue), media_type="text/event-stream")
