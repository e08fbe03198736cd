"""
Server-sent events (SSE) broadcasting module.

This module handles real-time updates via Server-Sent Events, managing
subscriber connections and broadcasting new pins and comments to all clients.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Set

logger = logging.getLogger(__name__)

# Global set of SSE subscribers (asyncio.Queue instances)
subscribers: Set[asyncio.Queue] = set()


async def event_generator(queue: asyncio.Queue):
    """Generate SSE events from the queue.

    The queue is unsubscribed when the client disconnects.

    Args:
        queue: Async queue to read events from.

    Yields:
        SSE formatted event strings.
    """
    try:
        while True:
            data = await queue.get()
            yield f"data: {json.dumps(data)}\n\n"
    finally:
        subscribers.discard(queue)


async def broadcast(event_type: str, payload: Dict[str, Any]):
    """Broadcast an event to all SSE subscribers.

    Args:
        event_type: Event name, e.g. "pin_created".
        payload: Extra fields merged into the event.
    """
    event = {
        "type": event_type,
        "time": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        **payload,
    }
    for queue in list(subscribers):
        await queue.put(event)
    logger.debug("Broadcast %s to %d subscribers", event_type, len(subscribers))


async def notify_pin_created(pin: Dict[str, Any]):
    await broadcast("pin_created", {"pin": pin})


async def notify_comment_created(comment: Dict[str, Any]):
    await broadcast("comment_created", {"comment": comment})
