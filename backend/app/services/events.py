"""
backend/app/services/events.py

Event emitter: pushes booking events to a Redis queue for downstream
consumers (notifications, calendar sync).

Queue: events:p2p
"""

import json
import time
import logging

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit an event.

    Delivery is best effort: a Redis failure is logged and the request
    that triggered the event still succeeds.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(P2P_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
