"""Frame parsing for the analysis event stream."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from paystream.exceptions import ProtocolError
from paystream.models.events import (
    EVENT_ADAPTER,
    EVENT_TYPES,
    LEGACY_EVENT_TYPES,
    Event,
)

logger = logging.getLogger(__name__)


def parse_frame(frame: str) -> Event | None:
    """Parse one transport frame into a typed event.

    Returns None for well-formed frames whose ``type`` is not recognized;
    those are ignored for forward compatibility.

    Raises:
        ProtocolError: If the frame is not a JSON object, or a recognized
            event is missing required fields.
    """
    try:
        payload = json.loads(frame)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ProtocolError(f"Malformed event frame: {exc}", frame=frame) from exc

    if not isinstance(payload, dict):
        raise ProtocolError(
            f"Event frame is not an object: {type(payload).__name__}", frame=frame
        )

    event_type = payload.get("type")
    if not isinstance(event_type, str):
        logger.debug("Ignoring event without a string type: %r", event_type)
        return None
    event_type = LEGACY_EVENT_TYPES.get(event_type, event_type)
    if event_type not in EVENT_TYPES:
        logger.debug("Ignoring event of unknown type %r", event_type)
        return None

    try:
        return EVENT_ADAPTER.validate_python({**payload, "type": event_type})
    except ValidationError as exc:
        raise ProtocolError(
            f"Invalid {event_type} event: {exc.error_count()} field error(s)",
            frame=frame,
        ) from exc
