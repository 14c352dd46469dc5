"""Joins the per-user and per-organization broadcast rooms."""

import logging

from .identity import Identity
from .transport import TRANSPORT_EMIT_ERRORS, Transport

logger = logging.getLogger(__name__)

JOIN_USER_EVENT = "join-user"
JOIN_ORGANIZATION_EVENT = "join-organization"


class RoomJoiner:
    """Fire-and-forget room join directives, sent after every successful connection."""

    def join(self, transport: Transport, identity: Identity) -> bool:
        if not transport.connected:
            logger.debug(f"Skipping room join for {identity}: transport not connected")
            return False
        try:
            transport.emit(JOIN_USER_EVENT, identity.user_id)
            transport.emit(JOIN_ORGANIZATION_EVENT, identity.organization_id)
        except TRANSPORT_EMIT_ERRORS:
            logger.exception(f"Failed to join rooms for {identity}")
            return False
        logger.debug(f"Joined rooms for {identity}")
        return True


__all__ = ["JOIN_ORGANIZATION_EVENT", "JOIN_USER_EVENT", "RoomJoiner"]
