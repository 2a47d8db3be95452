from __future__ import annotations

import logging

from flask import request
from flask_socketio import SocketIO, join_room

from ..container import Container
from ..core.exceptions import AuthenticationError, DependencyUnavailableError
from .topics import identity_topic, role_topic

logger = logging.getLogger(__name__)


def register(socketio: SocketIO, container: Container) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        try:
            user = container.identity_resolver.resolve_handshake(auth, request.headers)
        except (AuthenticationError, DependencyUnavailableError) as e:
            logger.warning("Socket %s refused: %s", request.sid, e.message)
            raise ConnectionRefusedError(e.message)

        join_room(role_topic(user.role))
        join_room(identity_topic(user.user_id))
        logger.info("Socket %s connected as user %s (%s)", request.sid, user.user_id, user.role.value)

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        logger.info("Socket %s disconnected", request.sid)
