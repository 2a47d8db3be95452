from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from flask_socketio import SocketIO

from ..attendance.model import AttendanceView
from ..core.constants import EVENT_ATTENDANCE_DELETE, EVENT_ATTENDANCE_UPDATE
from .topics import attendance_audience

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    def publish(self, event: str, payload: Any, topics: Sequence[str]) -> None:
        raise NotImplementedError


class SocketIOPublisher(EventPublisher):
    """Emit once to the union of rooms; a socket in several rooms gets one copy."""

    def __init__(self, socketio: SocketIO):
        self._socketio = socketio

    def publish(self, event: str, payload: Any, topics: Sequence[str]) -> None:
        self._socketio.emit(event, payload, to=list(topics))


class AttendanceEvents:
    """Announces committed attendance mutations. Delivery is best effort, at most once."""

    def __init__(self, publisher: EventPublisher):
        self._publisher = publisher

    def _send(self, event: str, payload: Any, student_id: int) -> None:
        try:
            self._publisher.publish(event, payload, attendance_audience(student_id))
        except Exception:
            # The write is already committed; clients resync through the read API.
            logger.exception("Failed to publish %s for student %s", event, student_id)

    def updated(self, view: AttendanceView) -> None:
        self._send(EVENT_ATTENDANCE_UPDATE, view.to_dict(), view.record.student_id)

    def deleted(self, attendance_id: int, student_id: int) -> None:
        self._send(EVENT_ATTENDANCE_DELETE, {"id": attendance_id}, student_id)
