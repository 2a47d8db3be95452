from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import errors as mysql_errors

from ..core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 8


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation. Sessions run in UTC so
    DATETIME columns and DATE() bucketing agree with the application clock.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig, *, readiness_cache_seconds: float = 5):
        self._config = config
        self._readiness_cache_seconds = float(readiness_cache_seconds)
        self._ready_checked_at: Optional[float] = None
        self._ready = False

    @classmethod
    def get_instance(cls, config: DBConfig, *, readiness_cache_seconds: float = 5) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config, readiness_cache_seconds=readiness_cache_seconds)
        return cls._instance

    @property
    def describe(self) -> str:
        c = self._config
        return f"{c.user}@{c.host}:{c.port}/{c.database}"

    def connect(self):
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=int(self._config.connect_timeout),
                time_zone="+00:00",
            )
        except (mysql_errors.InterfaceError, mysql_errors.OperationalError) as e:
            logger.error("Database connection failed (%s): %s", self.describe, e)
            raise StorageUnavailableError("Database not connected. Please try again shortly.") from e

    def is_ready(self) -> bool:
        """Readiness probe, cached for a few seconds to keep request gating cheap."""

        now = time.monotonic()
        if self._ready_checked_at is not None and now - self._ready_checked_at < self._readiness_cache_seconds:
            return self._ready

        try:
            conn = self.connect()
        except StorageUnavailableError:
            self._ready = False
        else:
            try:
                self._ready = bool(conn.is_connected())
            finally:
                conn.close()
        self._ready_checked_at = now
        return self._ready
