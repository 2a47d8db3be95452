from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import fail
from ..container import Container

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def register(app: Flask, container: Container) -> None:
    prefix = app.config["API_PREFIX"]

    @app.before_request
    def require_database_for_writes():
        if request.method not in MUTATING_METHODS or not request.path.startswith(f"{prefix}/"):
            return None
        if not container.conn.is_ready():
            return fail("Database not connected. Please try again shortly.", 503)
        return None

    @app.get("/health", endpoint="health")
    def health():
        ready = container.conn.is_ready()
        return jsonify({"ok": True, "dbState": "connected" if ready else "disconnected"})
