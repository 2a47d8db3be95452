from __future__ import annotations

from flask import Flask, g, request

from ..common.http import json_body, login_required, ok, ok_list
from ..container import Container
from ..core.enums import Role
from .service import parse_filters


def register(app: Flask, container: Container) -> None:
    prefix = app.config["API_PREFIX"]
    auth = login_required(container.identity_resolver)
    attendance = container.attendance_service

    @app.get(f"{prefix}/attendance", endpoint="attendance_list")
    @auth
    def list_attendance():
        views = attendance.list_filtered(g.current_user, parse_filters(request.args))
        return ok_list([v.to_dict() for v in views])

    @app.get(f"{prefix}/attendance/stats", endpoint="attendance_stats")
    @auth
    def attendance_stats():
        return ok(attendance.stats(g.current_user, parse_filters(request.args)).to_dict())

    @app.get(f"{prefix}/attendance/<int:attendance_id>", endpoint="attendance_detail")
    @auth
    def get_attendance(attendance_id: int):
        return ok(attendance.get(g.current_user, attendance_id).to_dict())

    @app.post(f"{prefix}/attendance/self", endpoint="attendance_self")
    @auth
    def self_mark():
        body = json_body()
        view = attendance.self_mark(g.current_user, status=body.get("status"), notes=body.get("notes"))
        return ok(view.to_dict())

    @app.post(f"{prefix}/attendance", endpoint="attendance_create")
    @auth
    def create_attendance():
        body = json_body()
        if g.current_user.role == Role.STUDENT:
            view = attendance.self_mark(
                g.current_user,
                status=body.get("status"),
                notes=body.get("notes"),
                student=body.get("student"),
            )
            return ok(view.to_dict())

        view = attendance.create(
            g.current_user,
            student=body.get("student"),
            course=body.get("course"),
            status=body.get("status"),
            date=body.get("date"),
            notes=body.get("notes"),
        )
        return ok(view.to_dict(), 201)

    @app.put(f"{prefix}/attendance/<int:attendance_id>", endpoint="attendance_update")
    @auth
    def update_attendance(attendance_id: int):
        body = json_body()
        view = attendance.update(
            g.current_user,
            attendance_id,
            status=body.get("status"),
            notes=body.get("notes"),
            notes_provided="notes" in body,
        )
        return ok(view.to_dict())

    @app.delete(f"{prefix}/attendance/<int:attendance_id>", endpoint="attendance_delete")
    @auth
    def delete_attendance(attendance_id: int):
        attendance.delete(g.current_user, attendance_id)
        return ok({})
