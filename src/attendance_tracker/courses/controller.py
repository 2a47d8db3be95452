from __future__ import annotations

from flask import Flask, g

from ..common.http import json_body, login_required, ok, ok_list
from ..container import Container


def register(app: Flask, container: Container) -> None:
    prefix = app.config["API_PREFIX"]
    auth = login_required(container.identity_resolver)
    courses = container.course_service

    @app.get(f"{prefix}/courses", endpoint="courses_list")
    @auth
    def list_courses():
        items = courses.list_courses(g.current_user)
        return ok_list([c.to_dict() for c in items])

    @app.get(f"{prefix}/courses/<int:course_id>", endpoint="courses_detail")
    @auth
    def get_course(course_id: int):
        return ok(courses.get_course(g.current_user, course_id).to_dict())

    @app.post(f"{prefix}/courses", endpoint="courses_create")
    @auth
    def create_course():
        body = json_body()
        course = courses.create_course(
            g.current_user,
            name=body.get("name"),
            code=body.get("code"),
            description=body.get("description"),
            teacher=body.get("teacher"),
            students=body.get("students"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
            schedule=body.get("schedule"),
            is_active=body.get("isActive", True),
        )
        return ok(course.to_dict(), 201)

    @app.post(f"{prefix}/courses/<int:course_id>/students", endpoint="courses_add_students")
    @auth
    def add_students(course_id: int):
        course = courses.add_members(g.current_user, course_id, json_body().get("students"))
        return ok(course.to_dict())

    @app.delete(f"{prefix}/courses/<int:course_id>/students", endpoint="courses_remove_students")
    @auth
    def remove_students(course_id: int):
        course = courses.remove_members(g.current_user, course_id, json_body().get("students"))
        return ok(course.to_dict())
