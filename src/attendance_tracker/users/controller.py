from __future__ import annotations

from flask import Flask, g, make_response

from ..common.http import json_body, login_required, ok, ok_list, roles_required
from ..container import Container
from ..core.enums import Role

TOKEN_COOKIE = "token"


def register(app: Flask, container: Container) -> None:
    prefix = app.config["API_PREFIX"]
    auth = login_required(container.identity_resolver)
    admin_only = roles_required(Role.ADMIN)
    cookie_max_age = int(app.config.get("JWT_EXPIRE_DAYS", 30)) * 24 * 3600

    def _token_response(result, status: int):
        resp = make_response(ok({"token": result.token, "user": result.user.to_public()}, status))
        resp.set_cookie(
            TOKEN_COOKIE,
            result.token,
            max_age=cookie_max_age,
            httponly=True,
            secure=not app.config.get("DEBUG", False),
            samesite="Lax",
        )
        return resp

    if container.identity_resolver.supports_local_credentials:

        @app.post(f"{prefix}/auth/register", endpoint="auth_register")
        def auth_register():
            body = json_body()
            result = container.auth_service.register(
                name=body.get("name"),
                email=body.get("email"),
                password=body.get("password"),
                role=body.get("role"),
            )
            return _token_response(result, 201)

        @app.post(f"{prefix}/auth/login", endpoint="auth_login")
        def auth_login():
            body = json_body()
            result = container.auth_service.authenticate(body.get("email"), body.get("password"))
            return _token_response(result, 200)

        @app.get(f"{prefix}/auth/logout", endpoint="auth_logout")
        def auth_logout():
            resp = make_response(ok({}))
            resp.delete_cookie(TOKEN_COOKIE)
            return resp

    @app.get(f"{prefix}/auth/me", endpoint="auth_me")
    @auth
    def auth_me():
        return ok(g.current_user.to_public())

    @app.get(f"{prefix}/users", endpoint="users_list")
    @auth
    @admin_only
    def list_users():
        return ok_list([u.to_public() for u in container.user_service.list_users(g.current_user)])

    @app.get(f"{prefix}/users/<int:user_id>", endpoint="users_detail")
    @auth
    @admin_only
    def get_user(user_id: int):
        return ok(container.user_service.get_user(g.current_user, user_id).to_public())

    @app.put(f"{prefix}/users/<int:user_id>/role", endpoint="users_role")
    @auth
    @admin_only
    def change_role(user_id: int):
        user = container.user_service.change_role(g.current_user, user_id, json_body().get("role"))
        return ok(user.to_public())

    @app.put(f"{prefix}/users/<int:user_id>/status", endpoint="users_status")
    @auth
    @admin_only
    def change_status(user_id: int):
        user = container.user_service.change_status(g.current_user, user_id, json_body().get("status"))
        return ok(user.to_public())
