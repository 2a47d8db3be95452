from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.enums import MissingDayPolicy
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .identity.factory import IdentityStrategyFactory
from .identity.resolver import IdentityResolver
from .identity.tokens import TokenIssuer
from .realtime.publisher import AttendanceEvents, EventPublisher
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: UserRepository
    courses_repo: CourseRepository
    attendance_repo: AttendanceRepository

    identity_resolver: IdentityResolver
    auth_service: AuthService
    user_service: UserService
    course_service: CourseService
    attendance_service: AttendanceService


def wire_services(
    *,
    conn,
    users_repo: UserRepository,
    courses_repo: CourseRepository,
    attendance_repo: AttendanceRepository,
    publisher: EventPublisher,
    identity_factory: IdentityStrategyFactory,
    tokens: TokenIssuer,
    missing_day_policy: MissingDayPolicy = MissingDayPolicy.EXCLUDE,
) -> Container:
    """Assemble services over the given repositories (MySQL in production, fakes in tests)."""

    identity_resolver = IdentityResolver(identity_factory.build(users_repo))
    course_service = CourseService(courses_repo, users_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        courses_repo=courses_repo,
        attendance_repo=attendance_repo,
        identity_resolver=identity_resolver,
        auth_service=AuthService(users_repo, tokens, enabled=identity_resolver.supports_local_credentials),
        user_service=UserService(users_repo),
        course_service=course_service,
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            course_service,
            AttendanceEvents(publisher),
            missing_day_policy=missing_day_policy,
        ),
    )


def build_container(
    *,
    db_config: dict,
    publisher: EventPublisher,
    identity_factory: IdentityStrategyFactory,
    tokens: TokenIssuer,
    missing_day_policy: MissingDayPolicy = MissingDayPolicy.EXCLUDE,
    readiness_cache_seconds: float = 5,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connect_timeout=int(db_config.get("connect_timeout", 8)),
    )
    conn = DatabaseConnection.get_instance(config, readiness_cache_seconds=readiness_cache_seconds)

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        publisher=publisher,
        identity_factory=identity_factory,
        tokens=tokens,
        missing_day_policy=missing_day_policy,
    )
