"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_JWT_EXPIRE_DAYS = 30
DEFAULT_IDP_TIMEOUT_SECONDS = 5
DEFAULT_READINESS_CACHE_SECONDS = 5
MIN_PASSWORD_LENGTH = 6
MAX_COURSE_CODE_LENGTH = 32
SELF_COURSE_PREFIX = "SELF-"
SELF_COURSE_NAME = "Self Attendance"
SELF_COURSE_DESCRIPTION = "Auto-created self-attendance course"

EVENT_ATTENDANCE_UPDATE = "attendance:update"
EVENT_ATTENDANCE_DELETE = "attendance:delete"

CONFLICT_MESSAGE = "Attendance record already exists for this student, course, and date"
