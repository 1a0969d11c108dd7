"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Day-of-week numbering used by schedules: 0 = Sunday ... 6 = Saturday.
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

TOKEN_PAYLOAD_FIELDS = ("student_id", "uuid", "academic_year_id", "semester_id", "issued_at", "sig")

DEFAULT_OVERRIDE_LIST_LIMIT = 200
DEFAULT_QR_BOX_SIZE = 8
DEFAULT_QR_BORDER = 2
