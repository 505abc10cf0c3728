"""Canonical field and collection limits for tasks and users."""

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

# Ceiling on the number of stored tasks; creation is refused once reached.
TASK_LIMIT = 100

LIST_DEFAULT_LIMIT = 100
LIST_MAX_LIMIT = 100
# Signed 64-bit ceiling; SQL drivers reject larger OFFSET values.
LIST_MAX_OFFSET = 2**63 - 1

PASSWORD_MIN_LENGTH = 6
SESSION_TTL_SECONDS = 24 * 60 * 60

# Listing path the view layer caches; mutations invalidate it.
TASKS_PATH = "/tasks"
