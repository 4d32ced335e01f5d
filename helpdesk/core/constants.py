# helpdesk/core/constants.py

# ==========================================================
# REDIRECT TARGETS
# ==========================================================
LOGIN_URL = "/auth/login"
DASHBOARD_URL = "/admin/dashboard"

# ==========================================================
# FLASH MESSAGES (shown to the client, never internal detail)
# ==========================================================
MSG_UNAUTHORIZED = "Please log in to access this page"
MSG_FORBIDDEN = "You do not have permission to access this page"
MSG_SUPER_ADMIN_REQUIRED = "Super admin access required"

MSG_LOGIN_SUCCESS = "Welcome back!"
MSG_LOGIN_FAILED = "Invalid username or password"
MSG_LOGIN_ERROR = "Login is temporarily unavailable. Please try again."
MSG_LOGIN_RATE_LIMITED = "Too many login attempts. Please try again in 15 minutes."
MSG_LOGOUT_SUCCESS = "You have been logged out"

LOGIN_FIELD_MESSAGES = {
    "username": "Username is required",
    "password": "Password is required",
}

# ==========================================================
# AUDIT TRAIL
# ==========================================================
AUDIT_DEFAULT_LIMIT = 50

ACTION_FLOOR_CREATED = "FLOOR_CREATED"
ACTION_FLOOR_UPDATED = "FLOOR_UPDATED"
ACTION_FLOOR_DEACTIVATED = "FLOOR_DEACTIVATED"
ACTION_FLOOR_REACTIVATED = "FLOOR_REACTIVATED"
ACTION_DEPARTMENT_CREATED = "DEPARTMENT_CREATED"
ACTION_USER_CREATED = "USER_CREATED"
ACTION_USER_STATUS_CHANGED = "USER_STATUS_CHANGED"
ACTION_PASSWORD_CHANGED = "PASSWORD_CHANGED"

TARGET_FLOOR = "floor"
TARGET_DEPARTMENT = "department"
TARGET_USER = "user"
