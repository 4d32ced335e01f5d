import re
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from helpdesk.models.enums import UserRole, UserStatus

# At least one lowercase, one uppercase, one digit and one special character, 8+ chars
PASSWORD_REGEX = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]).{8,}$"
)

PASSWORD_TOO_SHORT = "Password must be at least 8 characters long"
PASSWORD_COMPLEXITY = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number and one special character"
)


def check_password_rules(password: str) -> str:
    if len(password) < 8:
        raise ValueError(PASSWORD_TOO_SHORT)
    if not PASSWORD_REGEX.match(password):
        raise ValueError(PASSWORD_COMPLEXITY)
    return password


# ---------------------------------------------------------
# CREATE USER (super admin provisions accounts)
# ---------------------------------------------------------
class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str
    role: UserRole
    department_id: Optional[int] = None   # required for department accounts

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_rules(cls, value: str) -> str:
        return check_password_rules(value)


# ---------------------------------------------------------
# STATUS CHANGE
# ---------------------------------------------------------
class UserStatusUpdate(BaseModel):
    status: UserStatus


# ---------------------------------------------------------
# CHANGE OWN PASSWORD
# ---------------------------------------------------------
class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_rules(cls, value: str) -> str:
        return check_password_rules(value)

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info) -> str:
        if "new_password" in info.data and value != info.data["new_password"]:
            raise ValueError("Passwords do not match")
        return value

