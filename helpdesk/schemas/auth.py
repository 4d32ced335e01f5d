from pydantic import BaseModel, Field, field_validator

from helpdesk.models.enums import UserRole


# -------------------------------------------------------------------
# LOGIN REQUEST
# Username is trimmed, password is kept exactly as typed.
# No complexity or length rules on the password: any non-empty value is
# checked against the stored hash (long inputs are pre-hashed).
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


# -------------------------------------------------------------------
# SESSION SNAPSHOT
# The only user data persisted in the session store.
# -------------------------------------------------------------------
class SessionSnapshot(BaseModel):
    id: int
    username: str
    email: str
    role: UserRole

    class Config:
        extra = "forbid"
        frozen = True
