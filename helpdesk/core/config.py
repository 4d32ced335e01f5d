from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    ENV: str = "dev"  # "dev", "test" or "prod"

    # Sessions are kept server-side; the cookie only carries the opaque session id
    SESSION_COOKIE_NAME: str = "helpdesk_session"
    SESSION_MAX_AGE_SECONDS: int = 8 * 60 * 60
    SESSION_COOKIE_SECURE: bool = False

    # Shared by the session store and the login rate limiter when set
    REDIS_URL: str | None = None

    # --- LOGIN PROTECTION ---
    LOGIN_RATE_LIMIT: str = "10/15 minutes"
    MAX_LOGIN_ATTEMPTS: int = 5
    BCRYPT_ROUNDS: int = 12

    # --- BOOTSTRAP ACCOUNT ---
    SUPER_ADMIN_USERNAME: str | None = None
    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
