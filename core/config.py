from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, model_validator

# Plain-http environments; everything else gets Secure cookies unless told otherwise
INSECURE_ENVS = ("development", "testing")

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./url_shortener.db"
    SECRET_KEY: str
    SESSION_SECRET: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    VERIFY_EMAIL_TOKEN_EXPIRE_DAYS: int = 1
    OAUTH_EXCHANGE_EXPIRE_MINUTES: int = 10
    COOKIE_SECURE: Optional[bool] = None
    FRONTEND_URL: str = "http://localhost:8000"
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "no-reply@localhost"
    MAIL_SERVER: str = "localhost"
    MAIL_PORT: int = 587
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @model_validator(mode="after")
    def default_cookie_secure(self):
        if self.COOKIE_SECURE is None:
            self.COOKIE_SECURE = self.ENV not in INSECURE_ENVS
        return self


settings = Settings()
