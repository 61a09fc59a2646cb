from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "TaskTrackr"
    debug: bool = True
    database_url: str = Field("sqlite:///./tasktrackr.db", validation_alias="DATABASE_URL")
    jwt_secret: str = Field("DevSecretKeyChangeMe", validation_alias="JWT_SECRET_KEY")
    jwt_issuer: str = "tasktrackr.local"
    jwt_expire_days: int = 7
    frontend_origin: str = "http://localhost:5173"
    schedule_day_start_hour: int = 9
    default_estimated_hours: int = 4


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
