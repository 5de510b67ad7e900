from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Identifies the client library to the log collection endpoint
    TOOLTELEMETRY_CLIENT_TYPE: str = "DESKTOP"
    # Log source id assigned by the collection endpoint
    TOOLTELEMETRY_LOG_SOURCE: int = 0

    # When set, the recorder runs tools without emitting any log lines
    TOOLTELEMETRY_DISABLED: bool = False

    class Config:
        # Values in a local .env override the defaults; real env vars win over both
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
